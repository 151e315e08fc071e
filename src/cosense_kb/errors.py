"""Structured errors for the ckb command line.

The parsing and graph layers never raise; these errors describe failures
of the surrounding plumbing (missing export file, bad JSON, unknown page,
bad command line).
"""

from __future__ import annotations

import json
from enum import Enum
from typing import Any

import click

from .config import ConfigurationError
from .parser.export import ExportError


class ErrorCode(str, Enum):
    """Stable error codes emitted by ``ckb --json-errors``."""

    # Export and lookups
    EXPORT_NOT_FOUND = "EXPORT_NOT_FOUND"
    EXPORT_PARSE_ERROR = "EXPORT_PARSE_ERROR"
    PAGE_NOT_FOUND = "PAGE_NOT_FOUND"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"

    # Command line usage
    INVALID_ARGUMENT = "INVALID_ARGUMENT"
    MISSING_ARGUMENT = "MISSING_ARGUMENT"
    UNKNOWN_OPTION = "UNKNOWN_OPTION"
    USAGE_ERROR = "USAGE_ERROR"
    CLI_ERROR = "CLI_ERROR"

    INTERNAL_ERROR = "INTERNAL_ERROR"


# Checked in order; subclasses before their bases
# (MissingParameter and NoSuchOption are UsageErrors, MissingParameter a BadParameter).
_EXCEPTION_CODES: tuple[tuple[type[BaseException], ErrorCode], ...] = (
    (FileNotFoundError, ErrorCode.EXPORT_NOT_FOUND),
    (ExportError, ErrorCode.EXPORT_PARSE_ERROR),
    (ConfigurationError, ErrorCode.CONFIGURATION_ERROR),
    (click.MissingParameter, ErrorCode.MISSING_ARGUMENT),
    (click.BadParameter, ErrorCode.INVALID_ARGUMENT),
    (click.NoSuchOption, ErrorCode.UNKNOWN_OPTION),
    (click.UsageError, ErrorCode.USAGE_ERROR),
    (click.ClickException, ErrorCode.CLI_ERROR),
    (ValueError, ErrorCode.INVALID_ARGUMENT),
)


def error_code_for(exc: BaseException) -> ErrorCode:
    """Error code for an exception that is not already a CosenseKBError."""
    if isinstance(exc, CosenseKBError):
        return exc.code
    for exc_type, code in _EXCEPTION_CODES:
        if isinstance(exc, exc_type):
            return code
    return ErrorCode.INTERNAL_ERROR


class CosenseKBError(Exception):
    """An error with a machine-readable code and optional details."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        error: dict[str, Any] = {"code": self.code.value, "message": self.message}
        if self.details:
            error["details"] = self.details
        return {"error": error}

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False)


def format_error_json(code: ErrorCode, message: str, details: dict[str, Any] | None = None) -> str:
    """Format an error as JSON for --json-errors output."""
    return CosenseKBError(code, message, details).to_json()
