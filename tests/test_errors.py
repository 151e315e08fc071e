"""Tests for error codes and JSON error formatting."""

import json

import click
import pytest

from cosense_kb.config import ConfigurationError
from cosense_kb.errors import CosenseKBError, ErrorCode, error_code_for, format_error_json
from cosense_kb.parser.export import ExportError


class TestErrorCodeFor:
    @pytest.mark.parametrize(
        "exc,expected",
        [
            (FileNotFoundError("gone"), ErrorCode.EXPORT_NOT_FOUND),
            (ExportError("x.json", "bad"), ErrorCode.EXPORT_PARSE_ERROR),
            (ConfigurationError("unset"), ErrorCode.CONFIGURATION_ERROR),
            (click.MissingParameter(param_type="argument"), ErrorCode.MISSING_ARGUMENT),
            (click.BadParameter("nope"), ErrorCode.INVALID_ARGUMENT),
            (click.NoSuchOption("--nope"), ErrorCode.UNKNOWN_OPTION),
            (click.UsageError("wrong"), ErrorCode.USAGE_ERROR),
            (click.ClickException("boom"), ErrorCode.CLI_ERROR),
            (ValueError("limit"), ErrorCode.INVALID_ARGUMENT),
            (RuntimeError("unexpected"), ErrorCode.INTERNAL_ERROR),
        ],
    )
    def test_mapping(self, exc, expected):
        assert error_code_for(exc) is expected

    def test_structured_error_keeps_its_code(self):
        error = CosenseKBError(ErrorCode.PAGE_NOT_FOUND, "Page not found: X")
        assert error_code_for(error) is ErrorCode.PAGE_NOT_FOUND

    def test_every_code_is_its_own_value(self):
        for code in ErrorCode:
            assert code.value == code.name


class TestFormatting:
    def test_to_dict_without_details(self):
        error = CosenseKBError(ErrorCode.PAGE_NOT_FOUND, "Page not found: X")
        assert error.to_dict() == {"error": {"code": "PAGE_NOT_FOUND", "message": "Page not found: X"}}

    def test_details_and_non_ascii(self):
        payload = json.loads(
            CosenseKBError(
                ErrorCode.PAGE_NOT_FOUND, "ページ", {"similar_titles": ["ページA"]}
            ).to_json()
        )
        assert payload["error"]["details"] == {"similar_titles": ["ページA"]}
        assert payload["error"]["message"] == "ページ"

    def test_format_error_json(self):
        payload = json.loads(format_error_json(ErrorCode.INTERNAL_ERROR, "boom"))
        assert payload == {"error": {"code": "INTERNAL_ERROR", "message": "boom"}}
