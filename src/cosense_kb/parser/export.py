"""Cosense JSON export loading and validation."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from ..models import CosenseExport

log = logging.getLogger(__name__)


class ExportError(Exception):
    """Raised when an export file cannot be read or does not match the format."""

    def __init__(self, source: Path | str | None, message: str) -> None:
        self.source = source
        self.message = message
        prefix = f"{source}: " if source is not None else ""
        super().__init__(f"{prefix}{message}")


def parse_export(json_text: str, source: Path | str | None = None) -> CosenseExport:
    """Parse and validate export JSON.

    Accepts both the full export format (name, displayName, users, pages)
    and the simplified import format (pages only).

    Args:
        json_text: JSON document.
        source: Where the JSON came from, used in error messages.

    Returns:
        Validated export.

    Raises:
        ExportError: If the JSON is malformed or does not match the format.
    """
    try:
        data = json.loads(json_text)
    except json.JSONDecodeError as e:
        raise ExportError(source, f"Invalid JSON: {e}") from e

    if not isinstance(data, dict) or "pages" not in data:
        raise ExportError(source, "Invalid Cosense JSON: pages array is required")

    if not isinstance(data["pages"], list):
        raise ExportError(source, "Invalid Cosense JSON: pages must be an array")

    try:
        export = CosenseExport.model_validate(data)
    except ValidationError as e:
        errors = []
        for error in e.errors():
            loc = ".".join(str(x) for x in error["loc"])
            msg = error["msg"]
            errors.append(f"  - {loc}: {msg}")
        raise ExportError(source, "Invalid Cosense JSON:\n" + "\n".join(errors)) from e

    return export


def load_export(path: Path) -> CosenseExport:
    """Load an export file.

    Raises:
        FileNotFoundError: If the file does not exist.
        ExportError: If the file cannot be decoded or validated.
    """
    if not path.exists():
        raise FileNotFoundError(f"Export file not found: {path}")

    if not path.is_file():
        raise ExportError(path, "Path is not a file")

    try:
        json_text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ExportError(path, f"Failed to read export: {e}") from e

    export = parse_export(json_text, source=path)
    log.info("Loaded %d pages from %s", len(export.pages), path)
    return export
