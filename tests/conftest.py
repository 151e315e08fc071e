"""Shared test fixtures for the cosense-kb test suite.

Design:
- export_file: writes a small Cosense export into a temp directory
- runner: CliRunner; COSENSE_KB_* variables are cleared for every test
- make_page: builds CosensePage objects with the title as line zero
"""

import json
import logging
from pathlib import Path
from typing import Generator

import pytest
from click.testing import CliRunner

from cosense_kb.models import CosensePage

# ─────────────────────────────────────────────────────────────────────────────
# Sample data
# ─────────────────────────────────────────────────────────────────────────────

SAMPLE_EXPORT = {
    "name": "sample-project",
    "displayName": "Sample Project",
    "exported": 1700000000,
    "users": [
        {
            "id": "user1",
            "name": "alice",
            "displayName": "Alice",
            "email": "alice@example.com",
        }
    ],
    "pages": [
        {
            "title": "Python",
            "created": 1700000000,
            "updated": 1700000100,
            "lines": [
                "Python",
                "A language, see [Testing] and #tooling",
                "[* https://gyazo.com/abc123]",
            ],
        },
        {
            "title": "Testing",
            "created": 1700000000,
            "updated": 1700000200,
            "lines": [
                {"text": "Testing", "created": 1700000000, "updated": 1700000000},
                {"text": "Use [pytest] with [Python]", "created": 1700000001, "updated": 1700000002},
                {"text": "[[Fixtures]] are #tooling too", "created": 1700000003, "updated": 1700000004},
            ],
        },
        {
            "title": "tooling",
            "lines": ["tooling", "code:setup.py", " import [not a link]", "[https://example.com/x.png]"],
        },
        {
            "title": "Orphan",
            "lines": ["Orphan", "no links here"],
        },
    ],
}


# ─────────────────────────────────────────────────────────────────────────────
# Core Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Generator[None, None, None]:
    """Clear COSENSE_KB_* settings and run from an empty directory."""
    for name in (
        "COSENSE_KB_EXPORT",
        "COSENSE_KB_RELATED_LIMIT",
        "COSENSE_KB_LOG_LEVEL",
        "COSENSE_KB_QUIET",
    ):
        monkeypatch.delenv(name, raising=False)

    workdir = tmp_path / "cwd"
    workdir.mkdir()
    monkeypatch.chdir(workdir)

    yield

    # Handlers bound to CliRunner's captured streams must not outlive the test
    package_logger = logging.getLogger("cosense_kb")
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
    package_logger.setLevel(logging.NOTSET)


@pytest.fixture
def runner() -> CliRunner:
    """CLI runner with isolated environment."""
    return CliRunner()


@pytest.fixture
def export_file(tmp_path: Path) -> Path:
    """SAMPLE_EXPORT written to a temp file."""
    path = tmp_path / "export.json"
    path.write_text(json.dumps(SAMPLE_EXPORT, ensure_ascii=False), encoding="utf-8")
    return path


# ─────────────────────────────────────────────────────────────────────────────
# Helper Functions (for test code, not fixtures)
# ─────────────────────────────────────────────────────────────────────────────


def make_page(title: str, lines: list[str]) -> CosensePage:
    """Build a page whose first line repeats the title, as exports do."""
    return CosensePage(title=title, created=1700000000, updated=1700000000, lines=[title, *lines])
