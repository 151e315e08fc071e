"""Tests for export path and related-limit configuration."""

from __future__ import annotations

from pathlib import Path

import pytest

from cosense_kb.config import (
    CONFIG_FILENAME,
    RELATED_PAGES_LIMIT,
    ConfigurationError,
    get_export_path,
    get_related_limit,
)


def _write_config(directory: Path, content: str) -> Path:
    path = directory / CONFIG_FILENAME
    path.write_text(content, encoding="utf-8")
    return path


class TestExportPath:
    def test_explicit_wins(self, monkeypatch):
        monkeypatch.setenv("COSENSE_KB_EXPORT", "/env/export.json")
        assert get_export_path("given.json") == Path("given.json")

    def test_env_var(self, monkeypatch):
        monkeypatch.setenv("COSENSE_KB_EXPORT", "/env/export.json")
        assert get_export_path() == Path("/env/export.json")

    def test_config_path_is_relative_to_config_file(self, tmp_path, monkeypatch):
        project = tmp_path / "project"
        nested = project / "notes" / "deep"
        nested.mkdir(parents=True)
        _write_config(project, "export_path: data/export.json\n")
        monkeypatch.chdir(nested)

        assert get_export_path() == (project / "data" / "export.json").resolve()

    def test_unreadable_config_is_skipped(self, tmp_path, monkeypatch):
        _write_config(tmp_path, "export_path: [unclosed\n")
        monkeypatch.chdir(tmp_path)

        with pytest.raises(ConfigurationError):
            get_export_path()

    def test_nothing_configured(self):
        with pytest.raises(ConfigurationError, match="No Cosense export configured"):
            get_export_path()


class TestRelatedLimit:
    def test_default(self):
        assert get_related_limit() == RELATED_PAGES_LIMIT

    def test_env_var(self, monkeypatch):
        monkeypatch.setenv("COSENSE_KB_RELATED_LIMIT", "5")
        assert get_related_limit() == 5

    def test_config_file(self, tmp_path, monkeypatch):
        _write_config(tmp_path, "related_limit: 7\n")
        monkeypatch.chdir(tmp_path)
        assert get_related_limit() == 7

    def test_env_var_overrides_config(self, tmp_path, monkeypatch):
        _write_config(tmp_path, "related_limit: 7\n")
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("COSENSE_KB_RELATED_LIMIT", "3")
        assert get_related_limit() == 3

    @pytest.mark.parametrize("value", ["many", "2.5"])
    def test_not_an_integer(self, monkeypatch, value):
        monkeypatch.setenv("COSENSE_KB_RELATED_LIMIT", value)
        with pytest.raises(ConfigurationError, match="must be an integer"):
            get_related_limit()

    def test_negative(self, tmp_path, monkeypatch):
        _write_config(tmp_path, "related_limit: -1\n")
        monkeypatch.chdir(tmp_path)

        with pytest.raises(ConfigurationError, match="must not be negative") as exc_info:
            get_related_limit()
        assert CONFIG_FILENAME in str(exc_info.value)
