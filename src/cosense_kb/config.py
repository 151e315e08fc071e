"""Configuration management for cosense-kb.

This module contains all configurable constants for the archiver.
Magic numbers are documented here rather than scattered throughout the codebase.
"""

import os
from pathlib import Path
from typing import Any


class ConfigurationError(Exception):
    """Raised when required configuration is missing or invalid."""

    pass


# =============================================================================
# Project Config Discovery
# =============================================================================

# Per-project YAML config file. Looked up from cwd towards the filesystem root.
# Keys: export_path (relative to the config file), related_limit.
CONFIG_FILENAME = ".ckbconfig"

# Maximum number of parent directories inspected for CONFIG_FILENAME
MAX_CONFIG_SEARCH_DEPTH = 10


# =============================================================================
# Related Pages
# =============================================================================

# Maximum number of two-hop pages shown in a page's "related pages" block.
# One-hop links are never truncated; two-hop neighbourhoods of hub pages
# can reach thousands of titles.
RELATED_PAGES_LIMIT = 20


# =============================================================================
# Export Defaults
# =============================================================================

# Label used when the export is the simplified import format (no displayName)
DEFAULT_PROJECT_LABEL = "Cosense Archive"


def _discover_project_config(
    start_dir: Path | None = None,
    max_depth: int = MAX_CONFIG_SEARCH_DEPTH,
) -> tuple[Path, dict[str, Any]] | None:
    """Walk up from start_dir looking for a readable .ckbconfig.

    Args:
        start_dir: Directory to start from (defaults to cwd)
        max_depth: Maximum directories to traverse up

    Returns:
        Tuple of (config_path, data) if found, None otherwise.
    """
    import yaml

    current = Path(start_dir or os.getcwd()).resolve()

    for _ in range(max_depth):
        config_file = current / CONFIG_FILENAME
        if config_file.exists():
            try:
                content = config_file.read_text(encoding="utf-8")
                data = yaml.safe_load(content) or {}
                if isinstance(data, dict):
                    return (config_file, data)
            except (OSError, yaml.YAMLError):
                pass

        parent = current.parent
        if parent == current:  # Reached filesystem root
            break
        current = parent

    return None


def get_export_path(explicit: str | Path | None = None) -> Path:
    """Get the Cosense export JSON file to operate on.

    Discovery order:
    1. Explicit argument (``ckb --export``)
    2. COSENSE_KB_EXPORT environment variable
    3. export_path in the nearest .ckbconfig
    4. Error with helpful message

    Raises:
        ConfigurationError: If no export can be located.
    """
    if explicit:
        return Path(explicit)

    env_path = os.environ.get("COSENSE_KB_EXPORT")
    if env_path:
        return Path(env_path)

    project_config = _discover_project_config()
    if project_config:
        config_path, data = project_config
        export_path = data.get("export_path")
        if export_path:
            return (config_path.parent / str(export_path)).resolve()

    raise ConfigurationError(
        "No Cosense export configured. Options:\n"
        "  1. Pass --export path/to/export.json\n"
        "  2. Set COSENSE_KB_EXPORT to the export file\n"
        f"  3. Add 'export_path: export.json' to a {CONFIG_FILENAME} file"
    )


def get_related_limit() -> int:
    """Get the two-hop cap for related pages.

    Discovery order:
    1. COSENSE_KB_RELATED_LIMIT environment variable
    2. related_limit in the nearest .ckbconfig
    3. RELATED_PAGES_LIMIT

    Raises:
        ConfigurationError: If the configured value is not a non-negative integer.
    """
    raw: Any = os.environ.get("COSENSE_KB_RELATED_LIMIT")
    source = "COSENSE_KB_RELATED_LIMIT"

    if raw is None:
        project_config = _discover_project_config()
        if project_config and "related_limit" in project_config[1]:
            raw = project_config[1]["related_limit"]
            source = str(project_config[0])

    if raw is None:
        return RELATED_PAGES_LIMIT

    try:
        limit = int(raw)
    except (TypeError, ValueError):
        raise ConfigurationError(f"related_limit must be an integer (from {source}): {raw!r}")

    if limit < 0:
        raise ConfigurationError(f"related_limit must not be negative (from {source}): {limit}")
    return limit
