"""Centralized path management for ctxpatch configuration and output files."""

from pathlib import Path

# Directory name for ctxpatch configuration and reports
CTXPATCH_DIR = ".ctxpatch"

# File names within the .ctxpatch directory
CONFIG_FILE = "config.json"
REPORT_FILE = "report.json"

# TOML alternative looked up at the project root
TOML_CONFIG_FILE = "ctxpatch.toml"

# Appended to a source file path to name its patch artifact
PATCH_SUFFIX = ".patch"


def get_ctxpatch_dir(project_path: Path) -> Path:
    """Get the .ctxpatch directory path for a project."""
    return project_path / CTXPATCH_DIR


def ensure_ctxpatch_dir(project_path: Path) -> Path:
    """Ensure .ctxpatch directory exists and return its path."""
    ctxpatch_dir = get_ctxpatch_dir(project_path)
    ctxpatch_dir.mkdir(parents=True, exist_ok=True)
    return ctxpatch_dir


def get_config_path(project_path: Path) -> Path:
    """Get the config.json path for a project."""
    return get_ctxpatch_dir(project_path) / CONFIG_FILE


def get_report_path(project_path: Path) -> Path:
    """Get the report.json path for a project."""
    return get_ctxpatch_dir(project_path) / REPORT_FILE


def find_config(project_path: Path) -> Path | None:
    """Find a config file: .ctxpatch/config.json first, then ctxpatch.toml."""
    for candidate in (get_config_path(project_path), project_path / TOML_CONFIG_FILE):
        if candidate.is_file():
            return candidate
    return None


def get_patch_path(source_path: Path) -> Path:
    """Get the patch artifact path for a source file: <file>.patch beside it."""
    return source_path.with_name(source_path.name + PATCH_SUFFIX)
