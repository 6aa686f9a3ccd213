"""Configuration loading and saving for ctxpatch."""

import json
import os
from pathlib import Path

import tomli

from ctxpatch.errors import ConfigError
from ctxpatch.exclusion import DEFAULT_EXCLUDES
from ctxpatch.models.context import ContextSettings

DEFAULT_MAX_DEPTH = 128
PATCH_MODES = ("append", "truncate")

# Ordered (description, pattern) pairs; the first match marks a call terminal
DEFAULT_IGNORE_RULES: list[dict[str, str]] = [
    {"description": "builtin len", "pattern": r"len\("},
    {"description": "builtin append", "pattern": r"append\("},
    {"description": "tracing span lookup", "pattern": r"SpanFromContext\("},
    {"description": "tracing tag", "pattern": r"SetTag\("},
    {"description": "tracing scheme helper", "pattern": r"SchemeWithSpan\("},
    {"description": "immediately invoked func literal", "pattern": r"func *\( *\)"},
    {"description": "String() getter", "pattern": r"String *\( *\)"},
    {"description": "strings.TrimSpace", "pattern": r"TrimSpace *\("},
    {"description": "context value accessor", "pattern": r"ctx\.GetValue\("},
    {"description": "context user id accessor", "pattern": r"contextvals\.GetUserId\("},
]


def load_config(config_path: Path) -> dict:
    """Load a JSON or TOML configuration file."""
    try:
        if config_path.suffix == ".toml":
            with open(config_path, "rb") as f:
                return tomli.load(f)
        with open(config_path, "r", encoding="utf-8") as f:
            return json.load(f)
    except OSError as e:
        raise ConfigError(f"cannot read config {config_path}: {e}") from e
    except (json.JSONDecodeError, tomli.TOMLDecodeError) as e:
        raise ConfigError(f"invalid config {config_path}: {e}") from e


def save_config(config: dict, config_path: Path) -> None:
    """Save configuration as JSON."""
    with open(config_path, "w", encoding="utf-8") as f:
        json.dump(config, f, indent=2)


def default_config() -> dict:
    """Every setting with its default value, as written by `ctxpatch init`."""
    context = ContextSettings()
    return {
        "workspace": {
            "root": str(default_workspace_root()),
            "exclude": list(DEFAULT_EXCLUDES),
        },
        "traversal": {"max_depth": DEFAULT_MAX_DEPTH},
        "context": {
            "variable": context.variable,
            "type": context.type,
            "background": context.background,
            "suffix": context.suffix,
        },
        "rewrite": {"rename_identifier_calls": context.rename_identifier_calls},
        "ignore": {"rules": [dict(rule) for rule in DEFAULT_IGNORE_RULES]},
        "patch": {"mode": "append"},
    }


def default_workspace_root() -> Path:
    """$GOPATH/src, falling back to ~/go/src."""
    gopath = os.environ.get("GOPATH")
    if gopath:
        # GOPATH may list several roots; the first one wins
        return Path(gopath.split(os.pathsep)[0]) / "src"
    return Path.home() / "go" / "src"


def get_workspace_root(config: dict) -> Path:
    """Get the directory import specifiers are resolved under."""
    root = config.get("workspace", {}).get("root")
    return Path(root).expanduser() if root else default_workspace_root()


def get_source_excludes(config: dict) -> list[str]:
    """Get extra exclude patterns for package scans (test files are always excluded)."""
    return config.get("workspace", {}).get("exclude", [])


def get_max_depth(config: dict) -> int:
    """Get the traversal depth ceiling."""
    value = config.get("traversal", {}).get("max_depth", DEFAULT_MAX_DEPTH)
    if not isinstance(value, int) or value < 1:
        raise ConfigError(f"traversal.max_depth must be a positive integer, got {value!r}")
    return value


def get_ignore_rules(config: dict) -> list[dict[str, str]]:
    """Get ignore rules as an ordered list of {description, pattern} mappings.

    A mapping of description -> pattern is accepted as well.
    """
    rules = config.get("ignore", {}).get("rules", DEFAULT_IGNORE_RULES)
    if isinstance(rules, dict):
        return [{"description": d, "pattern": p} for d, p in rules.items()]
    normalized: list[dict[str, str]] = []
    for rule in rules:
        if isinstance(rule, str):
            normalized.append({"description": rule, "pattern": rule})
        elif isinstance(rule, dict) and "pattern" in rule:
            normalized.append(
                {"description": rule.get("description", rule["pattern"]), "pattern": rule["pattern"]}
            )
        else:
            raise ConfigError(f"invalid ignore rule: {rule!r}")
    return normalized


def get_context_settings(config: dict) -> ContextSettings:
    """Get the context parameter settings."""
    defaults = ContextSettings()
    context = config.get("context", {})
    return ContextSettings(
        variable=context.get("variable", defaults.variable),
        type=context.get("type", defaults.type),
        background=context.get("background", defaults.background),
        suffix=context.get("suffix", defaults.suffix),
        rename_identifier_calls=config.get("rewrite", {}).get(
            "rename_identifier_calls", defaults.rename_identifier_calls
        ),
    )


def get_patch_mode(config: dict) -> str:
    """Get the patch writing mode: "append" or "truncate"."""
    mode = config.get("patch", {}).get("mode", "append")
    if mode not in PATCH_MODES:
        raise ConfigError(f"patch.mode must be one of {PATCH_MODES}, got {mode!r}")
    return mode
