"""Exclusion of source files when scanning a package directory.

Uses the pathspec library for gitignore-style matching. Test files are
always excluded; callers may add further patterns (e.g. generated code).
"""

from dataclasses import dataclass, field
from pathlib import Path

import pathspec


@dataclass
class ExclusionConfig:
    """Configuration for file exclusion."""

    default_patterns: list[str] = field(default_factory=list)
    extra_patterns: list[str] = field(default_factory=list)


# Test files never contribute declarations to a package
DEFAULT_EXCLUDES = [
    "*_test.go",
]

SOURCE_GLOB = "*.go"


class SourceExcluder:
    """Decides which files in a package directory are parsed."""

    def __init__(self, extra_excludes: list[str] | None = None) -> None:
        """Initialize the source excluder.

        Args:
            extra_excludes: Additional gitignore-style patterns to exclude.
        """
        self._config = ExclusionConfig(
            default_patterns=list(DEFAULT_EXCLUDES),
            extra_patterns=list(extra_excludes or []),
        )
        self._spec = pathspec.PathSpec.from_lines("gitignore", self.patterns)

    def should_exclude(self, file_path: Path) -> bool:
        """Check if a file should be excluded.

        Patterns are matched against the file name, since a package is a
        single flat directory.
        """
        return self._spec.match_file(file_path.name)

    def source_files(self, directory: Path) -> list[Path]:
        """List the non-excluded Go files of a directory, sorted by name.

        Raises:
            OSError: If the directory cannot be listed.
        """
        files = [
            entry
            for entry in directory.iterdir()
            if entry.is_file() and entry.match(SOURCE_GLOB)
        ]
        return sorted(f for f in files if not self.should_exclude(f))

    @property
    def patterns(self) -> list[str]:
        """Return all loaded patterns (for debugging)."""
        return self._config.default_patterns + self._config.extra_patterns
