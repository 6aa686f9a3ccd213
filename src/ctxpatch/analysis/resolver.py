"""Resolution of import specifiers to parsed packages."""

from __future__ import annotations

import logging
from pathlib import Path

from ctxpatch.exclusion import SourceExcluder
from ctxpatch.models.graph import CompilationUnit, Package, PackageStatus, UnitStatus
from ctxpatch.syntax import GoParser

logger = logging.getLogger(__name__)


def strip_quotes(specifier: str) -> str:
    """Remove the quoting of an import path literal ("..." or `...`)."""
    return specifier.strip().strip('"`')


class PackageResolver:
    """Maps import specifiers to package directories under a workspace root.

    Every package is parsed once; the cache is keyed by absolute directory
    path, so two specifiers naming the same directory share one Package.
    """

    def __init__(
        self,
        workspace_root: Path,
        parser: GoParser | None = None,
        excluder: SourceExcluder | None = None,
    ) -> None:
        self.workspace_root = workspace_root.resolve()
        self.parser = parser or GoParser()
        self.excluder = excluder or SourceExcluder()

        # Cache of absolute package path -> Package
        self._cache: dict[Path, Package] = {}

    @property
    def packages(self) -> dict[Path, Package]:
        return dict(self._cache)

    def package_path(self, specifier: str) -> Path:
        """Absolute directory an import specifier points at."""
        return (self.workspace_root / strip_quotes(specifier)).resolve()

    def resolve(self, specifier: str) -> Package:
        """Resolve an import specifier to a (possibly unavailable) Package."""
        pkg_path = self.package_path(specifier)
        if pkg_path in self._cache:
            return self._cache[pkg_path]

        package = self._load_package(pkg_path)
        self._cache[pkg_path] = package
        return package

    def _load_package(self, pkg_path: Path) -> Package:
        if not pkg_path.is_dir():
            logger.debug("Package directory not found: %s", pkg_path)
            return Package(path=pkg_path, status=PackageStatus.DIRECTORY_MISSING)

        try:
            files = self.excluder.source_files(pkg_path)
        except OSError as e:
            logger.warning("Failed to scan package directory %s: %s", pkg_path, e)
            return Package(path=pkg_path, status=PackageStatus.SCAN_FAILED)

        package = Package(path=pkg_path, status=PackageStatus.RESOLVED)
        for filename in files:
            unit = self.parse_unit(filename)
            package.units.append(unit)

            unit_pkg = unit.package_name
            if unit.status is not UnitStatus.PARSED or not unit_pkg:
                continue
            if package.name is None:
                package.name = unit_pkg
            elif package.name != unit_pkg:
                logger.warning(
                    "Package name conflict in %s: package %s, but %s declares %s",
                    pkg_path,
                    package.name,
                    filename.name,
                    unit_pkg,
                )

        logger.debug("Resolved package %s (%d files)", pkg_path, len(package.units))
        return package

    def parse_unit(self, path: Path) -> CompilationUnit:
        """Parse one file, recording failures on the unit instead of raising."""
        path = path.resolve()
        try:
            source = self.parser.parse(path)
            source.data.decode("utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Failed to read %s: %s", path, e)
            return CompilationUnit(path=path, status=UnitStatus.PARSE_FAILED, error=str(e))

        if source.has_error:
            logger.warning("Failed to parse %s: syntax errors", path)
            return CompilationUnit(
                path=path,
                status=UnitStatus.PARSE_FAILED,
                source=source,
                error="syntax error",
            )
        return CompilationUnit(path=path, status=UnitStatus.PARSED, source=source)
