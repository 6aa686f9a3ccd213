"""Per-file import edges, built lazily on first visit."""

from __future__ import annotations

from pathlib import Path

from ctxpatch.analysis.resolver import PackageResolver
from ctxpatch.models.graph import CompilationUnit, ImportEdge, Package


class ImportIndex:
    """Registry of import edges keyed by absolute file path.

    Written once per file during traversal and only read afterwards.
    """

    def __init__(self, resolver: PackageResolver) -> None:
        self.resolver = resolver
        self._edges: dict[Path, list[ImportEdge]] = {}

    def __contains__(self, path: Path) -> bool:
        return path in self._edges

    def imports_of(self, unit: CompilationUnit) -> list[ImportEdge]:
        """Import edges of a unit, resolving their packages on first access."""
        if unit.path in self:
            return self._edges[unit.path]

        edges: list[ImportEdge] = []
        if unit.source is not None:
            for spec in unit.source.imports():
                edges.append(
                    ImportEdge(
                        specifier=spec.path,
                        package=self.resolver.resolve(spec.path),
                        alias=spec.alias,
                    )
                )

        self._edges[unit.path] = edges
        unit.imports = edges
        return edges

    def imported_packages(self, path: Path) -> list[Package]:
        """Packages imported by an already indexed file."""
        return [edge.package for edge in self._edges.get(path, [])]

    def items(self):
        return self._edges.items()
