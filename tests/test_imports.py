"""Tests for package resolution and the import index."""

import logging
from pathlib import Path

from ctxpatch.analysis.callgraph import CallGraphBuilder
from ctxpatch.analysis.imports import ImportIndex
from ctxpatch.analysis.resolver import PackageResolver, strip_quotes
from ctxpatch.exclusion import SourceExcluder
from ctxpatch.models.graph import CallStatus, PackageStatus, UnitStatus


class TestStripQuotes:
    """Tests for import literal unquoting."""

    def test_double_quotes(self):
        assert strip_quotes('"example.com/app/db"') == "example.com/app/db"

    def test_raw_string(self):
        assert strip_quotes("`example.com/app/db`") == "example.com/app/db"

    def test_unquoted(self):
        assert strip_quotes("example.com/app/db") == "example.com/app/db"


class TestPackageResolver:
    """Tests for PackageResolver."""

    def test_resolves_package(self, workspace: Path):
        """Should parse every source file of the package directory."""
        resolver = PackageResolver(workspace)

        package = resolver.resolve('"example.com/app/store"')

        assert package.status is PackageStatus.RESOLVED
        assert package.available
        assert package.name == "store"
        assert [u.path.name for u in package.units] == ["store.go"]

    def test_test_files_skipped(self, workspace: Path):
        """Test files never become compilation units."""
        resolver = PackageResolver(workspace)

        package = resolver.resolve('"example.com/app/db"')

        assert [u.path.name for u in package.units] == ["db.go"]

    def test_extra_excludes(self, workspace: Path, write_go):
        """Configured exclude patterns apply to package scans."""
        write_go(workspace / "example.com/app/db/zz_gen.go", "package db\n")
        resolver = PackageResolver(workspace, excluder=SourceExcluder(["*_gen.go"]))

        package = resolver.resolve("example.com/app/db")

        assert [u.path.name for u in package.units] == ["db.go"]

    def test_missing_directory(self, workspace: Path):
        """A missing directory resolves to an unavailable package."""
        resolver = PackageResolver(workspace)

        package = resolver.resolve('"context"')

        assert package.status is PackageStatus.DIRECTORY_MISSING
        assert not package.available
        assert package.units == []
        assert package.path == workspace / "context"

    def test_scan_failure(self, workspace: Path, handler_file: Path, caplog):
        """A directory that cannot be listed yields an unusable package."""

        class FailingExcluder(SourceExcluder):
            def source_files(self, directory: Path) -> list[Path]:
                raise PermissionError(13, "Permission denied", str(directory))

        resolver = PackageResolver(workspace, excluder=FailingExcluder())

        with caplog.at_level(logging.WARNING, logger="ctxpatch.analysis.resolver"):
            package = resolver.resolve("example.com/app/store")

        assert package.status is PackageStatus.SCAN_FAILED
        assert not package.available
        assert package.parsed_units() == []
        assert "Failed to scan package directory" in caplog.text

        root = CallGraphBuilder(resolver).build(handler_file, "Handle")
        fetch = root.calls[1]
        assert fetch.status is CallStatus.PROCEED
        assert fetch.resolved == []

    def test_cache_shared_across_spellings(self, workspace: Path):
        """Quoted and unquoted specifiers share one cached package."""
        resolver = PackageResolver(workspace)

        first = resolver.resolve('"example.com/app/db"')
        second = resolver.resolve("example.com/app/db")

        assert first is second
        assert list(resolver.packages) == [workspace / "example.com/app/db"]

    def test_parse_failure_recorded(self, workspace: Path, write_go):
        """A broken file is kept with a failed status and skipped for matching."""
        write_go(workspace / "example.com/app/db/broken.go", "package db\n\nfunc (\n")
        resolver = PackageResolver(workspace)

        package = resolver.resolve("example.com/app/db")

        statuses = {u.path.name: u.status for u in package.units}
        assert statuses == {"broken.go": UnitStatus.PARSE_FAILED, "db.go": UnitStatus.PARSED}
        assert [u.path.name for u in package.parsed_units()] == ["db.go"]
        assert package.status is PackageStatus.RESOLVED

    def test_unreadable_file(self, workspace: Path, write_go):
        """A file that is not UTF-8 fails to parse instead of raising."""
        path = workspace / "example.com/app/db/latin1.go"
        path.write_bytes(b"package db\n\n// caf\xe9\n")

        unit = PackageResolver(workspace).parse_unit(path)

        assert unit.status is UnitStatus.PARSE_FAILED
        assert unit.error

    def test_name_conflict_warns(self, workspace: Path, write_go, caplog):
        """Files declaring different package names are reported."""
        write_go(workspace / "example.com/app/db/other.go", "package other\n")
        resolver = PackageResolver(workspace)

        with caplog.at_level(logging.WARNING, logger="ctxpatch.analysis.resolver"):
            package = resolver.resolve("example.com/app/db")

        assert package.name == "db"
        assert "Package name conflict" in caplog.text


class TestImportIndex:
    """Tests for ImportIndex."""

    def test_edges_of_unit(self, workspace: Path, handler_file: Path):
        """Should resolve one edge per import spec."""
        resolver = PackageResolver(workspace)
        index = ImportIndex(resolver)
        unit = resolver.parse_unit(handler_file)

        edges = index.imports_of(unit)

        assert [e.specifier for e in edges] == ['"context"', '"example.com/app/store"']
        assert [e.package.available for e in edges] == [False, True]
        assert unit.imports is edges
        assert handler_file in index

    def test_edges_built_once(self, workspace: Path, handler_file: Path):
        """A second visit reuses the recorded edges."""
        resolver = PackageResolver(workspace)
        index = ImportIndex(resolver)
        unit = resolver.parse_unit(handler_file)

        assert index.imports_of(unit) is index.imports_of(unit)

    def test_alias_recorded(self, workspace: Path, write_go):
        """Aliased imports keep their alias on the edge."""
        path = write_go(
            workspace / "example.com/app/alias/alias.go",
            """
            package alias

            import s "example.com/app/store"
            """,
        )
        resolver = PackageResolver(workspace)
        index = ImportIndex(resolver)

        [edge] = index.imports_of(resolver.parse_unit(path))

        assert edge.alias == "s"
        assert edge.package.name == "store"

    def test_imported_packages(self, workspace: Path, handler_file: Path):
        """Should list the packages of an indexed file."""
        resolver = PackageResolver(workspace)
        index = ImportIndex(resolver)
        index.imports_of(resolver.parse_unit(handler_file))

        packages = index.imported_packages(handler_file)

        assert [p.path.name for p in packages] == ["context", "store"]
        assert index.imported_packages(workspace / "unknown.go") == []
