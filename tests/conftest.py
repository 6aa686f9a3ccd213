"""Shared fixtures: a small Go workspace copied into a temporary directory."""

import shutil
import textwrap
from pathlib import Path

import pytest

from ctxpatch.models.graph import CompilationUnit, DeclarationNode, UnitStatus
from ctxpatch.syntax import GoParser

# Path to test fixtures
FIXTURES_PATH = Path(__file__).parent / "fixtures" / "workspace"

APP = "example.com/app"


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """A writable copy of the fixture workspace root."""
    root = tmp_path / "src"
    shutil.copytree(FIXTURES_PATH, root)
    return root.resolve()


@pytest.fixture
def app_dir(workspace: Path) -> Path:
    return workspace / APP


@pytest.fixture
def handler_file(app_dir: Path) -> Path:
    return app_dir / "handler.go"


@pytest.fixture
def write_go():
    """Write a dedented Go file, creating parent directories."""

    def _write(path: Path, text: str) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(text).lstrip())
        return path

    return _write


@pytest.fixture
def parser() -> GoParser:
    return GoParser()


@pytest.fixture
def make_node(parser: GoParser):
    """Build a non-root DeclarationNode for a named declaration in a file."""

    def _make(path: Path, name: str, depth: int = 2) -> DeclarationNode:
        source = parser.parse(path)
        unit = CompilationUnit(path=path, status=UnitStatus.PARSED, source=source)
        decl = next(d for d in unit.functions() if d.name == name)
        return DeclarationNode(
            depth=depth,
            unit=unit,
            decl=decl,
            package_name=unit.package_name,
            name=decl.name,
            parameters=list(decl.parameters),
            signature=decl.signature(),
        )

    return _make
