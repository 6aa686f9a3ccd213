"""Data models for packages, compilation units and the declaration/call graph."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from pathlib import Path
from typing import TYPE_CHECKING

from ctxpatch.syntax import CallExpr, FunctionDecl, Parameter, SourceFile

if TYPE_CHECKING:
    from ctxpatch.rewrite.shim import Shim


class PackageStatus(Enum):
    """Outcome of resolving an import specifier to a package directory."""

    RESOLVED = auto()
    DIRECTORY_MISSING = auto()
    SCAN_FAILED = auto()


class UnitStatus(Enum):
    """Outcome of parsing one source file."""

    PARSED = auto()
    PARSE_FAILED = auto()


class CallStatus(Enum):
    """Whether a call site is expanded or treated as a leaf."""

    PROCEED = auto()
    IGNORED = auto()


@dataclass(eq=False)
class CompilationUnit:
    """One source file of a package."""

    path: Path
    status: UnitStatus
    source: SourceFile | None = None
    error: str | None = None
    # Filled in lazily by the import index the first time the unit is visited
    imports: list[ImportEdge] | None = None

    @property
    def package_name(self) -> str | None:
        return self.source.package_name if self.source else None

    def functions(self) -> list[FunctionDecl]:
        if self.status is not UnitStatus.PARSED or self.source is None:
            return []
        return self.source.functions()


@dataclass(eq=False)
class Package:
    """A directory of compilation units under the workspace root."""

    path: Path
    status: PackageStatus
    name: str | None = None
    units: list[CompilationUnit] = field(default_factory=list)

    @property
    def available(self) -> bool:
        return self.status is PackageStatus.RESOLVED

    def parsed_units(self) -> list[CompilationUnit]:
        return [u for u in self.units if u.status is UnitStatus.PARSED]


@dataclass(eq=False)
class ImportEdge:
    """An import of a package by a compilation unit."""

    specifier: str
    package: Package
    alias: str | None = None


@dataclass(eq=False)
class DeclarationNode:
    """A declaration reached during traversal. One node per visit, not per declaration."""

    depth: int
    unit: CompilationUnit
    decl: FunctionDecl
    package_name: str | None
    name: str
    parameters: list[Parameter]
    signature: str
    calls: list[CallSite] = field(default_factory=list)

    # Snapshot taken at discovery; the shim is built from these
    original_name: str = ""
    original_parameters: tuple[Parameter, ...] = ()
    original_signature: str = ""
    rewritten: bool = False
    shim: Shim | None = None

    def __post_init__(self) -> None:
        self.original_name = self.original_name or self.name
        self.original_parameters = self.original_parameters or tuple(self.parameters)
        self.original_signature = self.original_signature or self.signature

    @property
    def path(self) -> Path:
        return self.unit.path

    @property
    def receiver_type(self) -> str | None:
        return self.decl.receiver_type

    @property
    def is_root(self) -> bool:
        return self.depth == 0

    @property
    def identity(self) -> tuple[Path, str, str | None]:
        """Key used by the cycle guard: file, declared name, receiver type."""
        return (self.unit.path, self.decl.name, self.decl.receiver_type)

    def resolved_calls(self) -> list[CallSite]:
        """Calls that were expanded and matched at least one declaration."""
        return [c for c in self.calls if c.status is CallStatus.PROCEED and c.resolved]

    def walk(self):
        """Yield this node and every descendant declaration, pre-order."""
        yield self
        for call in self.resolved_calls():
            for child in call.resolved:
                yield from child.walk()


@dataclass(eq=False)
class CallSite:
    """A call expression found in the body of a declaration."""

    depth: int
    expr: CallExpr
    text: str
    status: CallStatus = CallStatus.PROCEED
    resolved: list[DeclarationNode] = field(default_factory=list)
    callee: str = ""
    arguments: list[str] = field(default_factory=list)
    ignored_by: str | None = None
    original_text: str = ""
    rewritten: bool = False

    def __post_init__(self) -> None:
        self.callee = self.callee or self.expr.callee
        if not self.arguments:
            self.arguments = list(self.expr.arguments)
        self.original_text = self.original_text or self.text
