"""Data models for ctxpatch."""

from ctxpatch.models.context import ContextSettings
from ctxpatch.models.graph import (
    CallSite,
    CallStatus,
    CompilationUnit,
    DeclarationNode,
    ImportEdge,
    Package,
    PackageStatus,
    UnitStatus,
)
from ctxpatch.models.results import (
    PatchFile,
    RefactorResult,
    RefactorSummary,
    UnresolvedImport,
)

__all__ = [
    # Graph models
    "CallSite",
    "CallStatus",
    "CompilationUnit",
    "DeclarationNode",
    "ImportEdge",
    "Package",
    "PackageStatus",
    "UnitStatus",
    # Settings
    "ContextSettings",
    # Results models
    "PatchFile",
    "RefactorResult",
    "RefactorSummary",
    "UnresolvedImport",
]
