"""Data models for refactoring results."""

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path


@dataclass
class PatchFile:
    """One patch artifact touched during emission."""

    path: Path
    source: Path
    declarations: list[str] = field(default_factory=list)
    shims: list[str] = field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict:
        return {
            "path": str(self.path),
            "source": str(self.source),
            "declarations": self.declarations,
            "shims": self.shims,
            "error": self.error,
        }


@dataclass
class UnresolvedImport:
    """An import whose package directory could not be used."""

    file: str
    specifier: str
    status: str

    def to_dict(self) -> dict:
        return {"file": self.file, "specifier": self.specifier, "status": self.status}


@dataclass
class RefactorSummary:
    """Counts describing a discovered graph."""

    declarations: int = 0
    rewritten_declarations: int = 0
    call_sites: int = 0
    ignored_calls: int = 0
    unresolved_calls: int = 0
    rewritten_calls: int = 0
    max_depth: int = 0

    def to_dict(self) -> dict:
        return {
            "declarations": self.declarations,
            "rewritten_declarations": self.rewritten_declarations,
            "call_sites": self.call_sites,
            "ignored_calls": self.ignored_calls,
            "unresolved_calls": self.unresolved_calls,
            "rewritten_calls": self.rewritten_calls,
            "max_depth": self.max_depth,
        }


@dataclass
class RefactorResult:
    """Complete outcome of a refactoring run."""

    entry_file: Path
    function: str
    started_at: datetime
    ctxpatch_version: str
    summary: RefactorSummary = field(default_factory=RefactorSummary)
    root_has_context: bool = True
    graph: dict = field(default_factory=dict)
    patch_files: list[PatchFile] = field(default_factory=list)
    unresolved_imports: list[UnresolvedImport] = field(default_factory=list)
    duration_ms: int = 0

    @property
    def failed_patches(self) -> list[PatchFile]:
        return [p for p in self.patch_files if not p.ok]

    def to_dict(self) -> dict:
        return {
            "version": "1.0",
            "metadata": {
                "entry_file": str(self.entry_file),
                "function": self.function,
                "started_at": self.started_at.isoformat(),
                "ctxpatch_version": self.ctxpatch_version,
                "duration_ms": self.duration_ms,
                "root_has_context": self.root_has_context,
            },
            "summary": self.summary.to_dict(),
            "graph": self.graph,
            "patch_files": [p.to_dict() for p in self.patch_files],
            "unresolved_imports": [u.to_dict() for u in self.unresolved_imports],
        }
