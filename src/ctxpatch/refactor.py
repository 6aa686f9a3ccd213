"""The refactoring pipeline: discover, rewrite, emit."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from ctxpatch import __version__
from ctxpatch.analysis.callgraph import CallGraphBuilder
from ctxpatch.analysis.ignore import IgnoreFilter
from ctxpatch.analysis.imports import ImportIndex
from ctxpatch.analysis.resolver import PackageResolver
from ctxpatch.config import (
    DEFAULT_MAX_DEPTH,
    default_workspace_root,
    get_context_settings,
    get_ignore_rules,
    get_max_depth,
    get_patch_mode,
    get_source_excludes,
    get_workspace_root,
)
from ctxpatch.exclusion import SourceExcluder
from ctxpatch.models.context import ContextSettings
from ctxpatch.models.graph import CallStatus, DeclarationNode
from ctxpatch.models.results import (
    PatchFile,
    RefactorResult,
    RefactorSummary,
    UnresolvedImport,
)
from ctxpatch.output.json_writer import declaration_to_dict
from ctxpatch.output.patch_writer import PatchWriter
from ctxpatch.rewrite.rewriter import RewriteReport, Rewriter


@dataclass
class RefactorSettings:
    """Everything a run needs, resolved from configuration and CLI options."""

    workspace_root: Path = field(default_factory=default_workspace_root)
    source_excludes: list[str] = field(default_factory=list)
    ignore_rules: list[dict[str, str]] | None = None
    max_depth: int = DEFAULT_MAX_DEPTH
    context: ContextSettings = field(default_factory=ContextSettings)
    patch_mode: str = "append"

    @classmethod
    def from_config(cls, config: dict) -> RefactorSettings:
        return cls(
            workspace_root=get_workspace_root(config),
            source_excludes=get_source_excludes(config),
            ignore_rules=get_ignore_rules(config),
            max_depth=get_max_depth(config),
            context=get_context_settings(config),
            patch_mode=get_patch_mode(config),
        )


class Refactorer:
    """Runs one refactoring. Package and import caches live for one instance."""

    def __init__(self, settings: RefactorSettings | None = None) -> None:
        self.settings = settings or RefactorSettings()
        self.resolver = PackageResolver(
            self.settings.workspace_root,
            excluder=SourceExcluder(self.settings.source_excludes),
        )
        self.imports = ImportIndex(self.resolver)
        self.builder = CallGraphBuilder(
            self.resolver,
            ignore_filter=IgnoreFilter.from_config(self.settings.ignore_rules),
            imports=self.imports,
            max_depth=self.settings.max_depth,
        )
        self.rewriter = Rewriter(self.settings.context)
        self.writer = PatchWriter(self.settings.patch_mode)

    def discover(self, entry_file: Path, function: str) -> DeclarationNode:
        return self.builder.build(entry_file, function)

    def rewrite(self, root: DeclarationNode) -> RewriteReport:
        return self.rewriter.rewrite(root)

    def emit(self, root: DeclarationNode) -> list[PatchFile]:
        return self.writer.emit(root)

    def unresolved_imports(self) -> list[UnresolvedImport]:
        """Imports of visited files whose package contributed nothing."""
        unresolved: list[UnresolvedImport] = []
        for path, edges in self.imports.items():
            for edge in edges:
                if not edge.package.available:
                    unresolved.append(
                        UnresolvedImport(
                            file=str(path),
                            specifier=edge.specifier,
                            status=edge.package.status.name.lower(),
                        )
                    )
        return unresolved

    def run(
        self, entry_file: Path, function: str, write: bool = True
    ) -> tuple[DeclarationNode, RefactorResult]:
        """Discover, rewrite and (unless `write` is False) emit patches."""
        started_at = datetime.now()
        start_time = time.time()

        root = self.discover(entry_file, function)
        report = self.rewrite(root)
        patch_files = self.emit(root) if write else []
        return root, self.result(root, function, report, patch_files, started_at, start_time)

    def result(
        self,
        root: DeclarationNode,
        function: str,
        report: RewriteReport,
        patch_files: list[PatchFile],
        started_at: datetime,
        start_time: float,
    ) -> RefactorResult:
        """Assemble the serializable outcome of a run."""
        return RefactorResult(
            entry_file=root.path,
            function=function,
            started_at=started_at,
            ctxpatch_version=__version__,
            summary=summarize(root),
            root_has_context=report.root_has_context,
            graph=declaration_to_dict(root),
            patch_files=patch_files,
            unresolved_imports=self.unresolved_imports(),
            duration_ms=int((time.time() - start_time) * 1000),
        )


def summarize(root: DeclarationNode) -> RefactorSummary:
    """Count declarations and call sites of a graph."""
    summary = RefactorSummary()
    for node in root.walk():
        summary.declarations += 1
        summary.max_depth = max(summary.max_depth, node.depth)
        if node.rewritten:
            summary.rewritten_declarations += 1
        for call in node.calls:
            summary.call_sites += 1
            if call.status is CallStatus.IGNORED:
                summary.ignored_calls += 1
            elif not call.resolved:
                summary.unresolved_calls += 1
            if call.rewritten:
                summary.rewritten_calls += 1
    return summary


def refactor(
    entry_file: Path,
    function: str,
    settings: RefactorSettings | None = None,
) -> DeclarationNode:
    """Thread the context parameter through everything `function` reaches.

    Writes `<file>.patch` beside every visited source file and returns the
    rewritten root node.
    """
    root, _ = Refactorer(settings).run(Path(entry_file), function)
    return root
