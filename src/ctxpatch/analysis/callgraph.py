"""Recursive discovery of declarations reachable from an entry function.

Resolution is textual: a call's rendered text is searched for
``<name> *(`` for every top-level declaration of every package imported by
the calling file. The result is a tree of visits, so one declaration may
appear under several call paths.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from ctxpatch.analysis.ignore import IgnoreFilter
from ctxpatch.analysis.imports import ImportIndex
from ctxpatch.analysis.resolver import PackageResolver
from ctxpatch.config import DEFAULT_MAX_DEPTH
from ctxpatch.errors import (
    AmbiguousEntryPointError,
    CallGraphTooDeepError,
    CyclicCallGraphError,
    EntryFileError,
    EntryPointNotFoundError,
)
from ctxpatch.models.graph import (
    CallSite,
    CallStatus,
    CompilationUnit,
    DeclarationNode,
    UnitStatus,
)
from ctxpatch.syntax import name_pattern

logger = logging.getLogger(__name__)

_OPEN_PAREN_AT_END = re.compile(r"\( *$")


def normalize_function_pattern(function: str) -> str:
    """Append an opening parenthesis unless the pattern already ends with one."""
    if _OPEN_PAREN_AT_END.search(function):
        return function
    return f"{function}("


class CallGraphBuilder:
    """Builds the declaration/call tree rooted at one entry function."""

    def __init__(
        self,
        resolver: PackageResolver,
        ignore_filter: IgnoreFilter | None = None,
        imports: ImportIndex | None = None,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ) -> None:
        self.resolver = resolver
        self.ignore_filter = ignore_filter or IgnoreFilter.from_config()
        self.imports = imports or ImportIndex(resolver)
        self.max_depth = max_depth

        # Declarations on the current root-to-node path
        self._path: list[DeclarationNode] = []

    def build(self, entry_file: Path, function: str) -> DeclarationNode:
        """Discover the graph rooted at the single declaration matching `function`.

        Raises:
            EntryFileError: The entry file is missing, unreadable or unparsable.
            EntryPointNotFoundError: No declaration matches.
            AmbiguousEntryPointError: More than one declaration matches.
        """
        entry_file = entry_file.resolve()
        if not entry_file.is_file():
            raise EntryFileError(entry_file, "file not found")

        unit = self.resolver.parse_unit(entry_file)
        if unit.status is UnitStatus.PARSE_FAILED:
            raise EntryFileError(entry_file, unit.error or "parse failed")

        pattern = normalize_function_pattern(function)
        matches = self.match_declarations(unit, pattern, 0)
        if not matches:
            raise EntryPointNotFoundError(entry_file, pattern)
        if len(matches) > 1:
            raise AmbiguousEntryPointError(
                entry_file, pattern, [describe(node) for node in matches]
            )

        root = matches[0]
        self._path = []
        self.expand(root)
        return root

    def find_declarations(
        self, unit: CompilationUnit, pattern: str, depth: int
    ) -> list[DeclarationNode]:
        """Match declarations of a unit against a call pattern and expand each one."""
        matches = self.match_declarations(unit, pattern, depth)
        for node in matches:
            self.expand(node)
        return matches

    def match_declarations(
        self, unit: CompilationUnit, pattern: str, depth: int
    ) -> list[DeclarationNode]:
        """Create a node for every top-level declaration whose name occurs in `pattern`."""
        matches: list[DeclarationNode] = []
        for decl in unit.functions():
            if not name_pattern(decl.name).search(pattern):
                continue
            # Import edges are needed to resolve the calls in this declaration
            self.imports.imports_of(unit)
            matches.append(
                DeclarationNode(
                    depth=depth,
                    unit=unit,
                    decl=decl,
                    package_name=unit.package_name,
                    name=decl.name,
                    parameters=list(decl.parameters),
                    signature=decl.signature(),
                )
            )
        return matches

    def expand(self, node: DeclarationNode) -> None:
        """Collect the call sites of a declaration and resolve each one."""
        if node.depth > self.max_depth:
            raise CallGraphTooDeepError(self.max_depth, self._chain(node))
        if any(visited.identity == node.identity for visited in self._path):
            raise CyclicCallGraphError(self._chain(node))

        self._path.append(node)
        try:
            node.calls = [
                CallSite(depth=node.depth + 1, expr=expr, text=expr.render())
                for expr in node.decl.calls()
            ]
            for call in node.calls:
                rule = self.ignore_filter.match(call.text)
                if rule is not None:
                    call.status = CallStatus.IGNORED
                    call.ignored_by = rule.description
                    logger.debug("Ignored %s (%s)", call.text, rule.description)
                    continue
                call.status = CallStatus.PROCEED
                self._resolve_call(node, call)
        finally:
            self._path.pop()

    def _resolve_call(self, caller: DeclarationNode, call: CallSite) -> None:
        call.resolved = []
        for edge in self.imports.imports_of(caller.unit):
            for unit in edge.package.parsed_units():
                call.resolved.extend(self.find_declarations(unit, call.text, call.depth + 1))

        if len(call.resolved) > 1:
            logger.warning(
                "Call %s in %s matched %d declarations: %s",
                call.text,
                caller.path,
                len(call.resolved),
                ", ".join(f"{describe(c)} ({c.path}:{c.decl.line})" for c in call.resolved),
            )

        if call.expr.callee_kind == "other":
            return
        callee_name = call.expr.callee.rsplit(".", 1)[-1]
        for candidate in call.resolved:
            if candidate.decl.name != callee_name:
                logger.warning(
                    "Call %s in %s matched %s through its argument text, not its callee",
                    call.text,
                    caller.path,
                    describe(candidate),
                )

    def _chain(self, node: DeclarationNode) -> list[str]:
        return [describe(n) for n in self._path] + [describe(node)]


def describe(node: DeclarationNode) -> str:
    """Short label of a declaration, e.g. "store.(*Svc).Fetch"."""
    prefix = f"{node.package_name}." if node.package_name else ""
    if node.receiver_type:
        return f"{prefix}({node.receiver_type}).{node.decl.name}"
    return f"{prefix}{node.decl.name}"
