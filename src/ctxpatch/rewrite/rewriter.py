"""Threading the context parameter through a discovered graph."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ctxpatch.models.context import ContextSettings
from ctxpatch.models.graph import CallSite, DeclarationNode
from ctxpatch.rewrite.shim import build_shim, name_parameters
from ctxpatch.syntax import Parameter

logger = logging.getLogger(__name__)


@dataclass
class RewriteReport:
    """What a rewrite pass changed."""

    declarations: int = 0
    calls: int = 0
    root_has_context: bool = True


class Rewriter:
    """Rewrites declarations and call sites top-down from the root.

    The root keeps its signature: its rewritten call sites reference the
    context variable, which must already be in scope there.
    """

    def __init__(self, settings: ContextSettings | None = None) -> None:
        self.settings = settings or ContextSettings()
        self.report = RewriteReport()

    def rewrite(self, node: DeclarationNode) -> RewriteReport:
        if node.is_root:
            self.report = RewriteReport()
            self._check_root_context(node)
        else:
            self.rewrite_declaration(node)

        rewritten_calls: list[CallSite] = []
        for call in node.resolved_calls():
            self.rewrite_call(call)
            rewritten_calls.append(call)
            for child in call.resolved:
                self.rewrite(child)

        # Nested calls share source ranges, so render once all edits are in
        for call in rewritten_calls:
            call.text = call.expr.render()
        return self.report

    def rewrite_declaration(self, node: DeclarationNode) -> None:
        """Prepend the context parameter, rename, and synthesize the shim."""
        if node.rewritten:
            return
        decl = node.decl
        separator = ", " if decl.parameters else ""
        decl.source.add_edit(decl.params_start, self.settings.parameter + separator)
        decl.source.add_edit(decl.name_end, self.settings.suffix)

        # Go does not allow named and unnamed parameters in one list
        parameters = list(node.original_parameters)
        if any(p.name is None for p in parameters):
            named = name_parameters(parameters)
            for i, (original, param) in enumerate(zip(node.original_parameters, named)):
                if original.name is None and original.start is not None:
                    decl.source.add_edit(original.start, f"{param.name} ")
                    parameters[i] = param

        node.parameters = [Parameter(self.settings.variable, self.settings.type)] + parameters
        node.name = self.settings.renamed(node.original_name)
        node.signature = decl.signature()
        node.shim = build_shim(node, self.settings)
        node.rewritten = True
        self.report.declarations += 1

    def rewrite_call(self, call: CallSite) -> None:
        """Rename the callee and pass the context variable as first argument."""
        if call.rewritten:
            return
        expr = call.expr
        source = expr.source

        rename = expr.callee_kind == "selector" or (
            expr.callee_kind == "identifier" and self.settings.rename_identifier_calls
        )
        if rename and expr.name_end is not None:
            source.add_edit(expr.name_end, self.settings.suffix)
            call.callee = self.settings.renamed(expr.callee)

        separator = ", " if expr.arguments else ""
        source.add_edit(expr.args_start, self.settings.variable + separator)
        call.arguments = [self.settings.variable] + list(expr.arguments)
        call.text = expr.render()
        call.rewritten = True
        self.report.calls += 1

    def _check_root_context(self, root: DeclarationNode) -> None:
        if not root.resolved_calls():
            return
        if root.decl.mentions(self.settings.variable):
            return
        self.report.root_has_context = False
        logger.warning(
            "%s does not declare or use %r; its rewritten calls pass %s, "
            "which must be brought into scope by hand",
            root.decl.name,
            self.settings.variable,
            self.settings.variable,
        )
