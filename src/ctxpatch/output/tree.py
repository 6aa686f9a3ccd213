"""Rich tree visualization of the declaration/call graph."""

from pathlib import Path

from rich.console import Console
from rich.text import Text
from rich.tree import Tree

from ctxpatch.models.graph import CallStatus, DeclarationNode
from ctxpatch.models.results import PatchFile

console = Console()

INDENT = " ."


def _relative(path: Path, base: Path | None) -> Path:
    if base is None:
        return path
    try:
        return path.relative_to(base)
    except ValueError:
        return path


def build_graph_tree(
    root: DeclarationNode,
    title: str,
    base: Path | None = None,
    show_ignored: bool = False,
) -> Tree:
    """Build a Rich tree with one line per declaration and per resolved call."""
    tree = Tree(f"[bold]{title}[/]", guide_style="dim")
    _add_declaration(tree, root, base, show_ignored)
    return tree


def _add_declaration(
    parent: Tree, node: DeclarationNode, base: Path | None, show_ignored: bool
) -> None:
    label = Text()
    label.append("func ", style="dim")
    label.append(node.signature.removeprefix("func "), style="cyan" if node.is_root else "green")
    label.append(f"  {_relative(node.path, base)}:{node.decl.line}", style="dim")
    decl_node = parent.add(label)

    for call in node.calls:
        if call.status is CallStatus.IGNORED:
            if show_ignored:
                decl_node.add(
                    Text.assemble(
                        ("x ", "dim"), (call.text, "dim"), (f"  ({call.ignored_by})", "dim")
                    )
                )
            continue
        if not call.resolved:
            continue
        call_node = decl_node.add(Text.assemble(("-> ", "yellow"), (call.text, "yellow")))
        for child in call.resolved:
            _add_declaration(call_node, child, base, show_ignored)


def format_stack(root: DeclarationNode) -> list[str]:
    """Plain-text rendering of the graph, indented by depth."""
    lines: list[str] = []

    def visit(node: DeclarationNode) -> None:
        lines.append(f"{INDENT * node.depth}FunDecl: {node.path} : {node.signature}")
        for call in node.resolved_calls():
            lines.append(f"{INDENT * call.depth}FunCall: {call.text}")
            for child in call.resolved:
                visit(child)

    visit(root)
    return lines


def build_patch_tree(patch_files: list[PatchFile], base: Path | None = None) -> Tree:
    """Build a Rich tree of the patch files written in a run."""
    tree = Tree("[bold]Patch files[/]", guide_style="dim")
    for patch in sorted(patch_files, key=lambda p: str(p.path)):
        if patch.error:
            tree.add(f"[red]x {_relative(patch.path, base)}[/] [dim]({patch.error})[/]")
            continue
        file_node = tree.add(f"[yellow]{_relative(patch.path, base)}[/]")
        for name in patch.declarations:
            file_node.add(f"[green]{name}[/]")
        for name in patch.shims:
            file_node.add(f"[dim]shim {name}[/]")
    return tree


def display_tree(tree: Tree) -> None:
    """Display the tree to console."""
    console.print()
    console.print(tree)
    console.print()
