"""Output modules for CLI display and file writing."""

from ctxpatch.output.json_writer import write_config, write_report
from ctxpatch.output.patch_writer import PatchWriter
from ctxpatch.output.tree import build_graph_tree, display_tree, format_stack

__all__ = [
    "PatchWriter",
    "build_graph_tree",
    "display_tree",
    "format_stack",
    "write_config",
    "write_report",
]
