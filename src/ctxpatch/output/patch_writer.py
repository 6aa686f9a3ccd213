"""Emission of rewritten declarations and shims to per-file patch artifacts."""

from __future__ import annotations

import logging
from pathlib import Path

from ctxpatch.models.graph import DeclarationNode
from ctxpatch.models.results import PatchFile
from ctxpatch.paths import get_patch_path

logger = logging.getLogger(__name__)

SECTION_SEPARATOR = "\n\n"


class PatchWriter:
    """Writes `<file>.patch` beside every visited source file.

    In "append" mode existing patch files grow on every run, so running twice
    duplicates every section. "truncate" empties each patch file the first
    time it is touched in a run. The original sources are never opened for
    writing.
    """

    def __init__(self, mode: str = "append") -> None:
        if mode not in ("append", "truncate"):
            raise ValueError(f"unknown patch mode: {mode!r}")
        self.mode = mode
        self._files: dict[Path, PatchFile] = {}
        self._emitted: set[tuple[Path, int]] = set()

    def emit(self, root: DeclarationNode) -> list[PatchFile]:
        """Emit the whole graph, children before parents."""
        self._files = {}
        self._emitted = set()
        self._emit(root)
        return list(self._files.values())

    def _emit(self, node: DeclarationNode) -> None:
        for call in node.resolved_calls():
            for child in call.resolved:
                self._emit(child)
        self.write_node(node)

    def write_node(self, node: DeclarationNode) -> PatchFile | None:
        """Append one declaration (and its shim) to its patch file.

        A declaration reached along several paths is written once per run.
        Write failures are recorded on the returned PatchFile.
        """
        key = (node.path, node.decl.start)
        if key in self._emitted:
            return None
        self._emitted.add(key)

        patch_path = get_patch_path(node.path)
        first_touch = patch_path not in self._files
        patch = self._files.setdefault(patch_path, PatchFile(path=patch_path, source=node.path))
        if patch.error is not None:
            return patch

        sections = [node.decl.render()]
        if not node.is_root and node.shim is not None:
            sections.append(node.shim.text)

        file_mode = "w" if (first_touch and self.mode == "truncate") else "a"
        try:
            with open(patch_path, file_mode, encoding="utf-8") as f:
                for section in sections:
                    f.write(section)
                    f.write(SECTION_SEPARATOR)
        except OSError as e:
            patch.error = str(e)
            logger.warning("Failed to write patch %s: %s", patch_path, e)
            return patch

        patch.declarations.append(node.name)
        if len(sections) > 1:
            patch.shims.append(node.original_name)
        return patch
