"""Go syntax trees via tree-sitter, and rendering of edited source ranges.

The syntax tree itself is never mutated. Rewrites are recorded as insertion
edits against the original bytes of a file, and rendering a byte range
applies the edits that fall inside it. This keeps the original formatting
and comments of every declaration intact in the patch output.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator

import tree_sitter_go as tsgo
from tree_sitter import Language, Node, Parser

GO_LANGUAGE = Language(tsgo.language())

FUNCTION_NODE_TYPES = ("function_declaration", "method_declaration")
PARAMETER_NODE_TYPES = ("parameter_declaration", "variadic_parameter_declaration")


@dataclass(frozen=True)
class TextEdit:
    """An insertion of text at a byte offset of the original source."""

    offset: int
    text: str


@dataclass(frozen=True)
class Parameter:
    """A single formal parameter (grouped names are split apart)."""

    name: str | None
    type: str
    variadic: bool = False
    # byte offset of the declaration, kept for unnamed parameters only
    start: int | None = field(default=None, compare=False, repr=False)

    def render(self) -> str:
        type_text = f"...{self.type}" if self.variadic else self.type
        if self.name is None:
            return type_text
        return f"{self.name} {type_text}"


@dataclass(frozen=True)
class ImportSpec:
    """One import line: the quoted path literal and its optional alias."""

    path: str
    alias: str | None
    line: int


def _walk(node: Node) -> Iterator[Node]:
    """Pre-order walk in source order."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


def _text(node: Node | None) -> str:
    if node is None:
        return ""
    return node.text.decode("utf-8")


class SourceFile:
    """A parsed Go file plus the pending insertion edits made against it."""

    def __init__(self, path: Path, data: bytes, tree) -> None:
        self.path = path
        self.data = data
        self.tree = tree
        self._edits: list[TextEdit] = []
        self._functions: list[FunctionDecl] | None = None

    @property
    def root(self) -> Node:
        return self.tree.root_node

    @property
    def has_error(self) -> bool:
        return self.root.has_error

    @property
    def package_name(self) -> str | None:
        for child in self.root.named_children:
            if child.type == "package_clause":
                for ident in child.named_children:
                    if ident.type == "package_identifier":
                        return _text(ident)
        return None

    def imports(self) -> list[ImportSpec]:
        specs: list[ImportSpec] = []
        for child in self.root.named_children:
            if child.type != "import_declaration":
                continue
            for node in _walk(child):
                if node.type != "import_spec":
                    continue
                alias = node.child_by_field_name("name")
                specs.append(
                    ImportSpec(
                        path=_text(node.child_by_field_name("path")),
                        alias=_text(alias) if alias is not None else None,
                        line=node.start_point[0] + 1,
                    )
                )
        return specs

    def functions(self) -> list[FunctionDecl]:
        """Top-level function and method declarations, in source order."""
        if self._functions is None:
            self._functions = [
                FunctionDecl.from_node(self, child)
                for child in self.root.named_children
                if child.type in FUNCTION_NODE_TYPES
            ]
        return self._functions

    # === Edits and rendering ===

    def add_edit(self, offset: int, text: str) -> bool:
        """Record an insertion. Returns False if it was already recorded."""
        edit = TextEdit(offset, text)
        if edit in self._edits:
            return False
        self._edits.append(edit)
        return True

    @property
    def edits(self) -> list[TextEdit]:
        return list(self._edits)

    def render(self, start: int, end: int) -> str:
        """Render bytes [start, end) with the edits inside the range applied."""
        pieces: list[bytes] = []
        pos = start
        in_range = [e for e in self._edits if start <= e.offset < end]
        for edit in sorted(in_range, key=lambda e: e.offset):
            pieces.append(self.data[pos : edit.offset])
            pieces.append(edit.text.encode("utf-8"))
            pos = edit.offset
        pieces.append(self.data[pos:end])
        return b"".join(pieces).decode("utf-8")


@dataclass(eq=False)
class CallExpr:
    """A call expression inside a function declaration."""

    source: SourceFile
    node: Node
    callee: str
    # "selector" for x.F(...), "identifier" for F(...), "other" otherwise
    callee_kind: str
    # byte offset right after the final name segment of the callee
    name_end: int | None
    # byte offset right after the opening parenthesis of the argument list
    args_start: int
    arguments: list[str]

    @classmethod
    def from_node(cls, source: SourceFile, node: Node) -> CallExpr:
        function = node.child_by_field_name("function")
        args = node.child_by_field_name("arguments")
        name_end: int | None = None
        kind = "other"
        if function is not None and function.type == "selector_expression":
            kind = "selector"
            field_node = function.child_by_field_name("field")
            name_end = field_node.end_byte if field_node is not None else None
        elif function is not None and function.type == "identifier":
            kind = "identifier"
            name_end = function.end_byte
        arguments = [
            _text(child)
            for child in (args.named_children if args is not None else [])
            if child.type != "comment"
        ]
        return cls(
            source=source,
            node=node,
            callee=_text(function),
            callee_kind=kind,
            name_end=name_end,
            args_start=(args.start_byte + 1) if args is not None else node.end_byte,
            arguments=arguments,
        )

    @property
    def line(self) -> int:
        return self.node.start_point[0] + 1

    def render(self) -> str:
        return self.source.render(self.node.start_byte, self.node.end_byte)


@dataclass(eq=False)
class FunctionDecl:
    """A top-level function or method declaration."""

    source: SourceFile
    node: Node
    name: str
    name_end: int
    receiver_name: str | None
    receiver_type: str | None
    type_parameters: str
    type_parameter_names: list[str]
    parameters: list[Parameter]
    # byte offset right after the opening parenthesis of the parameter list
    params_start: int
    params_text: str
    result: str
    body_start: int | None
    _calls: list[CallExpr] | None = field(default=None, repr=False)

    @classmethod
    def from_node(cls, source: SourceFile, node: Node) -> FunctionDecl:
        name_node = node.child_by_field_name("name")
        params_node = node.child_by_field_name("parameters")
        body = node.child_by_field_name("body")

        type_params = node.child_by_field_name("type_parameters")
        type_parameter_names = [
            _text(name)
            for decl in (type_params.named_children if type_params is not None else [])
            if decl.type == "type_parameter_declaration"
            for name in decl.children_by_field_name("name")
        ]

        receiver_name: str | None = None
        receiver_type: str | None = None
        receiver = node.child_by_field_name("receiver")
        if receiver is not None:
            for decl in receiver.named_children:
                if decl.type == "parameter_declaration":
                    recv_name = decl.child_by_field_name("name")
                    receiver_name = _text(recv_name) if recv_name is not None else None
                    receiver_type = _text(decl.child_by_field_name("type"))
                    break

        return cls(
            source=source,
            node=node,
            name=_text(name_node),
            name_end=name_node.end_byte,
            receiver_name=receiver_name,
            receiver_type=receiver_type,
            type_parameters=_text(type_params),
            type_parameter_names=type_parameter_names,
            parameters=parse_parameters(params_node),
            params_start=params_node.start_byte + 1,
            params_text=_text(params_node),
            result=_text(node.child_by_field_name("result")),
            body_start=body.start_byte if body is not None else None,
        )

    @property
    def start(self) -> int:
        return self.node.start_byte

    @property
    def end(self) -> int:
        return self.node.end_byte

    @property
    def line(self) -> int:
        return self.node.start_point[0] + 1

    def calls(self) -> list[CallExpr]:
        """Every call expression in the declaration, in source order."""
        if self._calls is None:
            self._calls = [
                CallExpr.from_node(self.source, node)
                for node in _walk(self.node)
                if node.type == "call_expression"
            ]
        return self._calls

    def signature(self) -> str:
        end = self.body_start if self.body_start is not None else self.end
        return self.source.render(self.start, end).rstrip()

    def render(self) -> str:
        return self.source.render(self.start, self.end)

    def mentions(self, identifier: str) -> bool:
        """Whether an identifier with this name appears anywhere in the declaration."""
        return any(
            node.type == "identifier" and _text(node) == identifier
            for node in _walk(self.node)
        )


def parse_parameters(params_node: Node | None) -> list[Parameter]:
    """Flatten a parameter_list node into one Parameter per name."""
    parameters: list[Parameter] = []
    if params_node is None:
        return parameters
    for decl in params_node.named_children:
        if decl.type not in PARAMETER_NODE_TYPES:
            continue
        variadic = decl.type == "variadic_parameter_declaration"
        type_text = _text(decl.child_by_field_name("type"))
        names = decl.children_by_field_name("name")
        if names:
            parameters.extend(Parameter(_text(n), type_text, variadic) for n in names)
        else:
            parameters.append(Parameter(None, type_text, variadic, decl.start_byte))
    return parameters


def name_pattern(name: str) -> re.Pattern[str]:
    """Pattern that finds a declaration name followed by an opening parenthesis."""
    return re.compile(rf"\b{re.escape(name)} *\(")


class GoParser:
    """Thin wrapper around the tree-sitter Go grammar."""

    def __init__(self) -> None:
        self._parser = Parser()
        self._parser.language = GO_LANGUAGE

    def parse_bytes(self, path: Path, data: bytes) -> SourceFile:
        return SourceFile(path, data, self._parser.parse(data))

    def parse(self, path: Path) -> SourceFile:
        """Read and parse a file. Raises OSError if it cannot be read."""
        return self.parse_bytes(path, path.read_bytes())
