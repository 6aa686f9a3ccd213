"""Compatibility shims: the original signature forwarding to the context variant."""

from __future__ import annotations

from dataclasses import dataclass

from ctxpatch.models.context import ContextSettings
from ctxpatch.models.graph import DeclarationNode
from ctxpatch.syntax import Parameter

RECEIVER_NAME = "recv"


@dataclass
class Shim:
    """A synthesized declaration under the original name."""

    name: str
    target: str
    receiver: str | None
    parameters: list[Parameter]
    arguments: list[str]
    text: str


def name_parameters(parameters: tuple[Parameter, ...] | list[Parameter]) -> list[Parameter]:
    """Give unnamed and blank parameters names so they can be forwarded."""
    taken = {p.name for p in parameters if p.name}
    named: list[Parameter] = []
    counter = 0
    for param in parameters:
        if param.name and param.name != "_":
            named.append(param)
            continue
        while f"p{counter}" in taken:
            counter += 1
        name = f"p{counter}"
        taken.add(name)
        named.append(Parameter(name, param.type, param.variadic))
    return named


def build_shim(node: DeclarationNode, settings: ContextSettings) -> Shim:
    """Build the shim for a rewritten declaration.

    The shim keeps the original name, receiver, type parameters, parameters
    and results, and its body is a single call of the renamed variant with
    the background context in the first argument position.
    """
    decl = node.decl
    original = list(node.original_parameters)
    parameters = name_parameters(original)

    if parameters == original:
        params_text = decl.params_text
    else:
        params_text = "(" + ", ".join(p.render() for p in parameters) + ")"

    receiver: str | None = None
    receiver_text = ""
    if decl.receiver_type is not None:
        receiver = decl.receiver_name
        if not receiver or receiver == "_":
            taken = {p.name for p in parameters}
            receiver = RECEIVER_NAME
            while receiver in taken:
                receiver = f"_{receiver}"
        receiver_text = f"({receiver} {decl.receiver_type}) "

    target = settings.renamed(node.original_name)
    callee = f"{receiver}.{target}" if receiver else target
    if decl.type_parameter_names:
        callee += "[" + ", ".join(decl.type_parameter_names) + "]"

    arguments = [settings.background] + [
        f"{p.name}..." if p.variadic else p.name for p in parameters
    ]
    call = f"{callee}({', '.join(arguments)})"
    statement = f"return {call}" if decl.result else call

    header = f"func {receiver_text}{node.original_name}{decl.type_parameters}{params_text}"
    if decl.result:
        header += f" {decl.result}"
    text = f"{header} {{\n\t{statement}\n}}"

    return Shim(
        name=node.original_name,
        target=target,
        receiver=receiver,
        parameters=parameters,
        arguments=arguments,
        text=text,
    )
