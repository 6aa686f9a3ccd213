"""JSON output writers for config and refactoring reports."""

import json
from pathlib import Path

from ctxpatch.models.graph import CallSite, DeclarationNode
from ctxpatch.models.results import RefactorResult


def write_config(config: dict, output_path: Path) -> None:
    """Write a ctxpatch configuration file."""
    data = {"$schema": "https://ctxpatch.dev/schema/config.json", "version": "1.0", **config}

    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)


def write_report(result: RefactorResult, output_path: Path) -> None:
    """Write the report.json file."""
    data = result.to_dict()

    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)


def load_report(report_path: Path) -> dict:
    """Load a report.json file."""
    with open(report_path, "r", encoding="utf-8") as f:
        return json.load(f)


def declaration_to_dict(node: DeclarationNode) -> dict:
    """Serialize a declaration node and everything below it."""
    return {
        "name": node.name,
        "original_name": node.original_name,
        "package": node.package_name,
        "receiver": node.receiver_type,
        "file": str(node.path),
        "line": node.decl.line,
        "depth": node.depth,
        "signature": node.signature,
        "original_signature": node.original_signature,
        "shim": node.shim.text if node.shim else None,
        "calls": [_call_to_dict(call) for call in node.calls],
    }


def _call_to_dict(call: CallSite) -> dict:
    return {
        "text": call.text,
        "original_text": call.original_text,
        "line": call.expr.line,
        "depth": call.depth,
        "status": call.status.name.lower(),
        "ignored_by": call.ignored_by,
        "resolved": [declaration_to_dict(child) for child in call.resolved],
    }
