"""Analysis modules: package resolution and call graph discovery."""

from ctxpatch.analysis.resolver import PackageResolver
from ctxpatch.analysis.imports import ImportIndex
from ctxpatch.analysis.ignore import IgnoreFilter, IgnoreRule
from ctxpatch.analysis.callgraph import CallGraphBuilder, normalize_function_pattern

__all__ = [
    "CallGraphBuilder",
    "IgnoreFilter",
    "IgnoreRule",
    "ImportIndex",
    "PackageResolver",
    "normalize_function_pattern",
]
