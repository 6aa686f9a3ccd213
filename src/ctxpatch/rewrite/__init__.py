"""Signature and call-site rewriting."""

from ctxpatch.rewrite.rewriter import RewriteReport, Rewriter
from ctxpatch.rewrite.shim import Shim, build_shim

__all__ = ["RewriteReport", "Rewriter", "Shim", "build_shim"]
