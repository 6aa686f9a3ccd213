"""ctxpatch - thread a context parameter through a Go call graph."""

__version__ = "0.1.0"
