"""Fatal error types. Anything not raised here degrades to a status on the model."""

from pathlib import Path


class RefactorError(Exception):
    """Base class for conditions that abort a run."""


class ConfigError(RefactorError):
    """The configuration could not be loaded or is malformed."""


class EntryFileError(RefactorError):
    """The entry file cannot be read or parsed."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"cannot use entry file {path}: {reason}")
        self.path = path
        self.reason = reason


class EntryPointNotFoundError(RefactorError):
    """No declaration in the entry file matches the requested name."""

    def __init__(self, path: Path, pattern: str) -> None:
        super().__init__(f"no function matching {pattern!r} in {path}")
        self.path = path
        self.pattern = pattern


class AmbiguousEntryPointError(RefactorError):
    """More than one declaration in the entry file matches."""

    def __init__(self, path: Path, pattern: str, candidates: list[str]) -> None:
        super().__init__(
            f"found more than one function matching {pattern!r} in {path}: "
            + ", ".join(candidates)
        )
        self.path = path
        self.pattern = pattern
        self.candidates = candidates


class CyclicCallGraphError(RefactorError):
    """A declaration was reached again on its own root-to-node path."""

    def __init__(self, chain: list[str]) -> None:
        super().__init__("call graph is cyclic: " + " -> ".join(chain))
        self.chain = chain


class CallGraphTooDeepError(RefactorError):
    """Traversal went past the configured depth ceiling."""

    def __init__(self, max_depth: int, chain: list[str]) -> None:
        super().__init__(
            f"call graph deeper than {max_depth}: " + " -> ".join(chain)
        )
        self.max_depth = max_depth
        self.chain = chain
