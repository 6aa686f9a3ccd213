"""Settings describing the context parameter threaded through the graph."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ContextSettings:
    """How the context parameter is named, typed and defaulted."""

    variable: str = "ctx"
    type: str = "context.Context"
    background: str = "context.Background()"
    suffix: str = "WithCtx"
    rename_identifier_calls: bool = False

    @property
    def parameter(self) -> str:
        """The formal parameter inserted at position 0, e.g. "ctx context.Context"."""
        return f"{self.variable} {self.type}"

    def renamed(self, name: str) -> str:
        return f"{name}{self.suffix}"
