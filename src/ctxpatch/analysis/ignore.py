"""Rules that mark a call site as a leaf of the graph."""

from __future__ import annotations

import re
from dataclasses import dataclass

from ctxpatch.config import DEFAULT_IGNORE_RULES
from ctxpatch.errors import ConfigError


@dataclass(frozen=True)
class IgnoreRule:
    """A described regular expression searched in rendered call text."""

    description: str
    pattern: re.Pattern[str]

    def matches(self, call_text: str) -> bool:
        return self.pattern.search(call_text) is not None


class IgnoreFilter:
    """Ordered ignore rules; the first matching rule wins."""

    def __init__(self, rules: list[IgnoreRule]) -> None:
        self.rules = rules

    @classmethod
    def from_config(cls, rules: list[dict[str, str]] | None = None) -> IgnoreFilter:
        """Compile {description, pattern} mappings (defaults when None)."""
        compiled: list[IgnoreRule] = []
        for rule in DEFAULT_IGNORE_RULES if rules is None else rules:
            try:
                pattern = re.compile(rule["pattern"])
            except re.error as e:
                raise ConfigError(
                    f"invalid ignore pattern {rule['pattern']!r} ({rule.get('description', '')}): {e}"
                ) from e
            compiled.append(IgnoreRule(rule.get("description", rule["pattern"]), pattern))
        return cls(compiled)

    def match(self, call_text: str) -> IgnoreRule | None:
        for rule in self.rules:
            if rule.matches(call_text):
                return rule
        return None

    def is_ignored(self, call_text: str) -> bool:
        return self.match(call_text) is not None

    def __len__(self) -> int:
        return len(self.rules)
