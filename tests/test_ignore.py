"""Tests for call ignore rules."""

import pytest

from ctxpatch.analysis.ignore import IgnoreFilter
from ctxpatch.config import DEFAULT_IGNORE_RULES
from ctxpatch.errors import ConfigError


class TestDefaultRules:
    """Tests for the built-in rule set."""

    def test_defaults_loaded(self):
        """None means the default rules."""
        ignore_filter = IgnoreFilter.from_config()
        assert len(ignore_filter) == len(DEFAULT_IGNORE_RULES)

    @pytest.mark.parametrize(
        "call_text",
        [
            "len(items)",
            "append(out, f(item))",
            "opentracing.SpanFromContext(ctx)",
            'span.SetTag("id", id)',
            "func() { done() }()",
            "row.String()",
            "strings.TrimSpace(name)",
            'ctx.GetValue("user")',
            "contextvals.GetUserId(ctx)",
        ],
    )
    def test_ignored_calls(self, call_text):
        """Builtins, tracing helpers and trivial getters are leaves."""
        assert IgnoreFilter.from_config().is_ignored(call_text)

    def test_regular_call_proceeds(self):
        """An ordinary call matches no rule."""
        assert IgnoreFilter.from_config().match("svc.Fetch(id)") is None

    def test_string_with_arguments_proceeds(self):
        """Only the argument-less String() getter is ignored."""
        assert not IgnoreFilter.from_config().is_ignored("fmt.String(x)")


class TestCustomRules:
    """Tests for configured rules."""

    def test_first_match_wins(self):
        """The earliest matching rule is reported."""
        ignore_filter = IgnoreFilter.from_config(
            [
                {"description": "logging", "pattern": r"log\."},
                {"description": "printf", "pattern": r"Printf\("},
            ]
        )

        rule = ignore_filter.match('log.Printf("x")')

        assert rule is not None
        assert rule.description == "logging"

    def test_replaces_defaults(self):
        """Configured rules replace the defaults entirely."""
        ignore_filter = IgnoreFilter.from_config([{"description": "x", "pattern": "x"}])

        assert not ignore_filter.is_ignored("len(items)")

    def test_empty_rules(self):
        """An empty list ignores nothing."""
        ignore_filter = IgnoreFilter.from_config([])

        assert len(ignore_filter) == 0
        assert not ignore_filter.is_ignored("len(items)")

    def test_description_defaults_to_pattern(self):
        ignore_filter = IgnoreFilter.from_config([{"pattern": r"Close\("}])
        assert ignore_filter.rules[0].description == r"Close\("

    def test_invalid_pattern(self):
        """A pattern that does not compile is a configuration error."""
        with pytest.raises(ConfigError, match="invalid ignore pattern"):
            IgnoreFilter.from_config([{"description": "broken", "pattern": "len("}])
