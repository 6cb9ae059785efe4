"""Tests for idiolint.kernel.linting.rules (registry and rule adapters)."""

import pytest

from idiolint.builtin.rules import ALL_RULES, default_registry
from idiolint.kernel.exceptions import DuplicateRuleIdError, UnknownRuleError
from idiolint.kernel.linting.models import Category, Severity, TextEdit
from idiolint.kernel.linting.rules import BaseRule, PredicateRule, RuleRegistry
from idiolint.kernel.syntax.nodes import NodeKind


class _Rule(BaseRule):
    def __init__(self, rule_id: str, category: Category = Category.TYPING) -> None:
        self.rule_id = rule_id
        self.category = category

    def matches(self, node, context):
        return ()


class TestRegistration:
    def test_register_and_get(self) -> None:
        registry = RuleRegistry()
        rule = registry.register(_Rule("alpha"))
        assert registry.get("alpha") is rule
        assert "alpha" in registry
        assert len(registry) == 1

    def test_duplicate_id_rejected(self) -> None:
        registry = RuleRegistry()
        registry.register(_Rule("alpha"))
        with pytest.raises(DuplicateRuleIdError) as exc_info:
            registry.register(_Rule("alpha", Category.NAMING))
        assert exc_info.value.rule_id == "alpha"
        assert len(registry) == 1

    def test_unknown_rule(self) -> None:
        with pytest.raises(UnknownRuleError):
            RuleRegistry().get("missing")

    def test_register_predicate(self) -> None:
        registry = RuleRegistry()
        rule = registry.register_predicate(
            "no-x",
            Category.NAMING,
            Severity.INFO,
            lambda node, context: node.name == "x",
            lambda node, context: TextEdit(node.span, "y"),
            message="Avoid x",
            node_kinds=[NodeKind.IDENTIFIER],
        )
        assert isinstance(rule, PredicateRule)
        assert rule.node_kinds == frozenset({NodeKind.IDENTIFIER})
        assert registry.get("no-x") is rule


class TestEnabled:
    def _registry(self) -> RuleRegistry:
        registry = RuleRegistry()
        for rule_id, category in [
            ("zeta", Category.TYPING),
            ("beta", Category.SAFETY),
            ("alpha", Category.TYPING),
            ("gamma", Category.NAMING),
        ]:
            registry.register(_Rule(rule_id, category))
        return registry

    def test_ordered_by_category_then_id(self) -> None:
        ids = [rule.rule_id for rule in self._registry().enabled()]
        assert ids == ["alpha", "zeta", "gamma", "beta"]

    def test_order_independent_of_registration(self) -> None:
        first = self._registry()
        second = RuleRegistry()
        for rule in reversed(list(first)):
            second.register(_Rule(rule.rule_id, rule.category))
        assert [r.rule_id for r in first.enabled()] == [r.rule_id for r in second.enabled()]

    def test_category_filter(self) -> None:
        ids = [rule.rule_id for rule in self._registry().enabled([Category.TYPING])]
        assert ids == ["alpha", "zeta"]

    def test_id_filter(self) -> None:
        ids = [rule.rule_id for rule in self._registry().enabled(None, ["gamma", "zeta"])]
        assert ids == ["zeta", "gamma"]

    def test_filters_intersect(self) -> None:
        registry = self._registry()
        assert registry.enabled([Category.SAFETY], ["alpha"]) == ()

    def test_exclude(self) -> None:
        ids = [rule.rule_id for rule in self._registry().enabled(exclude=["zeta"])]
        assert "zeta" not in ids

    def test_unknown_id_in_filter(self) -> None:
        with pytest.raises(UnknownRuleError):
            self._registry().enabled(rule_ids=["nope"])
        with pytest.raises(UnknownRuleError):
            self._registry().enabled(exclude=["nope"])


class TestDefaultRegistry:
    def test_all_builtin_rules_registered(self) -> None:
        registry = default_registry()
        assert len(registry) == len(ALL_RULES)

    def test_ids_unique_and_stable(self) -> None:
        assert default_registry().rule_ids == default_registry().rule_ids

    def test_core_rules_present(self) -> None:
        registry = default_registry()
        for rule_id in (
            "narrow-argument-type",
            "mutating-naming",
            "unnecessary-type-param",
            "nullable-field",
            "elaborate-union",
            "redundant-wrapper-lambda",
            "parenthesized-condition",
            "splat-overuse",
        ):
            assert rule_id in registry
