"""Built-in idiom rules.

Rules are stateless; one instance of each serves every file and worker.
"""

from idiolint.builtin.rules.container_rules import AbstractContainerEltypeRule, SplatOveruseRule
from idiolint.builtin.rules.control_flow_rules import (
    ParenthesizedConditionRule,
    RedundantWrapperLambdaRule,
)
from idiolint.builtin.rules.macro_rules import EvalInFunctionRule
from idiolint.builtin.rules.mutation_rules import MutatingNamingRule
from idiolint.builtin.rules.naming_rules import NamingConventionRule
from idiolint.builtin.rules.safety_rules import NullableFieldRule, UnsafeInterfaceRule
from idiolint.builtin.rules.typing_rules import (
    ElaborateUnionRule,
    NarrowArgumentTypeRule,
    TypeEqualityRule,
    UnnecessaryTypeParamRule,
)
from idiolint.kernel.linting.rules import Rule, RuleRegistry

ALL_RULES: tuple[type, ...] = (
    NarrowArgumentTypeRule,
    UnnecessaryTypeParamRule,
    ElaborateUnionRule,
    TypeEqualityRule,
    NamingConventionRule,
    MutatingNamingRule,
    SplatOveruseRule,
    AbstractContainerEltypeRule,
    RedundantWrapperLambdaRule,
    ParenthesizedConditionRule,
    EvalInFunctionRule,
    NullableFieldRule,
    UnsafeInterfaceRule,
)


def builtin_rules() -> list[Rule]:
    """Fresh instances of every built-in rule."""
    return [rule_class() for rule_class in ALL_RULES]


def default_registry() -> RuleRegistry:
    """Registry holding all built-in rules."""
    registry = RuleRegistry()
    for rule in builtin_rules():
        registry.register(rule)
    return registry


__all__ = [
    "ALL_RULES",
    "AbstractContainerEltypeRule",
    "ElaborateUnionRule",
    "EvalInFunctionRule",
    "MutatingNamingRule",
    "NamingConventionRule",
    "NarrowArgumentTypeRule",
    "NullableFieldRule",
    "ParenthesizedConditionRule",
    "RedundantWrapperLambdaRule",
    "SplatOveruseRule",
    "TypeEqualityRule",
    "UnnecessaryTypeParamRule",
    "UnsafeInterfaceRule",
    "builtin_rules",
    "default_registry",
]
