"""Naming rules."""

from __future__ import annotations

import re
from collections.abc import Iterator

from idiolint.builtin.rules._shared import short_name
from idiolint.kernel.linting.context import RuleContext
from idiolint.kernel.linting.models import Category, Severity
from idiolint.kernel.linting.rules import BaseRule, Match
from idiolint.kernel.syntax.nodes import FunctionDef, NodeKind, StructDef, SyntaxNode

_CAMEL_CASE_RE = re.compile(r"^[A-Z][A-Za-z0-9]*$")
# lowercase start with an uppercase letter later on: camelCase
_MIXED_CASE_RE = re.compile(r"^[a-z][a-z0-9_]*[A-Z]")


class NamingConventionRule(BaseRule):
    """Types are CamelCase, functions are lowercase."""

    rule_id = "naming-convention"
    category = Category.NAMING
    severity = Severity.INFO
    description = "Name does not follow the type/function naming convention"
    node_kinds = frozenset({NodeKind.STRUCT_DEF, NodeKind.FUNCTION_DEF})

    def matches(self, node: SyntaxNode, context: RuleContext) -> Iterator[Match]:
        if isinstance(node, StructDef):
            if not _CAMEL_CASE_RE.match(node.name):
                yield Match(node.name_span, f"Type name '{node.name}' should be CamelCase")
        elif isinstance(node, FunctionDef):
            name = short_name(node.name)
            if _MIXED_CASE_RE.match(name):
                yield Match(
                    node.name_span,
                    f"Function name '{name}' should be lowercase (use underscores "
                    "only where words would otherwise be hard to read)",
                )
