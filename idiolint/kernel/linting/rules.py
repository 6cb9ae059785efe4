"""Lint rule protocol and registry for idiolint."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field
from typing import Any, Protocol

from idiolint.core.logging import get_logger
from idiolint.kernel.exceptions import DuplicateRuleIdError, UnknownRuleError
from idiolint.kernel.linting.context import RuleContext
from idiolint.kernel.linting.models import Category, Fix, Severity, TextEdit
from idiolint.kernel.syntax.nodes import NodeKind, SyntaxNode
from idiolint.kernel.syntax.span import Span

logger = get_logger(__name__)

MatchPredicate = Callable[[SyntaxNode, RuleContext], bool]
Fixer = Callable[[SyntaxNode, RuleContext], "Fix | TextEdit | None"]


@dataclass(frozen=True, slots=True)
class Match:
    """One place where a rule's pattern matched.

    ``data`` carries whatever the matcher worked out that the fixer needs.
    """

    span: Span
    message: str
    data: dict[str, Any] = field(default_factory=dict)


class Rule(Protocol):
    """Protocol for a single lint rule.

    Rules are stateless and shared across files and worker threads. Both
    methods must be pure: no I/O and no mutable state.
    """

    rule_id: str
    category: Category
    severity: Severity
    description: str
    node_kinds: frozenset[NodeKind] | None

    def matches(self, node: SyntaxNode, context: RuleContext) -> Iterable[Match]:
        """Yield every match of this rule at ``node``."""
        ...

    def fix(self, node: SyntaxNode, match: Match, context: RuleContext) -> Fix | None:
        """Return a fix for ``match``, or None when no mechanical fix exists."""
        ...


class BaseRule:
    """Convenience base for rules implemented as classes.

    Subclasses set the class attributes and implement :meth:`matches`; rules
    that can repair their finding also override :meth:`fix`.
    """

    rule_id: str = ""
    category: Category = Category.TYPING
    severity: Severity = Severity.WARNING
    description: str = ""
    node_kinds: frozenset[NodeKind] | None = None

    def matches(self, node: SyntaxNode, context: RuleContext) -> Iterable[Match]:
        raise NotImplementedError

    def fix(self, node: SyntaxNode, match: Match, context: RuleContext) -> Fix | None:
        return None

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.rule_id!r})"


class PredicateRule(BaseRule):
    """Adapts a plain ``(node, context) -> bool`` predicate and optional fixer to :class:`Rule`."""

    def __init__(
        self,
        rule_id: str,
        category: Category,
        severity: Severity,
        predicate: MatchPredicate,
        fixer: Fixer | None = None,
        *,
        message: str | None = None,
        description: str = "",
        node_kinds: Iterable[NodeKind] | None = None,
    ) -> None:
        self.rule_id = rule_id
        self.category = category
        self.severity = severity
        self.description = description
        self.node_kinds = frozenset(node_kinds) if node_kinds is not None else None
        self._predicate = predicate
        self._fixer = fixer
        self._message = message or description or rule_id

    def matches(self, node: SyntaxNode, context: RuleContext) -> Iterator[Match]:
        if self._predicate(node, context):
            yield Match(node.span, self._message)

    def fix(self, node: SyntaxNode, match: Match, context: RuleContext) -> Fix | None:
        if self._fixer is None:
            return None
        result = self._fixer(node, context)
        if isinstance(result, TextEdit):
            return Fix(f"Apply {self.rule_id} fix", (result,))
        return result


class RuleRegistry:
    """Holds the registered rules and resolves which of them are enabled.

    Built once at startup and threaded into every analysis call. It is only
    mutated during registration and is read-only (and therefore safe to share
    between worker threads) afterwards.
    """

    __slots__ = ("_rules",)

    def __init__(self) -> None:
        self._rules: dict[str, Rule] = {}

    def register(self, rule: Rule) -> Rule:
        """Add ``rule`` under its id.

        Raises
        ------
        DuplicateRuleIdError
            If a rule with the same id is already registered
        """
        if rule.rule_id in self._rules:
            raise DuplicateRuleIdError(rule.rule_id)
        self._rules[rule.rule_id] = rule
        logger.debug("Registered rule {rule_id}", rule_id=rule.rule_id)
        return rule

    def register_predicate(
        self,
        rule_id: str,
        category: Category,
        severity: Severity,
        matches: MatchPredicate,
        fix: Fixer | None = None,
        *,
        message: str | None = None,
        description: str = "",
        node_kinds: Iterable[NodeKind] | None = None,
    ) -> Rule:
        """Plugin entry point: register a rule given as a predicate and optional fixer."""
        rule = PredicateRule(
            rule_id,
            category,
            severity,
            matches,
            fix,
            message=message,
            description=description,
            node_kinds=node_kinds,
        )
        return self.register(rule)

    def get(self, rule_id: str) -> Rule:
        try:
            return self._rules[rule_id]
        except KeyError:
            raise UnknownRuleError(rule_id, sorted(self._rules)) from None

    def __contains__(self, rule_id: object) -> bool:
        return rule_id in self._rules

    def __len__(self) -> int:
        return len(self._rules)

    def __iter__(self) -> Iterator[Rule]:
        return iter(self._ordered(list(self._rules.values())))

    @property
    def rule_ids(self) -> list[str]:
        return [rule.rule_id for rule in self]

    def enabled(
        self,
        categories: Iterable[Category] | None = None,
        rule_ids: Iterable[str] | None = None,
        *,
        exclude: Iterable[str] = (),
    ) -> tuple[Rule, ...]:
        """Return the rules matching both filters, ordered by category then id.

        ``None`` for a filter means "no restriction". Ids named in ``rule_ids``
        or ``exclude`` must be registered.

        Raises
        ------
        UnknownRuleError
            If a filter names an unregistered rule id
        """
        wanted_ids = self._checked_ids(rule_ids) if rule_ids is not None else None
        excluded = self._checked_ids(exclude)
        wanted_categories = set(categories) if categories is not None else None

        selected = [
            rule
            for rule in self._rules.values()
            if (wanted_categories is None or rule.category in wanted_categories)
            and (wanted_ids is None or rule.rule_id in wanted_ids)
            and rule.rule_id not in excluded
        ]
        return tuple(self._ordered(selected))

    def _checked_ids(self, rule_ids: Iterable[str]) -> set[str]:
        ids = set(rule_ids)
        for rule_id in sorted(ids):
            if rule_id not in self._rules:
                raise UnknownRuleError(rule_id, sorted(self._rules))
        return ids

    def _ordered(self, rules: list[Rule]) -> list[Rule]:
        position = {rule_id: index for index, rule_id in enumerate(self._rules)}
        return sorted(
            rules, key=lambda rule: (rule.category.order, rule.rule_id, position[rule.rule_id])
        )
