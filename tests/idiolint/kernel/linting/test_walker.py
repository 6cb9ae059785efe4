"""Tests for idiolint.kernel.linting.walker."""

from idiolint.compiler.parser import parse_source
from idiolint.kernel.linting.collector import DiagnosticCollector
from idiolint.kernel.linting.models import Category, DiagnosticKind, Fix, Severity
from idiolint.kernel.linting.rules import BaseRule, Match, PredicateRule
from idiolint.kernel.linting.walker import TreeWalker
from idiolint.kernel.syntax.nodes import NodeKind

SOURCE = "function f(x)\n    x + 1\nend\ny = 2\n"


class _Recorder(BaseRule):
    rule_id = "recorder"
    category = Category.NAMING

    def __init__(self, node_kinds=None) -> None:
        self.node_kinds = node_kinds
        self.seen: list[int] = []

    def matches(self, node, context):
        self.seen.append(node.id)
        return ()


class _Exploding(BaseRule):
    rule_id = "exploding"
    category = Category.TYPING
    node_kinds = frozenset({NodeKind.IDENTIFIER})

    def matches(self, node, context):
        raise RuntimeError("boom")


class _BadFixer(BaseRule):
    rule_id = "bad-fixer"
    category = Category.TYPING
    node_kinds = frozenset({NodeKind.LITERAL})

    def matches(self, node, context):
        yield Match(node.span, "literal")

    def fix(self, node, match, context) -> Fix | None:
        raise KeyError("missing")


def _walk(*rules):
    tree = parse_source(SOURCE).tree
    collector = DiagnosticCollector()
    TreeWalker(rules).walk(tree, collector)
    return tree, collector.finish()


class TestTraversal:
    def test_visits_every_node_once_in_preorder(self) -> None:
        recorder = _Recorder()
        tree, _ = _walk(recorder)
        assert recorder.seen == list(range(len(tree)))

    def test_node_kind_bucketing(self) -> None:
        recorder = _Recorder(frozenset({NodeKind.LITERAL}))
        tree, _ = _walk(recorder)
        assert [tree.node(i).kind for i in recorder.seen] == [NodeKind.LITERAL, NodeKind.LITERAL]

    def test_rules_for_keeps_declared_order(self) -> None:
        universal = _Recorder()
        literal_only = _Recorder(frozenset({NodeKind.LITERAL}))
        walker = TreeWalker([literal_only, universal])
        assert walker.rules_for(NodeKind.LITERAL) == [literal_only, universal]
        assert walker.rules_for(NodeKind.BLOCK) == [universal]

    def test_enclosing_function_in_context(self) -> None:
        functions: list[str | None] = []

        def record(node, context):
            enclosing = context.enclosing_function
            functions.append(enclosing.name if enclosing else None)
            return False

        rule = PredicateRule(
            "enclosing",
            Category.NAMING,
            Severity.INFO,
            record,
            node_kinds=[NodeKind.LITERAL],
        )
        _walk(rule)
        assert functions == ["f", None]


class TestRuleIsolation:
    def test_rule_failure_becomes_diagnostic(self, log_messages) -> None:
        _, result = _walk(_Exploding())
        assert len(result) == 2
        for diagnostic in result.diagnostics:
            assert diagnostic.kind is DiagnosticKind.RULE_INTERNAL_ERROR
            assert diagnostic.rule_id == "exploding"
            assert diagnostic.severity is Severity.WARNING
            assert "RuntimeError: boom" in diagnostic.message
        assert any("exploding failed" in message for message in log_messages)

    def test_other_rules_continue(self) -> None:
        literal = PredicateRule(
            "literal",
            Category.CONTAINER,
            Severity.INFO,
            lambda node, context: True,
            node_kinds=[NodeKind.LITERAL],
        )
        _, result = _walk(_Exploding(), literal)
        kinds = {d.rule_id: d.kind for d in result.diagnostics}
        assert kinds["literal"] is DiagnosticKind.FINDING
        assert kinds["exploding"] is DiagnosticKind.RULE_INTERNAL_ERROR
        assert sum(d.rule_id == "literal" for d in result.diagnostics) == 2

    def test_failing_fixer_keeps_finding(self, log_messages) -> None:
        _, result = _walk(_BadFixer())
        findings = [d for d in result.diagnostics if d.kind is DiagnosticKind.FINDING]
        errors = [d for d in result.diagnostics if d.kind is DiagnosticKind.RULE_INTERNAL_ERROR]
        assert len(findings) == 2
        assert all(d.fix is None for d in findings)
        assert [d.span for d in errors] == [d.span for d in findings]
        assert all(d.rule_id == "bad-fixer" for d in errors)
        assert all(d.severity is Severity.WARNING for d in errors)
        assert "Fixer of rule 'bad-fixer'" in errors[0].message
        assert "KeyError" in errors[0].message
        assert any("Fixer of bad-fixer" in message for message in log_messages)


class TestDiagnostics:
    def test_findings_carry_rule_metadata(self) -> None:
        rule = PredicateRule(
            "no-literals",
            Category.CONTAINER,
            Severity.ERROR,
            lambda node, context: True,
            message="literal found",
            node_kinds=[NodeKind.LITERAL],
        )
        _, result = _walk(rule)
        first = result.diagnostics[0]
        assert first.category is Category.CONTAINER
        assert first.severity is Severity.ERROR
        assert first.message == "literal found"
        assert (first.span.line, first.span.column) == (2, 9)
