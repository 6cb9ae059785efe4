"""Tests for idiolint.kernel.linting.context."""

import pytest

from idiolint.compiler.parser import parse_source
from idiolint.kernel.exceptions import ContextWindowError
from idiolint.kernel.linting.context import RuleContext
from idiolint.kernel.syntax.nodes import FunctionDef, Identifier, NodeKind

SOURCE = """\
function f(x)
    y = x + 1
    return y
end
g(z) = z
"""


@pytest.fixture
def tree():
    return parse_source(SOURCE).tree


def _first(tree, predicate):
    return next(node for node in tree if predicate(node))


class TestRuleContext:
    def test_for_node_finds_parent_and_function(self, tree) -> None:
        x = _first(tree, lambda n: isinstance(n, Identifier) and n.name == "x")
        context = RuleContext.for_node(tree, x.id)
        assert context.node is x
        assert context.parent is not None
        assert context.parent.kind is NodeKind.BINARY_OP
        assert isinstance(context.enclosing_function, FunctionDef)
        assert context.enclosing_function.name == "f"

    def test_window_covers_enclosing_function(self, tree) -> None:
        x = _first(tree, lambda n: isinstance(n, Identifier) and n.name == "x")
        context = RuleContext.for_node(tree, x.id)
        ret = _first(tree, lambda n: n.kind is NodeKind.RETURN)
        assert context.get(ret.id) is ret

    def test_outside_window_raises(self, tree) -> None:
        x = _first(tree, lambda n: isinstance(n, Identifier) and n.name == "x")
        context = RuleContext.for_node(tree, x.id)
        g = _first(tree, lambda n: isinstance(n, FunctionDef) and n.name == "g")
        with pytest.raises(ContextWindowError):
            context.get(g.id)
        with pytest.raises(ContextWindowError):
            context.get(tree.root.id)
        assert not context.in_window(g.id)

    def test_top_level_node_sees_its_siblings(self, tree) -> None:
        f = _first(tree, lambda n: isinstance(n, FunctionDef) and n.name == "f")
        context = RuleContext.for_node(tree, f.id)
        assert context.enclosing_function is None
        assert [getattr(s, "name", None) for s in context.siblings] == ["g"]

    def test_parent_of_stops_at_window(self, tree) -> None:
        z = _first(tree, lambda n: isinstance(n, Identifier) and n.name == "z")
        context = RuleContext.for_node(tree, z.id)
        g = context.enclosing_function
        assert g is not None and g.name == "g"
        assert context.parent_of(g) is None

    def test_descendants_of_kind(self, tree) -> None:
        f = _first(tree, lambda n: isinstance(n, FunctionDef) and n.name == "f")
        context = RuleContext.for_node(tree, f.id)
        names = [n.name for n in context.descendants_of_kind(f, NodeKind.IDENTIFIER)]
        assert names == ["y", "x", "y"]

    def test_get_optional(self, tree) -> None:
        context = RuleContext.for_node(tree, 0)
        assert context.get_optional(None) is None
