"""Tests for idiolint.kernel.syntax.tree."""

import pytest

from idiolint.kernel.exceptions import ValidationError
from idiolint.kernel.syntax.nodes import (
    BinaryOp,
    Block,
    Identifier,
    Literal,
    Module,
    NodeKind,
)
from idiolint.kernel.syntax.span import Span
from idiolint.kernel.syntax.tree import NodeDraft, SyntaxTree, build_tree


def _sum_tree():
    """``x + 1`` then ``y``, built by hand."""
    left = NodeDraft(Identifier, Span(0, 1), {"name": "x"})
    right = NodeDraft(Literal, Span(4, 5), {"value": "1", "literal_type": "int"})
    binary = NodeDraft(BinaryOp, Span(0, 5), {"op": "+", "left": left, "right": right})
    other = NodeDraft(Identifier, Span(6, 7), {"name": "y"})
    block = NodeDraft(Block, Span(0, 7), {"statements": (binary, other)})
    return build_tree(NodeDraft(Module, Span(0, 7), {"body": (block,)}))


class TestTreeBuilder:
    def test_preorder_ids(self) -> None:
        tree = _sum_tree()
        kinds = [node.kind for node in tree]
        assert kinds == [
            NodeKind.MODULE,
            NodeKind.BLOCK,
            NodeKind.BINARY_OP,
            NodeKind.IDENTIFIER,
            NodeKind.LITERAL,
            NodeKind.IDENTIFIER,
        ]
        assert [node.id for node in tree] == list(range(6))

    def test_child_references_are_ids(self) -> None:
        tree = _sum_tree()
        binary = tree.node(2)
        assert isinstance(binary, BinaryOp)
        assert tree.node(binary.left).name == "x"
        assert tree.node(binary.right).value == "1"

    def test_children_numbered_in_source_order(self) -> None:
        right = NodeDraft(Identifier, Span(4, 5), {"name": "b"})
        left = NodeDraft(Identifier, Span(0, 1), {"name": "a"})
        # fields listed right-first: numbering still follows the source
        binary = NodeDraft(BinaryOp, Span(0, 5), {"op": "+", "right": right, "left": left})
        tree = build_tree(binary)
        assert tree.node(1).name == "a"
        assert tree.node(2).name == "b"

    def test_subtrees_are_contiguous(self) -> None:
        tree = _sum_tree()
        assert tree.subtree_end(2) == 5
        assert [node.id for node in tree.descendants(2)] == [3, 4]
        assert tree.subtree_end(0) == len(tree)

    def test_parents_and_ancestors(self) -> None:
        tree = _sum_tree()
        assert tree.parent(0) is None
        assert tree.parent(3).id == 2
        assert [node.id for node in tree.ancestors(3)] == [2, 1, 0]

    def test_is_within(self) -> None:
        tree = _sum_tree()
        assert tree.is_within(4, 2)
        assert tree.is_within(2, 2)
        assert not tree.is_within(5, 2)

    def test_children(self) -> None:
        tree = _sum_tree()
        assert [child.id for child in tree.children(1)] == [2, 5]


class TestSyntaxTree:
    def test_empty_tree_rejected(self) -> None:
        with pytest.raises(ValidationError):
            SyntaxTree(nodes=(), parents=(), subtree_ends=())

    def test_nodes_are_frozen(self) -> None:
        tree = _sum_tree()
        with pytest.raises(AttributeError):
            tree.node(3).name = "z"  # type: ignore[misc]
