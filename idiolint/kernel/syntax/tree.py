"""Arena-backed syntax trees.

A :class:`SyntaxTree` owns every node of one source unit in a flat tuple.
Node ids are assigned in pre-order, so iterating the arena *is* a source-order
pre-order traversal and the subtree of a node is the contiguous id range
``[node.id, tree.subtree_end(node.id))``.

Trees are produced by :class:`TreeBuilder` from :class:`NodeDraft` objects, the
mutable shape a reader (or a test fixture) assembles before numbering.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

from idiolint.kernel.exceptions import ValidationError
from idiolint.kernel.syntax.nodes import SyntaxNode
from idiolint.kernel.syntax.span import PositionIndex, Span


@dataclass(slots=True)
class NodeDraft:
    """Un-numbered node: the node class, its span and its field values.

    Child-reference fields hold nested drafts (or tuples of drafts) instead of ids.
    """

    node_type: type[SyntaxNode]
    span: Span
    fields: dict[str, Any] = field(default_factory=dict)

    def child_drafts(self) -> list[NodeDraft]:
        children: list[NodeDraft] = []
        for name in self.node_type.CHILD_FIELDS:
            value = self.fields.get(name)
            if value is None:
                continue
            if isinstance(value, NodeDraft):
                children.append(value)
            else:
                children.extend(value)
        return children


@dataclass(frozen=True, slots=True)
class SyntaxTree:
    """Immutable arena of syntax nodes; ``nodes[0]`` is the root."""

    nodes: tuple[SyntaxNode, ...]
    parents: tuple[int, ...]
    subtree_ends: tuple[int, ...]

    def __post_init__(self) -> None:
        if not self.nodes:
            raise ValidationError("nodes", "a syntax tree needs at least a root node")
        if not len(self.nodes) == len(self.parents) == len(self.subtree_ends):
            raise ValidationError("tree", "node, parent and subtree tables differ in length")

    def __len__(self) -> int:
        return len(self.nodes)

    def __iter__(self) -> Iterator[SyntaxNode]:
        return iter(self.nodes)

    @property
    def root(self) -> SyntaxNode:
        return self.nodes[0]

    def node(self, node_id: int) -> SyntaxNode:
        return self.nodes[node_id]

    def parent(self, node_id: int) -> SyntaxNode | None:
        parent_id = self.parents[node_id]
        return None if parent_id < 0 else self.nodes[parent_id]

    def children(self, node_id: int) -> tuple[SyntaxNode, ...]:
        return tuple(self.nodes[child] for child in self.nodes[node_id].child_ids())

    def subtree_end(self, node_id: int) -> int:
        """Exclusive upper bound of the ids in ``node_id``'s subtree."""
        return self.subtree_ends[node_id]

    def descendants(self, node_id: int) -> Iterator[SyntaxNode]:
        """Pre-order iteration over the subtree, excluding the node itself."""
        for descendant in range(node_id + 1, self.subtree_ends[node_id]):
            yield self.nodes[descendant]

    def ancestors(self, node_id: int) -> Iterator[SyntaxNode]:
        """Parent first, root last."""
        parent_id = self.parents[node_id]
        while parent_id >= 0:
            yield self.nodes[parent_id]
            parent_id = self.parents[parent_id]

    def is_within(self, node_id: int, ancestor_id: int) -> bool:
        """True if ``node_id`` is ``ancestor_id`` or one of its descendants."""
        return ancestor_id <= node_id < self.subtree_ends[ancestor_id]


class TreeBuilder:
    """Numbers a draft tree in pre-order and freezes it into a :class:`SyntaxTree`.

    Siblings are numbered in source order (by span start), whatever field they
    live in.
    """

    __slots__ = ("_nodes", "_parents", "_ends")

    def __init__(self) -> None:
        self._nodes: list[SyntaxNode | None] = []
        self._parents: list[int] = []
        self._ends: list[int] = []

    def build(self, root: NodeDraft) -> SyntaxTree:
        self._nodes.clear()
        self._parents.clear()
        self._ends.clear()
        self._emit(root, -1)
        nodes = tuple(node for node in self._nodes if node is not None)
        return SyntaxTree(nodes=nodes, parents=tuple(self._parents), subtree_ends=tuple(self._ends))

    def _emit(self, draft: NodeDraft, parent_id: int) -> int:
        node_id = len(self._nodes)
        self._nodes.append(None)
        self._parents.append(parent_id)
        self._ends.append(node_id + 1)

        ids: dict[int, int] = {}
        ordered = sorted(draft.child_drafts(), key=lambda child: child.span.start)
        for child in ordered:
            ids[id(child)] = self._emit(child, node_id)

        values: dict[str, Any] = {}
        for name, value in draft.fields.items():
            if name in draft.node_type.CHILD_FIELDS and value is not None:
                if isinstance(value, NodeDraft):
                    value = ids[id(value)]
                else:
                    value = tuple(ids[id(child)] for child in value)
            values[name] = value

        self._nodes[node_id] = draft.node_type(id=node_id, span=draft.span, **values)
        self._ends[node_id] = len(self._nodes)
        return node_id


@dataclass(frozen=True, slots=True)
class SourceUnit:
    """One input file: its syntax tree, position index and original text."""

    path: str
    tree: SyntaxTree
    index: PositionIndex
    text: str


def build_tree(root: NodeDraft) -> SyntaxTree:
    """Shortcut for ``TreeBuilder().build(root)``."""
    return TreeBuilder().build(root)
