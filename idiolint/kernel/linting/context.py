"""Bounded view of the tree handed to a rule at one node."""

from __future__ import annotations

from collections.abc import Iterator

from idiolint.kernel.exceptions import ContextWindowError
from idiolint.kernel.syntax.nodes import FunctionDef, NodeKind, SyntaxNode
from idiolint.kernel.syntax.tree import SyntaxTree


class RuleContext:
    """What a rule may see besides the node it is matching.

    The window is the parent's subtree (the node, its siblings and their
    descendants) plus the subtree of the innermost enclosing function
    definition. Asking for any other node raises :class:`ContextWindowError`,
    which keeps rules local and testable against small fixtures.
    """

    __slots__ = ("_tree", "node", "parent", "enclosing_function", "_roots")

    def __init__(
        self,
        tree: SyntaxTree,
        node: SyntaxNode,
        parent: SyntaxNode | None,
        enclosing_function: FunctionDef | None,
    ) -> None:
        self._tree = tree
        self.node = node
        self.parent = parent
        self.enclosing_function = enclosing_function
        roots = [parent.id if parent is not None else node.id]
        if enclosing_function is not None:
            roots.append(enclosing_function.id)
        self._roots = tuple(roots)

    @classmethod
    def for_node(cls, tree: SyntaxTree, node_id: int) -> RuleContext:
        """Build the context the walker would hand out at ``node_id``."""
        enclosing: FunctionDef | None = None
        for ancestor in tree.ancestors(node_id):
            if isinstance(ancestor, FunctionDef):
                enclosing = ancestor
                break
        return cls(tree, tree.node(node_id), tree.parent(node_id), enclosing)

    def in_window(self, node_id: int) -> bool:
        return any(self._tree.is_within(node_id, root) for root in self._roots)

    def get(self, node_id: int) -> SyntaxNode:
        """Resolve a child reference.

        Raises
        ------
        ContextWindowError
            If the node lies outside this context's window
        """
        if not self.in_window(node_id):
            raise ContextWindowError(node_id)
        return self._tree.node(node_id)

    def get_optional(self, node_id: int | None) -> SyntaxNode | None:
        return None if node_id is None else self.get(node_id)

    def children(self, node: SyntaxNode) -> tuple[SyntaxNode, ...]:
        return tuple(self.get(child) for child in node.child_ids())

    def descendants(self, node: SyntaxNode) -> Iterator[SyntaxNode]:
        """Pre-order walk below ``node`` (excluding it)."""
        if not self.in_window(node.id):
            raise ContextWindowError(node.id)
        return self._tree.descendants(node.id)

    def descendants_of_kind(self, node: SyntaxNode, kind: NodeKind) -> Iterator[SyntaxNode]:
        return (child for child in self.descendants(node) if child.kind is kind)

    def parent_of(self, node: SyntaxNode) -> SyntaxNode | None:
        """Parent of ``node`` if it is inside the window, else None."""
        parent = self._tree.parent(node.id)
        if parent is None or not self.in_window(parent.id):
            return None
        return parent

    @property
    def siblings(self) -> tuple[SyntaxNode, ...]:
        """The other children of this node's parent, in source order."""
        if self.parent is None:
            return ()
        return tuple(
            self._tree.node(child) for child in self.parent.child_ids() if child != self.node.id
        )
