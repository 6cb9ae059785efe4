"""Typing rules: argument annotations, static parameters and unions."""

from __future__ import annotations

from collections.abc import Iterator

from idiolint.builtin.rules._shared import callee_name, union_member_names
from idiolint.kernel.linting import type_lattice as lattice
from idiolint.kernel.linting.context import RuleContext
from idiolint.kernel.linting.models import Category, Fix, Severity, TextEdit
from idiolint.kernel.linting.rules import BaseRule, Match
from idiolint.kernel.syntax.nodes import (
    Assignment,
    BinaryOp,
    CallExpr,
    Comprehension,
    ForLoop,
    FunctionDef,
    Identifier,
    IndexExpr,
    Literal,
    NodeKind,
    Parameter,
    Paren,
    Return,
    SyntaxNode,
    TupleLiteral,
    TypeAnnotation,
    TypeParam,
    UnaryOp,
    UnionType,
    VectorLiteral,
)
from idiolint.kernel.syntax.span import Span

# ---------------------------------------------------------------------------
# Operation tables for the argument-narrowing heuristic
# ---------------------------------------------------------------------------

_ARITHMETIC_OPS = frozenset({"+", "-", "*", "/", "^", "\\", "//"})
_ORDERING_OPS = frozenset({"<", ">", "<=", ">=", "≤", "≥", ":"})
_INTEGRAL_OPS = frozenset({"%", "÷", "&", "|", "<<", ">>", ">>>", "⊻"})
_NEUTRAL_OPS = frozenset({"==", "!=", "===", "!==", "≠", "isa", "=>"})

_NUMBER_FUNCS = frozenset(
    {"abs", "abs2", "sqrt", "exp", "log", "sin", "cos", "tan", "one", "zero", "sign", "iszero",
     "isone", "conj", "real", "imag", "float", "inv"}
)
_REAL_FUNCS = frozenset({"max", "min", "round", "floor", "ceil", "trunc", "clamp", "isless"})
_INTEGER_FUNCS = frozenset(
    {"div", "rem", "mod", "fld", "cld", "gcd", "lcm", "isodd", "iseven", "count_ones",
     "trailing_zeros", "leading_zeros", "powermod", "factorial", "xor"}
)
_CONTAINER_FUNCS = frozenset(
    {"length", "size", "axes", "eachindex", "firstindex", "lastindex", "iterate", "sum", "prod",
     "maximum", "minimum", "extrema", "map", "foreach", "filter", "first", "last", "isempty",
     "collect", "reduce", "mapreduce", "any", "all", "enumerate", "zip", "keys", "values",
     "pairs", "haskey", "get", "in", "eltype", "ndims", "reverse", "sort", "unique", "getindex",
     "setindex!", "view"}
)
_UNCONSTRAINED_FUNCS = frozenset(
    {"print", "println", "show", "display", "string", "repr", "typeof", "isnothing",
     "ismissing", "identity", "hash"}
)


def _literal_kind(node: SyntaxNode) -> str | None:
    return node.literal_type if isinstance(node, Literal) else None


class NarrowArgumentTypeRule(BaseRule):
    """Argument annotated with a concrete type where an abstract ancestor would do.

    Each use of the argument in the body requires the argument to be at least
    some type in the lattice (arithmetic needs ``Number``, ordering ``Real``,
    ``length``/iteration the container's abstract parent, and anything unknown
    the annotation itself). The most specific of those requirements is
    suggested when it is broader than the annotation.
    """

    rule_id = "narrow-argument-type"
    category = Category.TYPING
    severity = Severity.WARNING
    description = "Argument type is narrower than the function body needs"
    node_kinds = frozenset({NodeKind.PARAMETER})

    def matches(self, node: SyntaxNode, context: RuleContext) -> Iterator[Match]:
        function = context.parent
        if not isinstance(node, Parameter) or not isinstance(function, FunctionDef):
            return
        if node.id not in function.params or node.is_splat or node.annotation is None:
            return
        annotation = context.get(node.annotation)
        if not isinstance(annotation, TypeAnnotation) or annotation.subtype_bound:
            return
        declared = annotation.name
        if not lattice.is_concrete(declared) or declared in lattice.ABSENT_MARKERS:
            return

        bounds: list[str] = []
        body = context.get(function.body)
        for use in context.descendants(body):
            if isinstance(use, Identifier) and use.name == node.name:
                bound = self._required(use, declared, context)
                if bound == declared:
                    return
                if bound != lattice.ANY:
                    bounds.append(bound)
        if not bounds:
            return
        if any(not lattice.is_subtype(declared, bound) for bound in bounds):
            return
        needed = max(bounds, key=lambda bound: len(lattice.ancestors(bound)))
        if needed == declared:
            return
        yield Match(
            annotation.span,
            f"Argument '{node.name}' is declared '{declared}' but its uses only need "
            f"'{needed}'",
            {"name_span": annotation.name_span, "declared": declared, "widened": needed},
        )

    def fix(self, node: SyntaxNode, match: Match, context: RuleContext) -> Fix | None:
        return Fix.replace(
            match.data["name_span"],
            match.data["widened"],
            f"Widen '{match.data['declared']}' to '{match.data['widened']}'",
        )

    # -- per-use requirement -------------------------------------------------

    def _required(self, use: Identifier, declared: str, context: RuleContext) -> str:
        child: SyntaxNode = use
        parent = context.parent_of(use)
        while isinstance(parent, Paren):
            child = parent
            parent = context.parent_of(parent)

        if isinstance(parent, BinaryOp):
            other = context.get(parent.right if parent.left == child.id else parent.left)
            return self._operator_bound(parent.op, other, declared)
        if isinstance(parent, Assignment):
            if parent.target == child.id and parent.op not in ("=", ":="):
                other = context.get(parent.value)
                return self._operator_bound(parent.op.rstrip("="), other, declared)
            return declared
        if isinstance(parent, UnaryOp):
            if parent.op in ("-", "+", "√"):
                return "Number"
            return "Integer" if parent.op == "~" else declared
        if isinstance(parent, CallExpr):
            if parent.callee == child.id:
                return declared
            return self._call_bound(callee_name(parent, context), declared)
        if isinstance(parent, IndexExpr):
            if parent.target == child.id:
                return self._container_bound(declared)
            return "Integer"
        if isinstance(parent, ForLoop | Comprehension):
            if parent.iterable == child.id:
                return self._container_bound(declared)
            return declared
        if isinstance(parent, Return | TupleLiteral | VectorLiteral):
            return lattice.ANY
        if parent is not None and parent.kind in (NodeKind.BLOCK, NodeKind.MODULE):
            return lattice.ANY
        return declared

    def _operator_bound(self, op: str, other: SyntaxNode, declared: str) -> str:
        op = op.lstrip(".")
        if op in _NEUTRAL_OPS:
            return lattice.ANY
        if op in _ORDERING_OPS:
            return "Real"
        if op in _INTEGRAL_OPS:
            return "Integer"
        if op in _ARITHMETIC_OPS:
            literal = _literal_kind(other)
            if literal == "int" and lattice.is_subtype(declared, "Integer"):
                return "Integer"
            if literal == "float" and lattice.is_subtype(declared, "AbstractFloat"):
                return "AbstractFloat"
            return "Number"
        return declared

    def _call_bound(self, name: str | None, declared: str) -> str:
        if name is None:
            return declared
        if name in _UNCONSTRAINED_FUNCS:
            return lattice.ANY
        if name in _CONTAINER_FUNCS:
            return self._container_bound(declared)
        if name in _NUMBER_FUNCS:
            return "Number"
        if name in _REAL_FUNCS:
            return "Real"
        if name in _INTEGER_FUNCS:
            return "Integer"
        return declared

    def _container_bound(self, declared: str) -> str:
        if lattice.is_subtype(declared, "Number"):
            return declared
        return lattice.nearest_abstract(declared)


class UnnecessaryTypeParamRule(BaseRule):
    """Static parameter in a ``where`` clause that nothing refers to."""

    rule_id = "unnecessary-type-param"
    category = Category.TYPING
    severity = Severity.WARNING
    description = "Static parameter is never used"
    node_kinds = frozenset({NodeKind.FUNCTION_DEF})

    def matches(self, node: SyntaxNode, context: RuleContext) -> Iterator[Match]:
        if not isinstance(node, FunctionDef) or not node.type_params or node.where_span is None:
            return
        declared = [context.get(param_id) for param_id in node.type_params]
        params = [param for param in declared if isinstance(param, TypeParam)]
        used = self._referenced_names(node, context)
        unused = [param for param in params if param.name not in used]
        if not unused:
            return

        if len(unused) == len(params):
            names = ", ".join(param.name for param in unused)
            yield Match(
                unused[0].span,
                f"Static parameter(s) {names} of '{node.name}' are never used",
                {"edits": (TextEdit.delete(node.where_span),)},
            )
            return

        kept_positions = [i for i, param in enumerate(params) if param.name in used]
        for position, param in enumerate(params):
            if param.name in used:
                continue
            if any(kept > position for kept in kept_positions):
                following = params[position + 1]
                removed = Span(param.span.start, following.span.start)
            else:
                previous = params[position - 1]
                removed = Span(previous.span.end, param.span.end)
            yield Match(
                param.span,
                f"Static parameter '{param.name}' of '{node.name}' is never used",
                {"edits": (TextEdit.delete(removed),)},
            )

    def fix(self, node: SyntaxNode, match: Match, context: RuleContext) -> Fix | None:
        return Fix("Remove unused static parameter", match.data["edits"])

    def _referenced_names(self, function: FunctionDef, context: RuleContext) -> set[str]:
        names: set[str] = set()
        for child in context.descendants(function):
            if isinstance(child, Identifier):
                names.add(child.name)
            elif isinstance(child, TypeAnnotation):
                names.add(child.name.split(".", 1)[0])
        return names


class ElaborateUnionRule(BaseRule):
    """Union of unrelated types, standalone or as a container's element type."""

    rule_id = "elaborate-union"
    category = Category.TYPING
    severity = Severity.INFO
    description = "Union of unrelated types"
    node_kinds = frozenset({NodeKind.UNION_TYPE})

    def matches(self, node: SyntaxNode, context: RuleContext) -> Iterator[Match]:
        if not isinstance(node, UnionType):
            return
        members = union_member_names(node, context)
        present = [name for name in members if name not in lattice.ABSENT_MARKERS]
        if len(set(present)) < 2 or not all(lattice.is_known(name) for name in present):
            return
        if lattice.common_ancestor(present) != lattice.ANY:
            return

        parent = context.parent
        in_container = (
            isinstance(parent, TypeAnnotation) and parent.name in lattice.CONTAINER_TYPES
        )
        if in_container:
            yield Match(
                node.span,
                f"Container element type is a union of unrelated types ({', '.join(present)})",
            )
        elif len(members) >= 3:
            yield Match(
                node.span,
                f"Union of {len(members)} unrelated types ({', '.join(members)}); "
                "consider an abstract supertype or separate methods",
            )


class TypeEqualityRule(BaseRule):
    """``typeof(x) == T`` where ``x isa T`` is meant."""

    rule_id = "type-equality"
    category = Category.TYPING
    severity = Severity.WARNING
    description = "Type comparison with typeof instead of isa"
    node_kinds = frozenset({NodeKind.BINARY_OP})

    def matches(self, node: SyntaxNode, context: RuleContext) -> Iterator[Match]:
        if not isinstance(node, BinaryOp) or node.op not in ("==", "===", "!=", "!=="):
            return
        for side_id in (node.left, node.right):
            side = context.get(side_id)
            if isinstance(side, CallExpr) and callee_name(side, context) == "typeof":
                yield Match(
                    node.span,
                    f"'typeof(...) {node.op} T' ignores subtypes; use 'isa' or dispatch instead",
                )
                return
