"""Tests for idiolint.compiler.parser."""

import pytest

from idiolint.compiler.parser import parse_source
from idiolint.kernel.exceptions import ParseError
from idiolint.kernel.syntax.nodes import (
    AnonymousFunction,
    Assignment,
    BinaryOp,
    CallExpr,
    Comprehension,
    Conditional,
    FieldAccess,
    ForLoop,
    FunctionDef,
    Identifier,
    IndexExpr,
    Keyword,
    Literal,
    Macro,
    MacroDef,
    NodeKind,
    Parameter,
    Paren,
    SplatExpr,
    StructDef,
    StructField,
    TupleLiteral,
    TypeAnnotation,
    TypeParam,
    UnionType,
    WhileLoop,
)


def _all(text: str, node_type):
    tree = parse_source(text).tree
    return [node for node in tree if isinstance(node, node_type)]


def _one(text: str, node_type):
    (node,) = _all(text, node_type)
    return node


class TestSourceUnit:
    def test_unit_fields(self) -> None:
        unit = parse_source("x = 1\n", "a.jl")
        assert unit.path == "a.jl"
        assert unit.text == "x = 1\n"
        assert unit.tree.root.kind is NodeKind.MODULE
        assert unit.index.position(4) == (1, 5)

    def test_empty_source(self) -> None:
        tree = parse_source("").tree
        assert len(tree) == 1
        assert tree.root.body == ()

    def test_statements_in_source_order(self) -> None:
        tree = parse_source("a = 1\nb = 2; c = 3\n").tree
        targets = [tree.node(tree.node(i).target).name for i in tree.root.body]
        assert targets == ["a", "b", "c"]

    def test_spans_point_into_text(self) -> None:
        text = "total = sum(values)\n"
        unit = parse_source(text)
        call = next(node for node in unit.tree if isinstance(node, CallExpr))
        assert text[call.span.start : call.span.end] == "sum(values)"
        assert (call.span.line, call.span.column) == (1, 9)


class TestFunctions:
    def test_short_form(self) -> None:
        function = _one("foo(x::Int, y=2) = x + y", FunctionDef)
        assert function.name == "foo"
        assert function.short_form
        params = _all("foo(x::Int, y=2) = x + y", Parameter)
        assert [p.name for p in params] == ["x", "y"]
        assert params[0].annotation is not None
        assert params[1].default is not None

    def test_long_form_with_where(self) -> None:
        text = "function f(x::T, v::Vector{S}) where {T<:Real, S}\n    x\nend\n"
        function = _one(text, FunctionDef)
        assert not function.short_form
        assert function.where_span is not None
        assert text[function.where_span.start : function.where_span.end] == " where {T<:Real, S}"
        names = [p.name for p in _all(text, TypeParam)]
        assert names == ["T", "S"]

    def test_short_form_return_type(self) -> None:
        function = _one("half(x)::Float64 = x / 2", FunctionDef)
        assert function.return_type is not None

    def test_keyword_parameters(self) -> None:
        params = _all("function f(a; scale=1.0, kw...)\n    a\nend\n", Parameter)
        assert [(p.name, p.keyword, p.is_splat) for p in params] == [
            ("a", False, False),
            ("scale", True, False),
            ("kw", True, True),
        ]

    def test_qualified_name(self) -> None:
        function = _one("Base.show(io::IO, p) = print(io, p)", FunctionDef)
        assert function.name == "Base.show"

    def test_operator_method(self) -> None:
        function = _one("function +(a::P, b::P)\n    a\nend\n", FunctionDef)
        assert function.name == "+"

    def test_anonymous_functions(self) -> None:
        text = "map(x -> x^2, v)\nfoo(function (a, b)\n    a + b\nend)\n"
        lambdas = _all(text, AnonymousFunction)
        assert [len(node.params) for node in lambdas] == [1, 2]

    def test_do_block(self) -> None:
        call = _all("open(path) do io, mode\n    read(io)\nend\n", CallExpr)[0]
        assert len(call.args) == 2
        lambda_ = _one("open(path) do io, mode\n    read(io)\nend\n", AnonymousFunction)
        assert len(lambda_.params) == 2

    def test_macro_definition(self) -> None:
        macro = _one("macro twice(ex)\n    ex\nend\n", MacroDef)
        assert macro.name == "twice"
        assert len(macro.params) == 1


class TestStructs:
    def test_fields_and_constructor(self) -> None:
        text = (
            "mutable struct Point{T} <: Shape\n"
            "    \"x coordinate\"\n"
            "    x::T\n"
            "    y::T = zero(T)\n"
            "    tag\n"
            "    Point(x) = new{Float64}(x, x, nothing)\n"
            "end\n"
        )
        struct = _one(text, StructDef)
        assert struct.name == "Point"
        assert struct.mutable
        assert struct.supertype is not None
        assert len(struct.type_params) == 1
        assert len(struct.constructors) == 1
        fields = _all(text, StructField)
        assert [f.name for f in fields] == ["x", "y", "tag"]
        assert fields[1].default is not None
        assert fields[2].annotation is None

    def test_union_field(self) -> None:
        union = _one("struct A\n    x::Union{Nothing,Int}\nend\n", UnionType)
        assert len(union.members) == 2


class TestControlFlow:
    def test_if_elseif_else(self) -> None:
        text = "if a\n    1\nelseif b\n    2\nelse\n    3\nend\n"
        conditionals = _all(text, Conditional)
        assert [c.keyword for c in conditionals] == ["if", "elseif"]
        assert conditionals[0].orelse == conditionals[1].id
        assert conditionals[1].orelse is not None
        assert conditionals[0].span.end == conditionals[1].span.end == len(text) - 1

    def test_ternary(self) -> None:
        conditional = _one("y = x > 0 ? x : -x", Conditional)
        assert conditional.keyword == "?"

    def test_for_with_several_specs_nests(self) -> None:
        loops = _all("for i in 1:n, j in 1:m\n    a[i, j] = 0\nend\n", ForLoop)
        assert len(loops) == 2
        assert loops[1].span.start > loops[0].span.start

    def test_while(self) -> None:
        loop = _one("while i < 3\n    i += 1\nend\n", WhileLoop)
        assert loop.test is not None

    def test_try_catch(self) -> None:
        calls = _all("try\n    f()\ncatch e\n    g(e)\nfinally\n    h()\nend\n", CallExpr)
        assert len(calls) == 3

    def test_let_and_begin(self) -> None:
        assert len(_all("let a = 1, b = 2\n    a + b\nend\n", Assignment)) == 2
        assert len(_all("begin\n    x = 1\n    y = 2\nend\n", Assignment)) == 2

    def test_break_continue_and_imports(self) -> None:
        words = [k.word for k in _all("using LinearAlgebra\nfor i in v\n    break\nend\n", Keyword)]
        assert words == ["using", "break"]


class TestExpressions:
    def test_precedence(self) -> None:
        top = _all("a + b * c", BinaryOp)[0]
        assert top.op == "+"

    def test_power_binds_tighter_than_unary(self) -> None:
        tree = parse_source("-x^2").tree
        assert tree.node(tree.root.body[0]).kind is NodeKind.UNARY_OP

    def test_numeric_juxtaposition(self) -> None:
        (product,) = _all("2x", BinaryOp)
        assert product.op == "*"

    def test_negative_literal(self) -> None:
        assert _one("x = -1", Literal).value == "-1"

    def test_broadcast_call(self) -> None:
        call = _one("sin.(v)", CallExpr)
        assert call.broadcast

    def test_keyword_arguments(self) -> None:
        call = _all("plot(x, y; color=:red, width=2)", CallExpr)[0]
        assert len(call.args) == 2
        assert len(call.kwargs) == 2

    def test_index_with_end(self) -> None:
        index = _one("v[end - 1]", IndexExpr)
        assert len(index.indices) == 1
        assert any(i.name == "end" for i in _all("v[end - 1]", Identifier))

    def test_index_assignment(self) -> None:
        (index,) = _all("a[i] *= 2", IndexExpr)
        assert len(index.indices) == 1
        assert _one("a[i] *= 2", Assignment)

    def test_field_access_chain(self) -> None:
        accesses = _all("a.b.c", FieldAccess)
        assert [f.field for f in accesses] == ["c", "b"]

    def test_comprehension_and_generator(self) -> None:
        comp = _one("[x^2 for x in v if x > 0]", Comprehension)
        assert not comp.generator
        assert comp.condition is not None
        assert _one("sum(x for x in v)", Comprehension).generator

    def test_splat_and_tuple(self) -> None:
        assert _one("f(args...)", SplatExpr)
        assert len(_one("t = (1, 2, 3)", TupleLiteral).elements) == 3
        assert _one("(x + 1)", Paren)

    def test_macro_call_forms(self) -> None:
        macros = _all("@assert x > 0\n@show(x)\n", Macro)
        assert [(m.name, m.parenthesized) for m in macros] == [("assert", False), ("show", True)]

    def test_parametric_type_in_expression(self) -> None:
        annotation = _all("v = Vector{Float64}(undef, 3)", TypeAnnotation)[0]
        assert annotation.name == "Vector"

    def test_symbol_literal(self) -> None:
        literal = _one("s = :name", Literal)
        assert literal.literal_type == "symbol"


class TestParseErrors:
    @pytest.mark.parametrize(
        "text",
        [
            "function f(x)\n    x\n",
            "(1, 2",
            "x = ",
            "struct\nend\n",
            "f(x) = :(x + 1)",
        ],
    )
    def test_rejected(self, text: str) -> None:
        with pytest.raises(ParseError):
            parse_source(text)

    def test_error_position(self) -> None:
        with pytest.raises(ParseError) as exc_info:
            parse_source("a = 1\nb = )\n")
        assert exc_info.value.line == 2
        assert exc_info.value.column == 5
