"""Tests for the typing rules."""

import pytest

NARROW = "narrow-argument-type"
TYPE_PARAM = "unnecessary-type-param"
UNION = "elaborate-union"
TYPE_EQUALITY = "type-equality"


class TestNarrowArgumentType:
    def test_integer_arithmetic_widens_to_integer(self, lint, fix) -> None:
        result = lint("foo(x::Int) = x+1", NARROW)
        (diagnostic,) = result.diagnostics
        assert "'Integer'" in diagnostic.message
        assert (diagnostic.span.line, diagnostic.span.column) == (1, 8)
        assert fix("foo(x::Int) = x+1", NARROW) == "foo(x::Integer) = x+1"

    def test_numeric_function_widens_to_number(self, fix) -> None:
        assert fix("f(x::Float64) = sqrt(x)", NARROW) == "f(x::Number) = sqrt(x)"

    def test_ordering_widens_to_real(self, fix) -> None:
        assert fix("f(x::Int) = x < 3", NARROW) == "f(x::Real) = x < 3"

    def test_container_use_widens_to_abstract_parent(self, fix) -> None:
        text = "f(v::Vector{Int}) = length(v)"
        assert fix(text, NARROW) == "f(v::AbstractVector{Int}) = length(v)"

    def test_most_specific_requirement_wins(self, lint) -> None:
        result = lint("f(x::Int) = x % 2 + abs(x)", NARROW)
        (diagnostic,) = result.diagnostics
        assert "'Integer'" in diagnostic.message

    def test_long_form_function(self, fix) -> None:
        text = "function area(r::Float64)\n    return r * r * 3.14\nend\n"
        assert fix(text, NARROW) == text.replace("Float64", "Number")

    @pytest.mark.parametrize(
        "text",
        [
            "f(x::Int) = g(x)",
            "f(x::Real) = x + 1",
            "f(x) = x + 1",
            "f(x::Int) = x",
            "f(x::Widget) = x + 1",
            "f(x::Int, y::String) = x",
            "f(x::Nothing) = x",
        ],
    )
    def test_silent(self, lint, text: str) -> None:
        assert lint(text, NARROW).is_clean

    def test_lambda_parameters_ignored(self, lint) -> None:
        assert lint("map((x::Int) -> x + 1, v)", NARROW).is_clean


class TestUnnecessaryTypeParam:
    def test_all_unused_removes_where_clause(self, lint, fix) -> None:
        text = "function f(x::Vector) where T\n    x\nend\n"
        (diagnostic,) = lint(text, TYPE_PARAM).diagnostics
        assert "T" in diagnostic.message
        assert fix(text, TYPE_PARAM) == "function f(x::Vector)\n    x\nend\n"

    def test_one_unused_of_several(self, lint, fix) -> None:
        text = "function g(x::T) where {T, S}\n    x\nend\n"
        (diagnostic,) = lint(text, TYPE_PARAM).diagnostics
        assert "'S'" in diagnostic.message
        assert fix(text, TYPE_PARAM) == "function g(x::T) where {T}\n    x\nend\n"

    def test_leading_unused(self, fix) -> None:
        text = "function g(x::T) where {S, T}\n    x\nend\n"
        assert fix(text, TYPE_PARAM) == "function g(x::T) where {T}\n    x\nend\n"

    def test_used_in_body_only(self, lint) -> None:
        text = "function h(x) where T\n    zero(T)\nend\n"
        assert lint(text, TYPE_PARAM).is_clean

    def test_used_in_parameter_type(self, lint) -> None:
        text = "function h(x::Vector{T}) where T<:Real\n    sum(x)\nend\n"
        assert lint(text, TYPE_PARAM).is_clean


class TestElaborateUnion:
    def test_three_unrelated_members(self, lint) -> None:
        text = "f(x::Union{Int,String,Symbol}) = x"
        (diagnostic,) = lint(text, UNION).diagnostics
        assert "3 unrelated types" in diagnostic.message
        assert not diagnostic.has_fix

    def test_container_element_union(self, lint) -> None:
        (diagnostic,) = lint("f(v::Vector{Union{Int,String}}) = v", UNION).diagnostics
        assert diagnostic.message.startswith("Container element type")

    @pytest.mark.parametrize(
        "text",
        [
            "f(x::Union{Int,Float64,Int8}) = x",
            "f(x::Union{Nothing,Int}) = x",
            "f(x::Union{Int,String}) = x",
        ],
    )
    def test_silent(self, lint, text: str) -> None:
        assert lint(text, UNION).is_clean

    @pytest.mark.parametrize(
        "text",
        [
            "area(s::Union{Circle, Square, Triangle}) = 1",
            "f(x::Union{Int,String,Point}) = x",
            "f(v::Vector{Union{Circle,Square}}) = v",
        ],
    )
    def test_silent_about_unknown_types(self, lint, text: str) -> None:
        assert lint(text, UNION).is_clean


class TestTypeEquality:
    def test_typeof_comparison(self, lint) -> None:
        (diagnostic,) = lint("check(x) = typeof(x) == Int", TYPE_EQUALITY).diagnostics
        assert "isa" in diagnostic.message

    def test_either_side(self, lint) -> None:
        assert len(lint("check(x) = Float64 === typeof(x)", TYPE_EQUALITY)) == 1

    def test_isa_is_fine(self, lint) -> None:
        assert lint("check(x) = x isa Int", TYPE_EQUALITY).is_clean
