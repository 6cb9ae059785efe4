"""Tests for idiolint.compiler.lexer."""

import pytest

from idiolint.compiler.lexer import tokenize
from idiolint.kernel.exceptions import ParseError


def _kinds(text: str) -> list[tuple[str, str]]:
    return [(token.kind, token.text) for token in tokenize(text)][:-1]


class TestTokenize:
    def test_simple_assignment(self) -> None:
        assert _kinds("x = 1.5") == [("name", "x"), ("op", "="), ("float", "1.5")]

    def test_ends_with_eof(self) -> None:
        tokens = tokenize("x")
        assert tokens[-1].kind == "eof"
        assert tokens[-1].start == 1

    def test_keywords_and_names(self) -> None:
        assert _kinds("function f end") == [
            ("keyword", "function"),
            ("name", "f"),
            ("keyword", "end"),
        ]

    def test_bang_names(self) -> None:
        assert _kinds("push!(v)")[0] == ("name", "push!")
        assert _kinds("a != b") == [("name", "a"), ("op", "!="), ("name", "b")]

    def test_space_before(self) -> None:
        call = tokenize("f(x)")
        spaced = tokenize("f (x)")
        assert not call[1].space_before
        assert spaced[1].space_before

    def test_newlines_are_tokens(self) -> None:
        assert [kind for kind, _ in _kinds("a\nb")] == ["name", "newline", "name"]

    def test_comments_dropped(self) -> None:
        assert _kinds("x # trailing\ny") == [("name", "x"), ("newline", "\n"), ("name", "y")]

    def test_nested_block_comment(self) -> None:
        assert _kinds("#= a #= b =# c =#x") == [("name", "x")]

    def test_maximal_munch(self) -> None:
        texts = [text for _, text in _kinds("a .+= b... <: c")]
        assert texts == ["a", ".+=", "b", "...", "<:", "c"]

    @pytest.mark.parametrize(
        ("text", "kind"),
        [
            ("42", "int"),
            ("0x1F", "int"),
            ("1_000", "int"),
            ("1e10", "float"),
            ("2.5e-3", "float"),
            ("1.0f0", "float"),
            (".5", "float"),
        ],
    )
    def test_numbers(self, text: str, kind: str) -> None:
        assert _kinds(text) == [(kind, text)]

    def test_range_is_not_a_float(self) -> None:
        assert _kinds("1:3") == [("int", "1"), ("op", ":"), ("int", "3")]

    def test_strings(self) -> None:
        assert _kinds('"a $(f("b")) c"') == [("string", '"a $(f("b")) c"')]
        assert _kinds('"""multi\nline"""') == [("string", '"""multi\nline"""')]
        assert _kinds('r"\\d+"') == [("string", 'r"\\d+"')]

    def test_char_and_adjoint(self) -> None:
        assert _kinds("'a'") == [("char", "'a'")]
        assert _kinds("A'") == [("name", "A"), ("op", "'")]

    def test_macros(self) -> None:
        assert _kinds("@inbounds x") == [("macro", "@inbounds"), ("name", "x")]
        assert _kinds("@. x")[0] == ("macro", "@.")
        assert _kinds("@Base.time x")[0] == ("macro", "@Base.time")


class TestLexErrors:
    def test_unterminated_string(self) -> None:
        with pytest.raises(ParseError) as exc_info:
            tokenize('x = 1\ny = "open')
        assert (exc_info.value.line, exc_info.value.column) == (2, 5)
        assert "unterminated string" in exc_info.value.reason

    def test_unterminated_block_comment(self) -> None:
        with pytest.raises(ParseError):
            tokenize("#= never closed")

    def test_unexpected_character(self) -> None:
        with pytest.raises(ParseError, match="unexpected character"):
            tokenize("x = `ls`")
