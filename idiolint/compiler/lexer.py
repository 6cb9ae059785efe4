"""Tokenizer for the reference reader.

Produces a flat token list; newlines are kept as tokens because they end
statements outside brackets. Whitespace and comments are dropped but
recorded through ``Token.space_before``, which the parser needs to tell
``f(x)`` (a call) from ``f (x)`` (two expressions).
"""

from __future__ import annotations

from dataclasses import dataclass

from idiolint.kernel.exceptions import ParseError
from idiolint.kernel.syntax.span import PositionIndex

NAME = "name"
KEYWORD = "keyword"
INT = "int"
FLOAT = "float"
STRING = "string"
CHAR = "char"
MACRO = "macro"
OP = "op"
NEWLINE = "newline"
EOF = "eof"

KEYWORDS = frozenset(
    {
        "abstract",
        "baremodule",
        "begin",
        "break",
        "catch",
        "const",
        "continue",
        "do",
        "else",
        "elseif",
        "end",
        "export",
        "false",
        "finally",
        "for",
        "function",
        "global",
        "if",
        "import",
        "in",
        "isa",
        "let",
        "local",
        "macro",
        "module",
        "mutable",
        "primitive",
        "quote",
        "return",
        "struct",
        "true",
        "try",
        "using",
        "where",
        "while",
    }
)

# Longest first so that maximal munch works with a simple prefix scan
_OPERATORS = sorted(
    [
        ">>>=", "...", "===", "!==", ">>>", "<<=", ">>=", "//=",
        ".+=", ".-=", ".*=", "./=", ".^=", ".==", ".!=", ".<=", ".>=",
        "==", "!=", "<=", ">=", "&&", "||", "->", "=>", "::", "<:", ">:",
        "+=", "-=", "*=", "/=", "^=", "%=", "÷=", "|=", "&=", "\\=",
        "<<", ">>", "//", "..", "|>", "<|",
        ".+", ".-", ".*", "./", ".^", ".=", ".<", ".>", ".%", ".÷", ".\\",
        "+", "-", "*", "/", "^", "%", "\\", "=", "<", ">", "!", "~", "&", "|",
        ":", "?", ",", ";", "(", ")", "[", "]", "{", "}", ".", "$",
        "÷", "≤", "≥", "≠", "∈", "∉", "⊻", "√", "∘", "⊆", "∪", "∩",
    ],
    key=len,
    reverse=True,
)

_CLOSERS = frozenset({")", "]", "}"})


@dataclass(frozen=True, slots=True)
class Token:
    kind: str
    text: str
    start: int
    end: int
    space_before: bool = False

    def is_op(self, *texts: str) -> bool:
        return self.kind == OP and self.text in texts

    def is_keyword(self, *texts: str) -> bool:
        return self.kind == KEYWORD and self.text in texts


def _is_name_start(char: str) -> bool:
    return char == "_" or char.isalpha()


def _is_name_char(char: str) -> bool:
    return char == "_" or char.isalnum() or ("a" + char).isidentifier()


class Lexer:
    """Turns source text into :class:`Token` objects."""

    def __init__(self, text: str, index: PositionIndex | None = None) -> None:
        self._text = text
        self._index = index or PositionIndex(text)
        self._pos = 0
        self._tokens: list[Token] = []
        self._space = False

    def tokenize(self) -> list[Token]:
        text = self._text
        while self._pos < len(text):
            char = text[self._pos]
            if char == "\n":
                self._emit(NEWLINE, self._pos, self._pos + 1)
                self._space = True
            elif char in " \t\r\f\v\ufeff":
                self._pos += 1
                self._space = True
            elif char == "#":
                self._skip_comment()
            elif char.isdigit() or (char == "." and self._starts_fraction()):
                self._number()
            elif _is_name_start(char):
                self._name()
            elif char == '"':
                self._string(self._pos)
            elif char == "'" and not self._is_adjoint():
                self._char()
            elif char == "'":
                self._emit(OP, self._pos, self._pos + 1)
            elif char == "@":
                self._macro()
            else:
                self._operator()
        self._tokens.append(Token(EOF, "", len(text), len(text), self._space))
        return self._tokens

    # -- helpers ---------------------------------------------------------------

    def _error(self, reason: str, offset: int) -> ParseError:
        line, column = self._index.position(min(offset, len(self._text)))
        return ParseError(reason, offset, line, column)

    def _emit(self, kind: str, start: int, end: int) -> None:
        self._tokens.append(Token(kind, self._text[start:end], start, end, self._space))
        self._pos = end
        self._space = False

    def _previous(self) -> Token | None:
        return self._tokens[-1] if self._tokens else None

    def _is_adjoint(self) -> bool:
        previous = self._previous()
        if previous is None or self._space:
            return False
        return (
            previous.kind in (NAME, INT, FLOAT)
            or previous.text in _CLOSERS
            or previous.text == "'"
            or previous.is_keyword("end")
        )

    def _starts_fraction(self) -> bool:
        text, pos = self._text, self._pos
        if pos + 1 >= len(text) or not text[pos + 1].isdigit():
            return False
        previous = self._previous()
        if previous is None or self._space:
            return True
        return previous.kind not in (NAME, INT, FLOAT) and previous.text not in _CLOSERS

    def _skip_comment(self) -> None:
        text = self._text
        start = self._pos
        self._space = True
        if text.startswith("#=", start):
            depth = 0
            pos = start
            while pos < len(text):
                if text.startswith("#=", pos):
                    depth += 1
                    pos += 2
                elif text.startswith("=#", pos):
                    depth -= 1
                    pos += 2
                    if depth == 0:
                        self._pos = pos
                        return
                else:
                    pos += 1
            raise self._error("unterminated block comment", start)
        end = text.find("\n", start)
        self._pos = len(text) if end < 0 else end

    def _number(self) -> None:
        text = self._text
        start = pos = self._pos
        if text.startswith(("0x", "0b", "0o"), pos):
            pos += 2
            while pos < len(text) and (text[pos].isalnum() or text[pos] == "_"):
                pos += 1
            self._emit(INT, start, pos)
            return
        kind = INT
        while pos < len(text) and (text[pos].isdigit() or text[pos] == "_"):
            pos += 1
        if pos + 1 < len(text) and text[pos] == "." and text[pos + 1].isdigit():
            kind = FLOAT
            pos += 1
            while pos < len(text) and (text[pos].isdigit() or text[pos] == "_"):
                pos += 1
        elif text.startswith(".", pos) and not text.startswith("..", pos) and kind == INT:
            following = text[pos + 1 : pos + 2]
            if not following or following in " \t\n)],;" or following in "eE":
                kind = FLOAT
                pos += 1
        if pos < len(text) and text[pos] in "eEf":
            exponent = pos + 1
            if exponent < len(text) and text[exponent] in "+-":
                exponent += 1
            if exponent < len(text) and text[exponent].isdigit():
                kind = FLOAT
                pos = exponent
                while pos < len(text) and text[pos].isdigit():
                    pos += 1
        self._emit(kind, start, pos)

    def _name(self) -> None:
        text = self._text
        start = pos = self._pos
        while pos < len(text) and (_is_name_char(text[pos]) or text[pos] == "!"):
            if text[pos] == "!" and text.startswith("!=", pos):
                break
            pos += 1
        # string macros: r"...", raw"...", b"..."
        if pos < len(text) and text[pos] == '"':
            self._pos = pos
            self._string(start)
            return
        word = text[start:pos]
        self._emit(KEYWORD if word in KEYWORDS else NAME, start, pos)

    def _string(self, start: int) -> None:
        text = self._text
        pos = self._pos
        triple = text.startswith('"""', pos)
        pos += 3 if triple else 1
        while pos < len(text):
            char = text[pos]
            if char == "\\":
                pos += 2
            elif char == "$" and text.startswith("$(", pos):
                pos = self._skip_interpolation(pos + 1)
            elif triple and text.startswith('"""', pos):
                self._emit(STRING, start, pos + 3)
                return
            elif not triple and char == '"':
                self._emit(STRING, start, pos + 1)
                return
            else:
                pos += 1
        raise self._error("unterminated string literal", start)

    def _skip_interpolation(self, pos: int) -> int:
        text = self._text
        depth = 0
        while pos < len(text):
            char = text[pos]
            if char == "(":
                depth += 1
            elif char == ")":
                depth -= 1
                if depth == 0:
                    return pos + 1
            elif char == '"':
                pos = self._skip_nested_string(pos)
                continue
            pos += 1
        raise self._error("unterminated string interpolation", pos)

    def _skip_nested_string(self, pos: int) -> int:
        text = self._text
        pos += 1
        while pos < len(text) and text[pos] != '"':
            pos += 2 if text[pos] == "\\" else 1
        return pos + 1

    def _char(self) -> None:
        text = self._text
        start = pos = self._pos
        pos += 1
        if pos < len(text) and text[pos] == "\\":
            pos += 2
        while pos < len(text) and text[pos] != "'" and text[pos] != "\n":
            pos += 1
        if pos >= len(text) or text[pos] != "'":
            raise self._error("unterminated character literal", start)
        self._emit(CHAR, start, pos + 1)

    def _macro(self) -> None:
        text = self._text
        start = pos = self._pos + 1
        if pos < len(text) and text[pos] == ".":
            self._emit(MACRO, start - 1, pos + 1)
            return
        while pos < len(text) and (
            _is_name_char(text[pos])
            or text[pos] == "!"
            or (text[pos] == "." and pos + 1 < len(text) and _is_name_start(text[pos + 1]))
        ):
            pos += 1
        if pos == start:
            raise self._error("expected macro name after '@'", start - 1)
        self._emit(MACRO, start - 1, pos)

    def _operator(self) -> None:
        for operator in _OPERATORS:
            if self._text.startswith(operator, self._pos):
                self._emit(OP, self._pos, self._pos + len(operator))
                return
        raise self._error(f"unexpected character {self._text[self._pos]!r}", self._pos)


def tokenize(text: str, index: PositionIndex | None = None) -> list[Token]:
    """Tokenize ``text``; raises :class:`ParseError` on malformed input."""
    return Lexer(text, index).tokenize()
