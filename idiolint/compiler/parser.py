"""Recursive-descent reader producing syntax trees for the lint engine.

Covers the surface the built-in rules inspect: function, macro and struct
definitions (long and short form, ``where`` clauses), control flow, lambdas,
calls and broadcasting, indexing, literals, comprehensions, macro calls and
type expressions. Anything else raises :class:`ParseError`, which the loader
turns into a ``parse-unavailable`` diagnostic.

Operator precedence, loosest first::

    = op= -> | => | ?: | || | && | comparisons in isa <: | |> <| | : ..
    | + - | ⊻ | * / ÷ % & \\ | // | << >> >>> | unary - + ! ~ √ | ^
    | postfix: call, index, .field, .( , {…}, ..., ', ::
"""

from __future__ import annotations

from typing import Any

from idiolint.compiler.lexer import (
    CHAR,
    EOF,
    FLOAT,
    INT,
    KEYWORD,
    MACRO,
    NAME,
    NEWLINE,
    OP,
    STRING,
    Token,
    tokenize,
)
from idiolint.kernel.exceptions import ParseError
from idiolint.kernel.syntax.nodes import (
    AnonymousFunction,
    Assignment,
    BinaryOp,
    Block,
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
    Module,
    Parameter,
    Paren,
    Return,
    SplatExpr,
    StructDef,
    StructField,
    SyntaxNode,
    TupleLiteral,
    TypeAnnotation,
    TypeAssert,
    TypeParam,
    UnaryOp,
    UnionType,
    VectorLiteral,
    WhileLoop,
)
from idiolint.kernel.syntax.span import PositionIndex, Span
from idiolint.kernel.syntax.tree import NodeDraft, SourceUnit, build_tree

ASSIGNMENT_OPS = frozenset(
    {"=", "+=", "-=", "*=", "/=", "^=", "%=", "÷=", "|=", "&=", "\\=", "<<=", ">>=",
     ">>>=", "//=", ".=", ".+=", ".-=", ".*=", "./=", ".^="}
)
COMPARISON_OPS = frozenset(
    {"==", "!=", "===", "!==", "<", ">", "<=", ">=", "≤", "≥", "≠", "∈", "∉", "⊆", "<:",
     ">:", ".==", ".!=", ".<", ".>", ".<=", ".>="}
)
PLUS_OPS = frozenset({"+", "-", "|", "⊻", ".+", ".-", "∪"})
TIMES_OPS = frozenset({"*", "/", "÷", "%", "&", "\\", ".*", "./", ".%", ".÷", ".\\", "∩", "∘"})
SHIFT_OPS = frozenset({"<<", ">>", ">>>"})
UNARY_OPS = frozenset({"-", "+", "!", "~", "√", ".-", ".!"})
EXPRESSION_END = frozenset({")", "]", "}", ",", ";"})
BLOCK_END = frozenset({"end", "else", "elseif", "catch", "finally"})


class Parser:
    """Parses one source buffer into a draft tree, then numbers it."""

    def __init__(self, text: str, path: str = "<memory>") -> None:
        self._text = text
        self._path = path
        self._positions = PositionIndex(text)
        self._tokens = tokenize(text, self._positions)
        self._pos = 0
        self._prev_end = 0
        # newline significance: True inside blocks, False inside brackets
        self._newlines: list[bool] = [True]
        self._index_depth = 0
        self._no_range = 0
        # id(call draft) -> (call draft, ids of drafts written after ';' in its arguments)
        self._keyword_args: dict[int, tuple[NodeDraft, set[int]]] = {}

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    def parse(self) -> SourceUnit:
        statements = self._statements(frozenset())
        if self._current().kind != EOF:
            raise self._error(f"unexpected {self._current().text!r}")
        root = self._draft(Module, 0, len(self._text), body=tuple(statements))
        return SourceUnit(self._path, build_tree(root), self._positions, self._text)

    # ------------------------------------------------------------------
    # Token plumbing
    # ------------------------------------------------------------------

    def _current(self) -> Token:
        token = self._tokens[self._pos]
        if not self._newlines[-1]:
            while token.kind == NEWLINE:
                self._pos += 1
                token = self._tokens[self._pos]
        return token

    def _peek(self) -> Token:
        """Token after the current one, ignoring newlines."""
        self._current()
        pos = self._pos + 1
        while self._tokens[pos].kind == NEWLINE:
            pos += 1
        return self._tokens[pos]

    def _advance(self) -> Token:
        token = self._current()
        if token.kind != EOF:
            self._pos += 1
        self._prev_end = token.end
        return token

    def _take_operator(self) -> Token:
        """Consume a binary operator; a line may break right after it."""
        token = self._advance()
        self._skip_newlines()
        return token

    def _skip_newlines(self) -> None:
        while self._tokens[self._pos].kind == NEWLINE:
            self._pos += 1

    def _skip_separators(self) -> None:
        while True:
            token = self._current()
            if token.kind == NEWLINE or token.is_op(";"):
                self._pos += 1
            else:
                return

    def _expect_op(self, text: str) -> Token:
        token = self._current()
        if not token.is_op(text):
            raise self._error(f"expected {text!r} but found {token.text or 'end of input'!r}")
        return self._advance()

    def _expect_keyword(self, text: str) -> Token:
        token = self._current()
        if not token.is_keyword(text):
            raise self._error(f"expected '{text}' but found {token.text or 'end of input'!r}")
        return self._advance()

    def _error(self, reason: str, token: Token | None = None) -> ParseError:
        token = token or self._tokens[self._pos]
        line, column = self._positions.position(token.start)
        return ParseError(reason, token.start, line, column)

    def _at_expression_end(self) -> bool:
        token = self._current()
        return (
            token.kind in (NEWLINE, EOF)
            or (token.kind == OP and token.text in EXPRESSION_END)
            or (token.kind == KEYWORD and token.text in BLOCK_END)
        )

    def _push(self, significant: bool) -> None:
        self._newlines.append(significant)

    def _pop(self) -> None:
        self._newlines.pop()

    # ------------------------------------------------------------------
    # Draft helpers
    # ------------------------------------------------------------------

    def _span(self, start: int, end: int) -> Span:
        return self._positions.span(start, end)

    def _draft(self, node_type: type[SyntaxNode], start: int, end: int, **fields: Any) -> NodeDraft:
        return NodeDraft(node_type, self._span(start, end), fields)

    def _block(self, statements: list[NodeDraft], fallback: int) -> NodeDraft:
        if statements:
            start, end = statements[0].span.start, statements[-1].span.end
        else:
            start = end = fallback
        return self._draft(Block, start, end, statements=tuple(statements))

    # ------------------------------------------------------------------
    # Statements and blocks
    # ------------------------------------------------------------------

    def _statements(self, terminators: frozenset[str]) -> list[NodeDraft]:
        statements: list[NodeDraft] = []
        while True:
            self._skip_separators()
            token = self._current()
            if token.kind == EOF:
                if terminators:
                    raise self._error(f"expected '{sorted(terminators)[0]}' before end of input")
                return statements
            if token.kind == KEYWORD and token.text in terminators:
                return statements
            statements.append(self._statement())
            token = self._current()
            if not (
                token.kind in (NEWLINE, EOF)
                or token.is_op(";")
                or (token.kind == KEYWORD and token.text in terminators)
            ):
                raise self._error(f"unexpected {token.text!r}")

    def _body(self, terminators: frozenset[str] = frozenset({"end"})) -> NodeDraft:
        statements = self._statements(terminators)
        return self._block(statements, self._current().start)

    def _statement(self) -> NodeDraft:
        token = self._current()
        if token.kind == KEYWORD:
            if token.text in ("using", "import", "export"):
                return self._import_statement()
            if token.text in ("const", "local", "global"):
                self._advance()
                return self._expression(allow_tuple=True)
            if token.text in ("abstract", "primitive"):
                return self._type_declaration()
            if token.text in ("module", "baremodule"):
                return self._module_block()
        return self._expression(allow_tuple=True)

    def _import_statement(self) -> NodeDraft:
        keyword = self._advance()
        end = keyword.end
        while not (self._current().kind in (NEWLINE, EOF) or self._current().is_op(";")):
            end = self._advance().end
        return self._draft(Keyword, keyword.start, end, word=keyword.text)

    def _type_declaration(self) -> NodeDraft:
        keyword = self._advance()
        while not self._current().is_keyword("end"):
            if self._current().kind == EOF:
                raise self._error(f"unterminated '{keyword.text} type' declaration", keyword)
            self._advance()
        end = self._advance().end
        return self._draft(Keyword, keyword.start, end, word=keyword.text)

    def _module_block(self) -> NodeDraft:
        keyword = self._advance()
        if self._current().kind != NAME:
            raise self._error("expected module name")
        self._advance()
        self._push(True)
        statements = self._statements(frozenset({"end"}))
        end = self._expect_keyword("end").end
        self._pop()
        return self._draft(Block, keyword.start, end, statements=tuple(statements))

    # ------------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------------

    def _expression(self, allow_tuple: bool = False) -> NodeDraft:
        left = self._arrow()
        if allow_tuple and self._current().is_op(","):
            elements = [left]
            while self._current().is_op(","):
                self._take_operator()
                elements.append(self._arrow())
            left = self._draft(
                TupleLiteral,
                elements[0].span.start,
                elements[-1].span.end,
                elements=tuple(elements),
            )

        type_params: list[NodeDraft] = []
        where_start: int | None = None
        while self._current().is_keyword("where"):
            if where_start is None:
                where_start = self._prev_end
            self._advance()
            type_params.extend(self._where_params())
        where_span = self._span(where_start, self._prev_end) if where_start is not None else None

        token = self._current()
        if token.kind == OP and token.text in ASSIGNMENT_OPS:
            signature = self._signature_call(left) if token.text == "=" else None
            self._take_operator()
            value = self._expression(allow_tuple=allow_tuple)
            if signature is not None:
                return self._short_function(left, signature, value, type_params, where_span)
            return self._draft(
                Assignment, left.span.start, value.span.end, op=token.text, target=left, value=value
            )
        return left

    def _arrow(self) -> NodeDraft:
        left = self._pair()
        if self._current().is_op("->"):
            self._take_operator()
            body = self._expression()
            params = self._lambda_params(left)
            return self._draft(
                AnonymousFunction, left.span.start, body.span.end, params=tuple(params), body=body
            )
        return left

    def _pair(self) -> NodeDraft:
        left = self._ternary()
        if self._current().is_op("=>"):
            op = self._take_operator()
            right = self._pair()
            return self._binary(op.text, left, right)
        return left

    def _ternary(self) -> NodeDraft:
        test = self._or()
        if not self._current().is_op("?"):
            return test
        self._take_operator()
        self._no_range += 1
        try:
            then = self._ternary()
        finally:
            self._no_range -= 1
        self._expect_op(":")
        self._skip_newlines()
        orelse = self._ternary()
        return self._draft(
            Conditional, test.span.start, orelse.span.end, keyword="?", test=test, then=then,
            orelse=orelse,
        )

    def _binary(self, op: str, left: NodeDraft, right: NodeDraft) -> NodeDraft:
        return self._draft(BinaryOp, left.span.start, right.span.end, op=op, left=left, right=right)

    def _or(self) -> NodeDraft:
        left = self._and()
        while self._current().is_op("||"):
            op = self._take_operator()
            left = self._binary(op.text, left, self._and())
        return left

    def _and(self) -> NodeDraft:
        left = self._comparison()
        while self._current().is_op("&&"):
            op = self._take_operator()
            left = self._binary(op.text, left, self._comparison())
        return left

    def _comparison(self) -> NodeDraft:
        left = self._pipe()
        while True:
            token = self._current()
            if (token.kind == OP and token.text in COMPARISON_OPS) or token.is_keyword("in", "isa"):
                op = self._take_operator()
                left = self._binary(op.text, left, self._pipe())
            else:
                return left

    def _pipe(self) -> NodeDraft:
        left = self._range()
        while self._current().is_op("|>", "<|"):
            op = self._take_operator()
            left = self._binary(op.text, left, self._range())
        return left

    def _range(self) -> NodeDraft:
        left = self._plus()
        while self._no_range == 0 and self._current().is_op(":", ".."):
            following = self._peek()
            if following.kind == OP and following.text in EXPRESSION_END:
                break
            op = self._take_operator()
            left = self._binary(op.text, left, self._plus())
        return left

    def _plus(self) -> NodeDraft:
        left = self._times()
        while self._current().kind == OP and self._current().text in PLUS_OPS:
            op = self._take_operator()
            left = self._binary(op.text, left, self._times())
        return left

    def _times(self) -> NodeDraft:
        left = self._rational()
        while self._current().kind == OP and self._current().text in TIMES_OPS:
            op = self._take_operator()
            left = self._binary(op.text, left, self._rational())
        return left

    def _rational(self) -> NodeDraft:
        left = self._shift()
        while self._current().is_op("//"):
            op = self._take_operator()
            left = self._binary(op.text, left, self._shift())
        return left

    def _shift(self) -> NodeDraft:
        left = self._unary()
        while self._current().kind == OP and self._current().text in SHIFT_OPS:
            op = self._take_operator()
            left = self._binary(op.text, left, self._unary())
        return left

    def _unary(self) -> NodeDraft:
        token = self._current()
        if token.kind == OP and token.text in UNARY_OPS:
            self._advance()
            following = self._current()
            if (
                token.text == "-"
                and following.kind in (INT, FLOAT)
                and not following.space_before
            ):
                self._advance()
                literal = self._draft(
                    Literal, token.start, following.end, value="-" + following.text,
                    literal_type=following.kind,
                )
                return self._power_tail(self._postfix_tail(literal))
            operand = self._unary()
            return self._draft(
                UnaryOp, token.start, operand.span.end, op=token.text, operand=operand
            )
        return self._power()

    def _power(self) -> NodeDraft:
        return self._power_tail(self._postfix())

    def _power_tail(self, base: NodeDraft) -> NodeDraft:
        if self._current().is_op("^", ".^"):
            op = self._take_operator()
            exponent = self._unary()
            return self._binary(op.text, base, exponent)
        return base

    # ------------------------------------------------------------------
    # Postfix forms
    # ------------------------------------------------------------------

    def _postfix(self) -> NodeDraft:
        base = self._primary()
        token = self._current()
        if (
            base.node_type is Literal
            and base.fields["literal_type"] in (INT, FLOAT)
            and not token.space_before
            and (token.kind == NAME or token.is_op("("))
        ):
            # numeric juxtaposition: 2x, 3(a + b)
            right = self._power()
            return self._binary("*", base, right)
        return self._postfix_tail(base)

    def _postfix_tail(self, base: NodeDraft) -> NodeDraft:
        while True:
            token = self._current()
            if token.kind != OP or token.space_before and token.text in ("(", "[", "{"):
                if token.is_keyword("do") and base.node_type is CallExpr:
                    base = self._do_block(base)
                    continue
                return base
            if token.text == "(":
                base = self._call(base, broadcast=False)
            elif token.text == "[":
                base = self._index(base)
            elif token.text == "{":
                base = self._curly(base)
            elif token.text == "." and self._peek().is_op("(") and not self._peek().space_before:
                self._advance()
                base = self._call(base, broadcast=True)
            elif token.text == "." and self._peek().kind in (NAME, KEYWORD):
                self._advance()
                field = self._advance()
                base = self._draft(
                    FieldAccess, base.span.start, field.end, target=base, field=field.text
                )
            elif token.text == "...":
                self._advance()
                base = self._draft(SplatExpr, base.span.start, token.end, operand=base)
            elif token.text == "'":
                self._advance()
                base = self._draft(UnaryOp, base.span.start, token.end, op="'", operand=base)
            elif token.text == "::":
                self._advance()
                annotation = self._type()
                base = self._draft(
                    TypeAssert, base.span.start, annotation.span.end, value=base,
                    annotation=annotation,
                )
            else:
                return base

    def _call(self, callee: NodeDraft, broadcast: bool) -> NodeDraft:
        self._expect_op("(")
        args, kwargs, after_semicolon = self._arguments(")")
        end = self._expect_op(")").end
        draft = self._draft(
            CallExpr, callee.span.start, end, callee=callee, args=tuple(args),
            kwargs=tuple(kwargs), broadcast=broadcast,
        )
        self._keyword_args[id(draft)] = (draft, after_semicolon)
        return draft

    def _arguments(self, closer: str) -> tuple[list[NodeDraft], list[NodeDraft], set[int]]:
        args: list[NodeDraft] = []
        kwargs: list[NodeDraft] = []
        after_semicolon: set[int] = set()
        semicolon = False
        self._push(False)
        try:
            while not self._current().is_op(closer):
                if self._current().is_op(";"):
                    self._advance()
                    semicolon = True
                    continue
                arg = self._expression()
                if self._current().is_keyword("for"):
                    arg = self._comprehension(arg, arg.span.start, None, generator=True)
                if semicolon:
                    kwargs.append(arg)
                    after_semicolon.add(id(arg))
                elif arg.node_type is Assignment and arg.fields["op"] == "=":
                    kwargs.append(arg)
                else:
                    args.append(arg)
                if self._current().is_op(","):
                    self._advance()
                elif not self._current().is_op(closer, ";"):
                    raise self._error(f"expected ',' or {closer!r}")
        finally:
            self._pop()
        return args, kwargs, after_semicolon

    def _do_block(self, call: NodeDraft) -> NodeDraft:
        keyword = self._advance()
        self._push(True)
        params: list[NodeDraft] = []
        while self._current().kind not in (NEWLINE, EOF) and not self._current().is_op(";"):
            target = self._postfix()
            if target.node_type is TupleLiteral:
                params.extend(self._to_parameter(element) for element in target.fields["elements"])
            else:
                params.append(self._to_parameter(target))
            if self._current().is_op(","):
                self._advance()
        body = self._body()
        end = self._expect_keyword("end").end
        self._pop()
        function = self._draft(
            AnonymousFunction, keyword.start, end, params=tuple(params), body=body
        )
        fields = dict(call.fields)
        fields["args"] = (*call.fields["args"], function)
        draft = NodeDraft(CallExpr, self._span(call.span.start, end), fields)
        _, after_semicolon = self._keyword_args.pop(id(call), (call, set()))
        self._keyword_args[id(draft)] = (draft, after_semicolon)
        return draft

    def _index(self, target: NodeDraft) -> NodeDraft:
        self._expect_op("[")
        self._push(False)
        self._index_depth += 1
        indices: list[NodeDraft] = []
        try:
            while not self._current().is_op("]"):
                indices.append(self._expression())
                if self._current().is_op(",", ";"):
                    self._advance()
                elif self._current().is_keyword("for") and len(indices) == 1:
                    # typed comprehension: Int[x for x in xs]
                    indices[0] = self._comprehension(
                        indices[0], indices[0].span.start, None, generator=True
                    )
                elif not self._current().is_op("]"):
                    raise self._error("expected ',' or ']'")
            end = self._expect_op("]").end
        finally:
            self._index_depth -= 1
            self._pop()
        return self._draft(IndexExpr, target.span.start, end, target=target, indices=tuple(indices))

    def _curly(self, head: NodeDraft) -> NodeDraft:
        name = _dotted_name(head)
        if name is None:
            raise self._error("type parameters need a type name")
        params, end = self._type_arguments()
        if name == "Union":
            return self._draft(UnionType, head.span.start, end, members=tuple(params))
        return self._draft(
            TypeAnnotation, head.span.start, end, name=name, name_span=head.span,
            params=tuple(params),
        )

    # ------------------------------------------------------------------
    # Primary expressions
    # ------------------------------------------------------------------

    def _primary(self) -> NodeDraft:
        token = self._current()
        kind = token.kind
        if kind == NAME:
            self._advance()
            return self._draft(Identifier, token.start, token.end, name=token.text)
        if kind in (INT, FLOAT, STRING, CHAR):
            self._advance()
            return self._draft(
                Literal, token.start, token.end, value=token.text, literal_type=kind
            )
        if kind == MACRO:
            return self._macro_call()
        if kind == KEYWORD:
            return self._keyword_expression(token)
        if kind == OP:
            if token.text == "(":
                return self._parenthesized()
            if token.text == "[":
                return self._vector()
            if token.text == ":":
                return self._colon(token)
            if token.text == "::":
                self._advance()
                annotation = self._type()
                return self._draft(
                    TypeAssert, token.start, annotation.span.end, value=None,
                    annotation=annotation,
                )
        if kind == EOF:
            raise self._error("unexpected end of input")
        raise self._error(f"unexpected {token.text!r}")

    def _colon(self, token: Token) -> NodeDraft:
        self._advance()
        following = self._current()
        if following.kind in (NAME, KEYWORD) and not following.space_before:
            self._advance()
            return self._draft(
                Literal, token.start, following.end, value=":" + following.text,
                literal_type="symbol",
            )
        if following.kind == OP and following.text in EXPRESSION_END:
            return self._draft(Literal, token.start, token.end, value=":", literal_type="colon")
        raise self._error("quoted expressions are not supported", token)

    def _keyword_expression(self, token: Token) -> NodeDraft:
        word = token.text
        if word in ("true", "false"):
            self._advance()
            return self._draft(Literal, token.start, token.end, value=word, literal_type="bool")
        if word in ("begin", "end") and self._index_depth > 0:
            self._advance()
            return self._draft(Identifier, token.start, token.end, name=word)
        if word == "function":
            return self._function()
        if word == "macro":
            return self._macro_definition()
        if word in ("struct", "mutable"):
            return self._struct()
        if word == "if":
            return self._if()
        if word == "for":
            return self._for()
        if word == "while":
            return self._while()
        if word == "begin":
            return self._begin()
        if word == "let":
            return self._let()
        if word == "try":
            return self._try()
        if word == "return":
            self._advance()
            if self._at_expression_end():
                return self._draft(Return, token.start, token.end, value=None)
            value = self._expression(allow_tuple=True)
            return self._draft(Return, token.start, value.span.end, value=value)
        if word in ("break", "continue"):
            self._advance()
            return self._draft(Keyword, token.start, token.end, word=word)
        raise self._error(f"'{word}' is not supported here")

    def _parenthesized(self) -> NodeDraft:
        opening = self._advance()
        self._push(False)
        try:
            if self._current().is_op(")"):
                end = self._advance().end
                return self._draft(TupleLiteral, opening.start, end, elements=())
            if self._current().is_op(";"):
                raise self._error("named-tuple splicing is not supported")
            first = self._expression()
            token = self._current()
            if token.is_keyword("for"):
                return self._comprehension(first, opening.start, ")", generator=True)
            if token.is_op(","):
                elements = [first]
                while self._current().is_op(","):
                    self._advance()
                    if self._current().is_op(")"):
                        break
                    elements.append(self._expression())
                end = self._expect_op(")").end
                return self._draft(TupleLiteral, opening.start, end, elements=tuple(elements))
            if token.is_op(";"):
                statements = [first]
                while self._current().is_op(";"):
                    self._advance()
                    if self._current().is_op(")"):
                        break
                    statements.append(self._expression(allow_tuple=True))
                end = self._expect_op(")").end
                block = self._block(statements, opening.end)
                return self._draft(Paren, opening.start, end, inner=block)
            end = self._expect_op(")").end
            if first.node_type is SplatExpr:
                return self._draft(TupleLiteral, opening.start, end, elements=(first,))
            return self._draft(Paren, opening.start, end, inner=first)
        finally:
            self._pop()

    def _vector(self) -> NodeDraft:
        opening = self._advance()
        self._push(False)
        try:
            elements: list[NodeDraft] = []
            while not self._current().is_op("]"):
                element = self._expression()
                if self._current().is_keyword("for") and not elements:
                    return self._comprehension(element, opening.start, "]", generator=False)
                elements.append(element)
                if self._current().is_op(",", ";"):
                    self._advance()
            end = self._expect_op("]").end
            return self._draft(VectorLiteral, opening.start, end, elements=tuple(elements))
        finally:
            self._pop()

    def _comprehension(
        self, element: NodeDraft, start: int, closer: str | None, generator: bool
    ) -> NodeDraft:
        self._expect_keyword("for")
        variable = self._loop_variable()
        iterable = self._expression()
        condition = None
        if self._current().is_keyword("if"):
            self._advance()
            condition = self._expression()
        if self._current().is_keyword("for"):
            raise self._error("nested comprehension loops are not supported")
        end = self._expect_op(closer).end if closer else self._prev_end
        return self._draft(
            Comprehension, start, end, element=element, variable=variable, iterable=iterable,
            condition=condition, generator=generator,
        )

    def _loop_variable(self) -> NodeDraft:
        variable = self._postfix()
        token = self._current()
        if token.is_keyword("in") or token.is_op("=", "∈"):
            self._advance()
            return variable
        raise self._error("expected 'in', '=' or '∈' after loop variable")

    def _macro_call(self) -> NodeDraft:
        token = self._advance()
        name = token.text[1:]
        following = self._current()
        if following.is_op("(") and not following.space_before:
            self._advance()
            args, kwargs, _ = self._arguments(")")
            end = self._expect_op(")").end
            return self._draft(
                Macro, token.start, end, name=name, args=tuple(args + kwargs), parenthesized=True
            )
        args: list[NodeDraft] = []
        while not self._at_expression_end():
            args.append(self._expression(allow_tuple=False))
        end = args[-1].span.end if args else token.end
        return self._draft(Macro, token.start, end, name=name, args=tuple(args))

    # ------------------------------------------------------------------
    # Compound constructs
    # ------------------------------------------------------------------

    def _function(self) -> NodeDraft:
        keyword = self._advance()
        self._push(True)
        try:
            if self._current().is_op("("):
                self._expect_op("(")
                params = self._parameters(")")
                self._expect_op(")")
                body = self._body()
                end = self._expect_keyword("end").end
                return self._draft(
                    AnonymousFunction, keyword.start, end, params=tuple(params), body=body
                )

            name, name_span = self._function_name()
            if self._current().is_keyword("end"):
                end = self._advance().end
                body = self._block([], end)
                return self._draft(
                    FunctionDef, keyword.start, end, name=name, name_span=name_span, body=body
                )
            if self._current().is_op("{") and not self._current().space_before:
                self._type_arguments()
            self._expect_op("(")
            params = self._parameters(")")
            self._expect_op(")")
            return_type = None
            if self._current().is_op("::"):
                self._advance()
                return_type = self._type()
            type_params: list[NodeDraft] = []
            where_start: int | None = None
            while self._current().is_keyword("where"):
                if where_start is None:
                    where_start = self._prev_end
                self._advance()
                type_params.extend(self._where_params())
            where_span = (
                self._span(where_start, self._prev_end) if where_start is not None else None
            )
            body = self._body()
            end = self._expect_keyword("end").end
            return self._draft(
                FunctionDef, keyword.start, end, name=name, name_span=name_span,
                params=tuple(params), type_params=tuple(type_params), return_type=return_type,
                body=body, short_form=False, where_span=where_span,
            )
        finally:
            self._pop()

    def _function_name(self) -> tuple[str, Span]:
        token = self._current()
        if token.kind == OP and token.text not in ("(", "{"):
            self._advance()
            return token.text, self._span(token.start, token.end)
        if token.kind != NAME:
            raise self._error("expected function name")
        self._advance()
        parts = [token.text]
        end = token.end
        while self._current().is_op(".") and self._peek().kind == NAME:
            self._advance()
            part = self._advance()
            parts.append(part.text)
            end = part.end
        return ".".join(parts), self._span(token.start, end)

    def _parameters(self, closer: str) -> list[NodeDraft]:
        self._push(False)
        try:
            params: list[NodeDraft] = []
            keyword = False
            while not self._current().is_op(closer):
                if self._current().is_op(";"):
                    self._advance()
                    keyword = True
                    continue
                params.append(self._to_parameter(self._expression(), keyword=keyword))
                if self._current().is_op(","):
                    self._advance()
                elif not self._current().is_op(closer, ";"):
                    raise self._error(f"expected ',' or {closer!r} in parameter list")
            return params
        finally:
            self._pop()

    def _where_params(self) -> list[NodeDraft]:
        if self._current().is_op("{"):
            self._advance()
            self._push(False)
            try:
                params: list[NodeDraft] = []
                while not self._current().is_op("}"):
                    params.append(self._type_param())
                    if self._current().is_op(","):
                        self._advance()
                self._expect_op("}")
                return params
            finally:
                self._pop()
        return [self._type_param()]

    def _type_param(self) -> NodeDraft:
        token = self._current()
        if token.kind != NAME:
            raise self._error("expected a type parameter name")
        self._advance()
        bound = None
        if self._current().is_op("<:", ">:"):
            self._advance()
            bound = self._type()
        end = bound.span.end if bound is not None else token.end
        return self._draft(TypeParam, token.start, end, name=token.text, bound=bound)

    def _macro_definition(self) -> NodeDraft:
        keyword = self._advance()
        self._push(True)
        try:
            token = self._current()
            if token.kind != NAME:
                raise self._error("expected macro name")
            self._advance()
            self._expect_op("(")
            params = self._parameters(")")
            self._expect_op(")")
            body = self._body()
            end = self._expect_keyword("end").end
            return self._draft(
                MacroDef, keyword.start, end, name=token.text,
                name_span=self._span(token.start, token.end), params=tuple(params), body=body,
            )
        finally:
            self._pop()

    def _struct(self) -> NodeDraft:
        first = self._advance()
        mutable = first.text == "mutable"
        if mutable:
            self._expect_keyword("struct")
        self._push(True)
        try:
            name = self._current()
            if name.kind != NAME:
                raise self._error("expected struct name")
            self._advance()
            type_params: list[NodeDraft] = []
            if self._current().is_op("{") and not self._current().space_before:
                type_params = self._where_params()
            supertype = None
            if self._current().is_op("<:"):
                self._advance()
                supertype = self._type()

            fields: list[NodeDraft] = []
            constructors: list[NodeDraft] = []
            for statement in self._statements(frozenset({"end"})):
                member = self._struct_member(statement)
                if member is None:
                    continue
                if member.node_type is StructField:
                    fields.append(member)
                else:
                    constructors.append(member)
            end = self._expect_keyword("end").end
            return self._draft(
                StructDef, first.start, end, name=name.text,
                name_span=self._span(name.start, name.end), mutable=mutable,
                type_params=tuple(type_params), supertype=supertype, fields=tuple(fields),
                constructors=tuple(constructors),
            )
        finally:
            self._pop()

    def _struct_member(self, statement: NodeDraft) -> NodeDraft | None:
        node_type = statement.node_type
        if node_type is FunctionDef:
            return statement
        if node_type in (Literal, Macro):
            # docstrings and annotations such as @doc
            return None
        default = None
        if node_type is Assignment and statement.fields["op"] == "=":
            default = statement.fields["value"]
            statement = statement.fields["target"]
            node_type = statement.node_type
        if node_type is Identifier:
            name, annotation = statement.fields["name"], None
        elif node_type is TypeAssert and statement.fields["value"] is not None:
            value = statement.fields["value"]
            if value.node_type is not Identifier:
                raise self._error("unsupported struct field")
            name, annotation = value.fields["name"], statement.fields["annotation"]
        else:
            raise self._error("unsupported struct member")
        end = default.span.end if default is not None else statement.span.end
        return self._draft(
            StructField, statement.span.start, end, name=name, annotation=annotation,
            default=default,
        )

    def _if(self) -> NodeDraft:
        keyword = self._advance()
        self._push(True)
        try:
            branch = self._branch(keyword)
            self._expect_keyword("end")
            return self._stretch(branch, self._prev_end)
        finally:
            self._pop()

    def _branch(self, keyword: Token) -> NodeDraft:
        test = self._expression()
        then = self._body(frozenset({"elseif", "else", "end"}))
        orelse = None
        token = self._current()
        if token.is_keyword("elseif"):
            self._advance()
            orelse = self._branch(token)
        elif token.is_keyword("else"):
            self._advance()
            orelse = self._body()
        end = orelse.span.end if orelse is not None else then.span.end
        return self._draft(
            Conditional, keyword.start, end, keyword=keyword.text, test=test, then=then,
            orelse=orelse,
        )

    def _stretch(self, branch: NodeDraft, end: int) -> NodeDraft:
        """Extend an if/elseif chain so every branch ends at the closing ``end``."""
        fields = dict(branch.fields)
        orelse = fields.get("orelse")
        if orelse is not None and orelse.node_type is Conditional:
            fields["orelse"] = self._stretch(orelse, end)
        return NodeDraft(Conditional, self._span(branch.span.start, end), fields)

    def _for(self) -> NodeDraft:
        keyword = self._advance()
        self._push(True)
        try:
            specs: list[tuple[NodeDraft, NodeDraft]] = []
            while True:
                variable = self._loop_variable()
                iterable = self._expression()
                specs.append((variable, iterable))
                if not self._current().is_op(","):
                    break
                self._advance()
            body = self._body()
            end = self._expect_keyword("end").end
        finally:
            self._pop()
        # for i in a, j in b  ->  nested loops
        for variable, iterable in reversed(specs[1:]):
            inner = self._draft(
                ForLoop, variable.span.start, end, variable=variable, iterable=iterable, body=body
            )
            body = self._draft(Block, inner.span.start, end, statements=(inner,))
        variable, iterable = specs[0]
        return self._draft(
            ForLoop, keyword.start, end, variable=variable, iterable=iterable, body=body
        )

    def _while(self) -> NodeDraft:
        keyword = self._advance()
        self._push(True)
        try:
            test = self._expression()
            body = self._body()
            end = self._expect_keyword("end").end
        finally:
            self._pop()
        return self._draft(WhileLoop, keyword.start, end, test=test, body=body)

    def _begin(self) -> NodeDraft:
        keyword = self._advance()
        self._push(True)
        try:
            statements = self._statements(frozenset({"end"}))
            end = self._expect_keyword("end").end
        finally:
            self._pop()
        return self._draft(Block, keyword.start, end, statements=tuple(statements))

    def _let(self) -> NodeDraft:
        keyword = self._advance()
        self._push(True)
        try:
            statements: list[NodeDraft] = []
            while not (self._current().kind == NEWLINE or self._current().is_op(";")):
                statements.append(self._expression())
                if not self._current().is_op(","):
                    break
                self._advance()
            statements.extend(self._statements(frozenset({"end"})))
            end = self._expect_keyword("end").end
        finally:
            self._pop()
        return self._draft(Block, keyword.start, end, statements=tuple(statements))

    def _try(self) -> NodeDraft:
        keyword = self._advance()
        self._push(True)
        try:
            parts = [self._body(frozenset({"catch", "finally", "else", "end"}))]
            if self._current().is_keyword("catch"):
                self._advance()
                token = self._current()
                if token.kind == NAME:
                    self._advance()
                    parts.append(self._draft(Identifier, token.start, token.end, name=token.text))
                parts.append(self._body(frozenset({"finally", "else", "end"})))
            if self._current().is_keyword("else"):
                self._advance()
                parts.append(self._body(frozenset({"finally", "end"})))
            if self._current().is_keyword("finally"):
                self._advance()
                parts.append(self._body())
            end = self._expect_keyword("end").end
        finally:
            self._pop()
        return self._draft(Block, keyword.start, end, statements=tuple(parts))

    # ------------------------------------------------------------------
    # Types
    # ------------------------------------------------------------------

    def _type(self) -> NodeDraft:
        token = self._current()
        if token.is_op("("):
            self._advance()
            inner = self._type()
            self._expect_op(")")
            return inner
        if token.is_op("<:"):
            self._advance()
            bounded = self._type()
            if bounded.node_type is TypeAnnotation:
                fields = dict(bounded.fields, subtype_bound=True)
                return NodeDraft(TypeAnnotation, self._span(token.start, bounded.span.end), fields)
            return bounded
        if token.kind != NAME:
            raise self._error("expected a type")
        self._advance()
        parts = [token.text]
        end = token.end
        while self._current().is_op(".") and self._peek().kind == NAME:
            self._advance()
            part = self._advance()
            parts.append(part.text)
            end = part.end
        name = ".".join(parts)
        name_span = self._span(token.start, end)
        params: list[NodeDraft] = []
        if self._current().is_op("{") and not self._current().space_before:
            params, end = self._type_arguments()
        if name == "Union":
            return self._draft(UnionType, token.start, end, members=tuple(params))
        return self._draft(
            TypeAnnotation, token.start, end, name=name, name_span=name_span,
            params=tuple(params),
        )

    def _type_arguments(self) -> tuple[list[NodeDraft], int]:
        self._expect_op("{")
        self._push(False)
        try:
            params: list[NodeDraft] = []
            while not self._current().is_op("}"):
                token = self._current()
                if token.kind in (INT, FLOAT, STRING, CHAR):
                    self._advance()
                    params.append(
                        self._draft(
                            Literal,
                            token.start,
                            token.end,
                            value=token.text,
                            literal_type=token.kind,
                        )
                    )
                elif token.is_op(":"):
                    params.append(self._colon(token))
                else:
                    params.append(self._type())
                if self._current().is_op(","):
                    self._advance()
                elif not self._current().is_op("}"):
                    raise self._error("expected ',' or '}' in type parameters")
            end = self._expect_op("}").end
            return params, end
        finally:
            self._pop()

    # ------------------------------------------------------------------
    # Signatures
    # ------------------------------------------------------------------

    def _signature_call(self, left: NodeDraft) -> NodeDraft | None:
        """The call draft of a short-form definition ``f(x) = ...``, if ``left`` is one."""
        call = left
        if left.node_type is TypeAssert and left.fields["value"] is not None:
            call = left.fields["value"]
        if call.node_type is not CallExpr or call.fields["broadcast"]:
            return None
        if _dotted_name(call.fields["callee"]) is None:
            return None
        return call

    def _short_function(
        self,
        left: NodeDraft,
        call: NodeDraft,
        value: NodeDraft,
        type_params: list[NodeDraft],
        where_span: Span | None,
    ) -> NodeDraft:
        callee = call.fields["callee"]
        _, keyword_ids = self._keyword_args.get(id(call), (call, set()))
        params = [self._to_parameter(arg) for arg in call.fields["args"]]
        params.extend(
            self._to_parameter(arg, keyword=id(arg) in keyword_ids) for arg in call.fields["kwargs"]
        )
        params.sort(key=lambda draft: draft.span.start)
        return_type = left.fields["annotation"] if left is not call else None
        body = self._draft(Block, value.span.start, value.span.end, statements=(value,))
        return self._draft(
            FunctionDef, left.span.start, value.span.end, name=_dotted_name(callee),
            name_span=callee.span, params=tuple(params), type_params=tuple(type_params),
            return_type=return_type, body=body, short_form=True, where_span=where_span,
        )

    def _lambda_params(self, left: NodeDraft) -> list[NodeDraft]:
        if left.node_type is TupleLiteral:
            return [self._to_parameter(element) for element in left.fields["elements"]]
        if left.node_type is Paren:
            return [self._to_parameter(left.fields["inner"])]
        return [self._to_parameter(left)]

    def _to_parameter(self, draft: NodeDraft, keyword: bool = False) -> NodeDraft:
        node_type = draft.node_type
        fields = draft.fields
        if node_type is Identifier:
            return self._draft(
                Parameter, draft.span.start, draft.span.end, name=fields["name"],
                name_span=draft.span, keyword=keyword,
            )
        if node_type is TypeAssert:
            value = fields["value"]
            if value is None:
                name, name_span = "", self._span(draft.span.start, draft.span.start)
            elif value.node_type is Identifier:
                name, name_span = value.fields["name"], value.span
            else:
                raise self._error("unsupported parameter form")
            return self._draft(
                Parameter, draft.span.start, draft.span.end, name=name, name_span=name_span,
                annotation=fields["annotation"], keyword=keyword,
            )
        if node_type is SplatExpr:
            inner = self._to_parameter(fields["operand"], keyword)
            return NodeDraft(Parameter, draft.span, dict(inner.fields, is_splat=True))
        if node_type is Assignment and fields["op"] == "=":
            inner = self._to_parameter(fields["target"], keyword)
            return NodeDraft(Parameter, draft.span, dict(inner.fields, default=fields["value"]))
        raise ParseError(
            "unsupported parameter form", draft.span.start, draft.span.line, draft.span.column
        )


def _dotted_name(draft: NodeDraft) -> str | None:
    """``a.b.c`` for identifier / field-access chains, else None."""
    if draft.node_type is Identifier:
        return draft.fields["name"]
    if draft.node_type is FieldAccess:
        prefix = _dotted_name(draft.fields["target"])
        return None if prefix is None else f"{prefix}.{draft.fields['field']}"
    return None


def parse_source(text: str, path: str = "<memory>") -> SourceUnit:
    """Parse ``text`` into a :class:`SourceUnit`.

    Raises
    ------
    ParseError
        If the text uses syntax the reader does not support
    """
    return Parser(text, path).parse()
