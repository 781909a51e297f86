"""
Sprig Language Parser

Parses Sprig language tokens into a `Program` abstract syntax tree.

This module implements the recursive-descent, precedence-climbing parser that turns the
flat token list produced by `sprig.sprig_lexer` into the immutable node tree defined in
`sprig.sprig_ast`. It is the only component that decides grammar: which statement form
applies, how operators bind, and how calls and member accesses chain.

Supported Constructs
--------------------
- Statements:
    * Variable declarations: `let x`, `let x = 1`, `const y = x + 1`
    * Function declarations without a keyword: `add(a, b) { a + b }`,
      `async load(url) { fetch(url) }`
    * Bare expression statements
- Expressions, lowest to highest precedence:
    * Assignment (right-associative): `a = b = c`
    * Object literals: `{ x, y: 1 }`
    * Additive `+ -` and multiplicative `* / %` (left-associative)
    * Calls `f(a)(b)` and member access `a.b`, `a[b}`
    * Identifiers, numbers, strings and parenthesized groups

Parser Behavior
---------------
- Fail-fast: the first problem raises a `ParseError` subclass and no AST is returned.
- The token cursor is an index into an immutable tuple; `parse()` installs a fresh
  cursor on every call.
- Function declarations are recognized by scanning the remaining tokens for a
  `(` and a `) {` pair. The scan is unbounded unless `lookahead` is given.

Entry Points
------------
- `Parser.parse()`: Parse a full token sequence into a `Program`.
- `Parser.parse_statement()`: Parse one statement at the cursor.
- `Parser.parse_expression()`: Parse one expression at the cursor.
- `parse_source()`: Tokenize and parse a source string.

Raises
------
UnexpectedTokenError
    A required token kind was not found.
MalformedConstructError
    Lexically valid input that forms an invalid construct.
UnrecognizedPrimaryError
    A token that cannot start an expression.
"""

from __future__ import annotations

from collections.abc import Sequence

from sprig.sprig_ast import (
    AssignmentExpr,
    BinaryExpr,
    CallExpr,
    Expr,
    FunctionDeclaration,
    Identifier,
    MemberExpr,
    NumericLiteral,
    ObjectLiteral,
    Program,
    Property,
    Stmt,
    StringLiteral,
    VarDeclaration,
)
from sprig.sprig_constants import (
    ASSIGN,
    ASYNC_MARKER,
    BINOP,
    COLON,
    COMMA,
    CONST,
    DOT,
    EOF,
    IDENT,
    LBRACE,
    LBRACK,
    LET,
    LPAREN,
    NUMBER,
    RBRACE,
    RPAREN,
    STRING,
    additive_operators,
    multiplicative_operators,
)
from sprig.sprig_lexer import Token, tokenize


class ParseError(SyntaxError):
    """Base class for every fatal parse failure.

    Attributes:
        message (str): Human-readable description of the failure.
        token (Token | None): The offending token, when one is known.
    """

    def __init__(self, message: str, token: Token | None = None):
        super().__init__(message)
        self.message = message
        self.token = token

    @property
    def line(self) -> int:
        return self.token.line if self.token is not None else 0

    @property
    def col(self) -> int:
        return self.token.col if self.token is not None else 0

    def describe(self) -> str:
        """Return the message with the source position appended when it is known."""
        if self.token is not None and self.token.line:
            return f"{self.message} (line {self.token.line}, col {self.token.col})"
        return self.message


class UnexpectedTokenError(ParseError):
    """Raised when `expect()` consumes a token of the wrong kind."""

    def __init__(self, message: str, token: Token | None, expected: str):
        super().__init__(message, token)
        self.expected = expected

    def describe(self) -> str:
        got = f"{self.token.type} {self.token.value!r}" if self.token else "nothing"
        return f"{super().describe()}: expected {self.expected}, got {got}"


class MalformedConstructError(ParseError):
    """Raised for well-formed tokens that do not form a valid construct."""


class UnrecognizedPrimaryError(ParseError):
    """Raised when the current token cannot start an expression."""


class Parser:
    """
    Sprig Parser Class

    Transforms a list of lexical tokens into a `Program` node.

    Attributes
    ----------
    tokens : tuple[Token, ...]
        The token sequence being parsed; it must end with an `EOF` token.
    position : int
        Index of the current (next unconsumed) token.
    lookahead : int | None
        Maximum number of tokens the function-declaration scan may inspect.
        None scans the whole remaining input.
    """

    def __init__(
        self, tokens: Sequence[Token] = (), lookahead: int | None = None
    ) -> None:
        if lookahead is not None and lookahead < 1:
            raise ValueError(f"lookahead must be positive, got {lookahead}")
        self.tokens: tuple[Token, ...] = tuple(tokens)
        self.position: int = 0
        self.lookahead = lookahead

    # Token cursor

    def current(self) -> Token:
        return self.peek(0)

    def peek(self, offset: int = 1) -> Token:
        index = self.position + offset
        if index < len(self.tokens):
            return self.tokens[index]
        return Token(EOF, "EOF")

    def advance(self) -> Token:
        tok = self.current()
        if self.position < len(self.tokens):
            self.position += 1
        return tok

    def expect(self, type_: str, message: str) -> Token:
        tok = self.advance()
        if tok.type != type_:
            raise UnexpectedTokenError(message, tok, type_)
        return tok

    def at_end(self) -> bool:
        return self.current().type == EOF

    def parse(self, tokens: Sequence[Token] | None = None) -> Program:
        """Parse a full token sequence and return its `Program`.

        Passing `tokens` replaces the sequence given to the constructor. The cursor
        always restarts at the first token.

        Raises:
            MalformedConstructError: If the input nests deeper than the interpreter
                stack allows.
        """
        if tokens is not None:
            self.tokens = tuple(tokens)
        self.position = 0

        body: list[Stmt] = []
        try:
            while not self.at_end():
                body.append(self.parse_statement())
        except RecursionError:
            raise MalformedConstructError(
                "Expression nested too deeply", self.current()
            ) from None
        return Program(tuple(body))

    # Statements

    def looks_like_function(self) -> bool:
        """Scan ahead (without consuming) for a `(` and a `) {` pair."""
        end = len(self.tokens)
        if self.lookahead is not None:
            end = min(end, self.position + self.lookahead)
        window = self.tokens[self.position : end]

        if not any(tok.type == LPAREN for tok in window):
            return False
        return any(
            tok.type == LBRACE and index > 0 and window[index - 1].type == RPAREN
            for index, tok in enumerate(window)
        )

    def parse_statement(self) -> Stmt:
        """Parse a single top-level or block-level statement."""
        tok = self.current()

        if tok.type == IDENT and self.looks_like_function():
            return self.parse_function_declaration()
        if tok.type in (LET, CONST):
            return self.parse_var_declaration()
        return self.parse_expression()

    def parse_function_declaration(self) -> FunctionDeclaration:
        """Parse `[async] name(params) { body }`."""
        is_async = False
        if self.current().type == IDENT and self.current().value == ASYNC_MARKER:
            is_async = True
            self.advance()

        name = self.expect(
            IDENT, "Expected a function name, as in name(params) { ... }"
        ).value

        params: list[str] = []
        for arg in self.parse_args():
            if not isinstance(arg, Identifier):
                raise MalformedConstructError(
                    f'Function parameters must be identifiers in "{name}"',
                    self.current(),
                )
            params.append(arg.name)

        self.expect(LBRACE, f'Expected "{{" to open the body of function "{name}"')
        body: list[Stmt] = []
        while self.current().type not in (EOF, RBRACE):
            body.append(self.parse_statement())
        self.expect(RBRACE, f'Expected "}}" to close the body of function "{name}"')

        return FunctionDeclaration(name, tuple(params), tuple(body), is_async)

    def parse_var_declaration(self) -> VarDeclaration:
        """Parse `let name`, `let name = expr` or `const name = expr`."""
        is_constant = self.advance().type == CONST
        keyword = "const" if is_constant else "let"
        name_tok = self.expect(IDENT, f"Expected a variable name after {keyword}")
        identifier = name_tok.value

        if self.at_end():
            if is_constant:
                raise MalformedConstructError(
                    f"Constant {identifier} must be assigned a value", name_tok
                )
            return VarDeclaration(identifier, constant=False)

        self.expect(ASSIGN, f"Expected = after {identifier}")
        return VarDeclaration(identifier, is_constant, self.parse_expression())

    # Expressions, lowest precedence first

    def parse_expression(self) -> Expr:
        return self.parse_assignment_expr()

    def parse_assignment_expr(self) -> Expr:
        target = self.parse_object_expr()
        if self.current().type == ASSIGN:
            self.advance()
            return AssignmentExpr(target, self.parse_assignment_expr())
        return target

    def parse_object_expr(self) -> Expr:
        if self.current().type != LBRACE:
            return self.parse_additive_expr()

        self.advance()
        properties: list[Property] = []

        while not self.at_end() and self.current().type != RBRACE:
            key = self.expect(IDENT, "Expected a property name inside object").value

            # { key, ... }
            if self.current().type == COMMA:
                self.advance()
                properties.append(Property(key))
                continue
            # { key }
            if self.current().type == RBRACE:
                properties.append(Property(key))
                continue

            self.expect(COLON, f"Expected : after {key}")
            properties.append(Property(key, self.parse_expression()))
            if self.current().type != RBRACE:
                self.expect(
                    COMMA, "Expected a comma or the end of the object after a property"
                )

        self.expect(RBRACE, "Expected } to close the object")
        return ObjectLiteral(tuple(properties))

    def _is_operator(self, operators: frozenset[str]) -> bool:
        tok = self.current()
        return tok.type == BINOP and tok.value in operators

    def parse_additive_expr(self) -> Expr:
        left = self.parse_multiplicative_expr()
        while self._is_operator(additive_operators):
            operator = self.advance().value
            left = BinaryExpr(left, self.parse_multiplicative_expr(), operator)
        return left

    def parse_multiplicative_expr(self) -> Expr:
        left = self.parse_call_member_expr()
        while self._is_operator(multiplicative_operators):
            operator = self.advance().value
            left = BinaryExpr(left, self.parse_call_member_expr(), operator)
        return left

    def parse_call_member_expr(self) -> Expr:
        member = self.parse_member_expr()
        if self.current().type == LPAREN:
            return self.parse_call_expr(member)
        return member

    def parse_call_expr(self, callee: Expr) -> Expr:
        call: Expr = CallExpr(callee, tuple(self.parse_args()))
        if self.current().type == LPAREN:
            call = self.parse_call_expr(call)
        return call

    def parse_args(self) -> list[Expr]:
        self.expect(LPAREN, "Expected ( to open the argument list")
        args = [] if self.current().type == RPAREN else self.parse_arguments_list()
        self.expect(RPAREN, "Expected ) to close the argument list")
        return args

    def parse_arguments_list(self) -> list[Expr]:
        args = [self.parse_assignment_expr()]
        while self.current().type == COMMA:
            self.advance()
            args.append(self.parse_assignment_expr())
        return args

    def parse_member_expr(self) -> Expr:
        obj = self.parse_primary_expr()

        while self.current().type in (DOT, LBRACK):
            operator = self.advance()
            prop: Expr
            if operator.type == DOT:
                prop_tok = self.current()
                prop = self.parse_primary_expr()
                if not isinstance(prop, Identifier):
                    raise MalformedConstructError(
                        "The right-hand side of . must be an identifier", prop_tok
                    )
                obj = MemberExpr(obj, prop, is_computed=False)
            else:
                prop = self.parse_expression()
                # computed access closes with the brace token
                self.expect(RBRACE, "Expected } to close the computed member access")
                obj = MemberExpr(obj, prop, is_computed=True)
        return obj

    def parse_primary_expr(self) -> Expr:
        tok = self.current()

        if tok.type == IDENT:
            return Identifier(self.advance().value)
        if tok.type == NUMBER:
            try:
                number = float(tok.value)
            except ValueError:
                raise MalformedConstructError(
                    f'Invalid numeric literal "{tok.value}"', tok
                ) from None
            self.advance()
            return NumericLiteral(number)
        if tok.type == STRING:
            return StringLiteral(self.advance().value)
        if tok.type == LPAREN:
            self.advance()
            value = self.parse_expression()
            self.expect(RPAREN, "Unexpected token found inside parentheses")
            return value

        raise UnrecognizedPrimaryError(f'Unexpected token found "{tok.value}"', tok)


def parse_source(source: str, lookahead: int | None = None) -> Program:
    """Tokenize and parse a Sprig source string."""
    return Parser(tokenize(source), lookahead=lookahead).parse()
