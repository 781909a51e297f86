"""
Token vocabulary for the Sprig programming language.

Token kinds are plain upper-case strings shared by the lexer, the parser and the
test suites. `token_hashmap` maps every fixed spelling (keywords, punctuation and
operators) to its canonical kind; anything not listed there is lexed as an
identifier, a number, a string, or an `ERROR` token.

Exports:
    - token_hashmap
    - operator_tokens
    - additive_operators
    - multiplicative_operators
    - keyword_tokens
"""

IDENT = "IDENT"
NUMBER = "NUMBER"
STRING = "STRING"
LET = "LET"
CONST = "CONST"
BINOP = "BINOP"
ASSIGN = "ASSIGN"
COMMA = "COMMA"
COLON = "COLON"
DOT = "DOT"
LPAREN = "LPAREN"
RPAREN = "RPAREN"
LBRACE = "LBRACE"
RBRACE = "RBRACE"
LBRACK = "LBRACK"
RBRACK = "RBRACK"
ERROR = "ERROR"
EOF = "EOF"

ASYNC_MARKER = "async"

keyword_tokens: dict[str, str] = {
    "let": LET,
    "const": CONST,
}

operator_tokens: tuple[str, ...] = ("+", "-", "*", "/", "%")
additive_operators: frozenset[str] = frozenset({"+", "-"})
multiplicative_operators: frozenset[str] = frozenset({"*", "/", "%"})

token_hashmap: dict[str, str] = {
    **keyword_tokens,
    **{op: BINOP for op in operator_tokens},
    "=": ASSIGN,
    ",": COMMA,
    ":": COLON,
    ".": DOT,
    "(": LPAREN,
    ")": RPAREN,
    "{": LBRACE,
    "}": RBRACE,
    "[": LBRACK,
    "]": RBRACK,
}
