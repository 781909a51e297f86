"""
Lexical analyzer for the Sprig programming language.

This module turns raw Sprig source text into the token sequence the parser consumes:

Classes:
    CharacterStream: Stream abstraction for reading characters with line/column tracking.
    Token: Represents a single token with type, value, and source location.
    Lexer: Converts a CharacterStream into a sequence of tokens.

Functions:
    tokenize: Lex a whole source string into a list that ends with the EOF sentinel.

Features:
    - Skips whitespace and `//` line comments
    - Recognizes:
        * Identifiers, with `let` and `const` as keywords
        * Numbers (integer and float text, one `NUMBER` kind)
        * Strings in single or double quotes (escape sequences kept verbatim)
        * Punctuation and the arithmetic operators `+ - * / %`
    - Unknown characters become `ERROR` tokens and are reported by the parser

Raises:
    SyntaxError: If invalid floats or unterminated strings are encountered.

Example:
    >>> tokenize("let x = 1")
    [Token(LET, let), Token(IDENT, x), Token(ASSIGN, =), Token(NUMBER, 1), Token(EOF, EOF)]
"""

from typing import Any

from sprig.sprig_constants import EOF, ERROR, IDENT, NUMBER, STRING, token_hashmap


class CharacterStream:
    """
    A utility for reading characters from a string source with line and column tracking.

    Attributes:
        source (str): The input source string.
        position (int): Current index in the source.
        line (int): Current line number (1-indexed).
        column (int): Current column number (1-indexed).
    """

    def __init__(self, source: str, position: int = 0, line: int = 1, column: int = 1):
        self.source = source
        self.position = position
        self.line = line
        self.column = column

    def next(self) -> str:
        """
        Consumes and returns the next character in the stream.

        Raises:
            EOFError: If reading past the end of the source.
        """
        if self.position >= len(self.source):
            raise EOFError(
                f"CharacterStreamError: Attempted to read past end of source at position=<{self.position}>, line=<{self.line}>"
            )
        char = self.source[self.position]
        if char == "\n":
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        self.position += 1
        return char

    def peek(self, offset: int = 0) -> str:
        """Returns the character at `offset` without advancing, or "" when out of bounds."""
        index = self.position + offset
        if index < 0 or index >= len(self.source):
            return ""
        return self.source[index]

    def end_of_file(self) -> bool:
        return self.position >= len(self.source)


class Token:
    """Represents a single lexical token in the Sprig language.

    Attributes:
        type (str): The canonical token kind (e.g. 'IDENT', 'NUMBER', 'EOF').
        value (str): The raw text of the token.
        line (int): The 1-based line number where the token appears.
        col (int): The 1-based column number where the token starts.
    """

    def __init__(self, type_: str, value: str, line: int = 0, col: int = 0):
        self.type = type_
        self.value = value
        self.line = line
        self.col = col

    def __repr__(self) -> str:
        return f"Token({self.type}, {self.value})"

    def __eq__(self, other: Any) -> bool:
        return (
            isinstance(other, Token)
            and self.type == other.type
            and self.value == other.value
            and self.line == other.line
            and self.col == other.col
        )

    def __hash__(self) -> int:
        return hash((self.type, self.value, self.line, self.col))


class Lexer:
    """Lexical analyzer for the Sprig language.

    Attributes:
        stream (CharacterStream): The source stream to tokenize.
    """

    def __init__(self, stream: CharacterStream) -> None:
        self.stream = stream

    def peek(self, offset: int = 0) -> str:
        return self.stream.peek(offset)

    def advance(self) -> str:
        return self.stream.next()

    def skip_whitespace(self) -> None:
        """Skips all whitespace and `//` comments in the stream."""
        while not self.stream.end_of_file():
            if self.peek() in " \t\r\n":
                self.advance()
            elif self.peek() == "/" and self.peek(1) == "/":
                self.skip_comment()
            else:
                break

    def skip_comment(self) -> None:
        while not self.stream.end_of_file() and self.peek() != "\n":
            self.advance()

    def next_token(self) -> Token:
        """Consumes and returns the next Token from the stream.

        Once the source is exhausted every call returns an `EOF` token.

        Raises:
            SyntaxError: If a malformed token is encountered (unterminated string or malformed float).
        """
        self.skip_whitespace()

        if self.stream.end_of_file():
            return Token(EOF, "EOF", self.stream.line, self.stream.column)

        ch = self.peek()
        line, col = self.stream.line, self.stream.column

        # 1. Identifier or keyword
        if ch.isalpha() or ch == "_":
            ident = ""
            while not self.stream.end_of_file() and (
                self.peek().isalnum() or self.peek() == "_"
            ):
                ident += self.advance()
            return Token(token_hashmap.get(ident, IDENT), ident, line, col)

        # 2. Number
        if "0" <= ch <= "9":
            num = ""
            has_dot = False
            while not self.stream.end_of_file() and (
                "0" <= self.peek() <= "9" or self.peek() == "."
            ):
                if self.peek() == ".":
                    if has_dot:
                        raise SyntaxError(
                            f"Invalid float format at line {line}, col {col}"
                        )
                    has_dot = True
                num += self.advance()
            return Token(NUMBER, num, line, col)

        # 3. String
        if ch in ('"', "'"):
            quote = self.advance()
            val = ""
            while not self.stream.end_of_file():
                if self.peek() == "\\":
                    val += self.advance()
                    if not self.stream.end_of_file():
                        val += self.advance()
                elif self.peek() == quote:
                    break
                else:
                    val += self.advance()
            if self.peek() == quote:
                self.advance()
                return Token(STRING, val, line, col)
            raise SyntaxError(f"Unterminated string at line {line}, col {col}")

        # 4. Punctuation and operators are all single characters
        if ch in token_hashmap:
            return Token(token_hashmap[ch], self.advance(), line, col)

        # 5. Unknown character
        return Token(ERROR, self.advance(), line, col)


def tokenize(source: str) -> list[Token]:
    """Lex `source` completely; the returned list always ends with exactly one EOF token."""
    lexer = Lexer(CharacterStream(source, 0, 1, 1))
    tokens: list[Token] = []
    while True:
        tok = lexer.next_token()
        tokens.append(tok)
        if tok.type == EOF:
            return tokens


__all__ = ["CharacterStream", "Lexer", "Token", "token_hashmap", "tokenize"]
