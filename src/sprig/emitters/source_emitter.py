"""
Renders Sprig AST nodes back into Sprig source code.

This module defines the `SourceEmitter` class, the pretty-printer used by the `Formatter`
for the `sprig` target. Its output is meant to be parsed again: re-parsing the rendering of
a parsed program yields a structurally identical AST.

Behavior:
    - One statement per line, function bodies indented.
    - Parentheses are only added where the parse would otherwise differ:
        * operands that bind looser than their operator position allows;
        * callees and member objects that are not themselves calls or member chains;
        * identifier-led expression statements that come before a `) {` token pair,
          which would otherwise be read as a function declaration.
    - Computed member access is written `object[property}`, matching what the parser accepts.

Raises:
    - `TypeError`: If a node cannot be written in a form the parser accepts.
    - `NotImplementedError`: If a node kind has no emitter.
"""

import math
from decimal import Decimal

from sprig.sprig_ast import (
    AssignmentExpr,
    BinaryExpr,
    CallExpr,
    Expr,
    FunctionDeclaration,
    Identifier,
    MemberExpr,
    Node,
    NumericLiteral,
    ObjectLiteral,
    Program,
    Stmt,
    StringLiteral,
    VarDeclaration,
    snake_kind,
)
from sprig.sprig_constants import additive_operators

# Binding strength of each expression form; higher binds tighter.
ASSIGNMENT = 0
OBJECT = 1
ADDITIVE = 2
MULTIPLICATIVE = 3
CALL = 4
MEMBER = 5
PRIMARY = 6


# float("1" + "0" * 309) overflows to inf, so this spelling reads back as inf
OVERFLOWING_LITERAL = "1" + "0" * 309


def format_number(value: float) -> str:
    """Write a float the way the lexer can read it back (no exponent, no sign).

    Raises:
        ValueError: If the value is NaN or negative, which no literal can spell.
    """
    if math.isnan(value) or value < 0:
        raise ValueError(f"Numeric literal {value!r} cannot be written as Sprig source")
    if math.isinf(value):
        return OVERFLOWING_LITERAL
    if value.is_integer():
        return str(int(value))
    text = repr(value)
    if "e" in text or "E" in text:
        text = format(Decimal(text), "f")
    return text


def _ends_early(value: str, quote: str) -> bool:
    """Whether `quote` would terminate a string literal before the end of `value`."""
    index = 0
    while index < len(value):
        if value[index] == "\\":
            index += 2
            continue
        if value[index] == quote:
            return True
        index += 1
    return False


def format_string(value: str) -> str:
    # escapes are stored verbatim, so only an unescaped quote forces the other one
    quote = "'" if _ends_early(value, '"') else '"'
    return f"{quote}{value}{quote}"


class SourceEmitter:
    """Emits Sprig source code from AST nodes.

    Attributes:
        lines (list[str]): Emitted statements, one entry per statement or block delimiter.
        indent (int): Current indentation level.
        indent_width (int): Spaces per indentation level.
    """

    def __init__(self, indent_width: int = 2) -> None:
        self.lines: list[str] = []
        self.indent = 0
        self.indent_width = indent_width
        # line indices of identifier-led expression statements, and of `) {` pairs
        self._ident_led: list[tuple[int, str]] = []
        self._paren_brace: list[int] = []

    def indent_str(self) -> str:
        return " " * (self.indent_width * self.indent)

    def get_output(self) -> str:
        """Return the emitted program, wrapping statements the function scan would misread."""
        lines = list(self.lines)
        last_pair = max(self._paren_brace, default=-1)
        for index, text in self._ident_led:
            if index < last_pair:
                lines[index] = lines[index].replace(text, f"({text})", 1)
        return "\n".join(lines)

    def _append(self, text: str) -> int:
        self.lines.append(f"{self.indent_str()}{text}")
        return len(self.lines) - 1

    def _visit(self, node: Stmt) -> None:
        if isinstance(node, (VarDeclaration, FunctionDeclaration)):
            getattr(self, f"emit_{snake_kind(node.kind)}")(node)
        else:
            self.emit_expression_statement(node)

    # Statements

    def emit_program(self, node: Program) -> None:
        for stmt in node.body:
            self._visit(stmt)

    def emit_var_declaration(self, node: VarDeclaration) -> None:
        keyword = "const" if node.constant else "let"
        if node.value is None:
            self._append(f"{keyword} {node.identifier}")
        else:
            self._append(f"{keyword} {node.identifier} = {self.emit_expr(node.value)}")

    def emit_function_declaration(self, node: FunctionDeclaration) -> None:
        prefix = "async " if node.is_async else ""
        header = f"{prefix}{node.name}({', '.join(node.parameters)}) {{"
        if not node.body:
            self._paren_brace.append(self._append(header + "}"))
            return

        self._paren_brace.append(self._append(header))
        self.indent += 1
        for stmt in node.body:
            self._visit(stmt)
        self.indent -= 1
        self._append("}")

    def emit_expression_statement(self, node: Expr) -> None:
        text = self.emit_expr(node)
        if text.startswith("{") and self.lines and self.lines[-1].endswith(")"):
            self._paren_brace.append(len(self.lines))
        index = self._append(text)
        if text[0].isalpha() or text[0] == "_":
            self._ident_led.append((index, text))

    # Expressions

    def precedence(self, node: Node) -> int:
        if isinstance(node, AssignmentExpr):
            return ASSIGNMENT
        if isinstance(node, ObjectLiteral):
            return OBJECT
        if isinstance(node, BinaryExpr):
            return ADDITIVE if node.operator in additive_operators else MULTIPLICATIVE
        if isinstance(node, CallExpr):
            return CALL
        if isinstance(node, MemberExpr):
            return MEMBER
        return PRIMARY

    def operand(self, node: Expr, minimum: int) -> str:
        text = self.emit_expr(node)
        if self.precedence(node) < minimum:
            return f"({text})"
        return text

    def emit_expr(self, node: Expr) -> str:
        """
        Emits a Sprig expression from an AST node.

        Raises
        ------
        NotImplementedError
            If no emitter exists for the node kind.
        """
        method = getattr(self, f"emit_expr_{snake_kind(node.kind)}", None)
        if method is None:
            raise NotImplementedError(f"No expression emitter for kind '{node.kind}'")
        return str(method(node))

    def emit_expr_assignment_expr(self, node: AssignmentExpr) -> str:
        return f"{self.operand(node.target, OBJECT)} = {self.emit_expr(node.value)}"

    def emit_expr_object_literal(self, node: ObjectLiteral) -> str:
        if not node.properties:
            return "{}"
        props = [
            p.key if p.value is None else f"{p.key}: {self.emit_expr(p.value)}"
            for p in node.properties
        ]
        return "{ " + ", ".join(props) + " }"

    def emit_expr_binary_expr(self, node: BinaryExpr) -> str:
        level = self.precedence(node)
        left = self.operand(node.left, level)
        right = self.operand(node.right, level + 1)
        return f"{left} {node.operator} {right}"

    def emit_expr_call_expr(self, node: CallExpr) -> str:
        if isinstance(node.callee, CallExpr):
            callee = self.emit_expr(node.callee)
        else:
            callee = self.operand(node.callee, MEMBER)
        args = ", ".join(self.emit_expr(arg) for arg in node.arguments)
        return f"{callee}({args})"

    def emit_expr_member_expr(self, node: MemberExpr) -> str:
        if isinstance(node.object, NumericLiteral):
            obj = f"({self.emit_expr(node.object)})"
        else:
            obj = self.operand(node.object, MEMBER)

        if node.is_computed:
            return f"{obj}[{self.emit_expr(node.property)}}}"
        if not isinstance(node.property, Identifier):
            raise TypeError(
                f"Member property after '.' must be an Identifier, got {node.property.kind}"
            )
        return f"{obj}.{node.property.name}"

    def emit_expr_identifier(self, node: Identifier) -> str:
        return node.name

    def emit_expr_numeric_literal(self, node: NumericLiteral) -> str:
        return format_number(node.value)

    def emit_expr_string_literal(self, node: StringLiteral) -> str:
        return format_string(node.value)
