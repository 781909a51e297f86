"""
Defines the abstract syntax tree (AST) node variants for the Sprig programming language.

The AST is a closed set of immutable records. Every variant is a frozen dataclass with a
class-level `kind` tag, and every sequence field is a tuple, so a tree cannot be changed
after the parser builds it. Child nodes are owned by exactly one parent field.

Classes:
    Program: Root node, one per parse.
    VarDeclaration, FunctionDeclaration: Statement-only forms.
    AssignmentExpr, BinaryExpr, ObjectLiteral, CallExpr, MemberExpr: Compound expressions.
    Property: An entry of an ObjectLiteral (value None means shorthand).
    Identifier, NumericLiteral, StringLiteral: Leaf expressions.

    ASTDict:
        Loose TypedDict describing the serialized form produced by `to_dict()`,
        suitable for JSON output or debugging.

Functions:
    node_from_dict(data): Rebuild a node from its `to_dict()` form.
    iter_children(node): Yield the direct child nodes of a node in field order.
    walk(node): Yield a node and all of its descendants, depth-first, pre-order.
    snake_kind(kind): Convert a node kind such as "VarDeclaration" to "var_declaration".

Example:
    node = BinaryExpr(NumericLiteral(1.0), NumericLiteral(2.0), "+")
    node.to_dict()["kind"]  # "BinaryExpr"
"""

from __future__ import annotations

import dataclasses
import re
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any, ClassVar, TypedDict, Union


class ASTDict(TypedDict, total=False):
    """
    TypedDict representation of a serialized AST node.

    Only `kind` is present on every node; the remaining keys depend on the variant
    and mirror its dataclass field names.
    """

    kind: str
    body: list["ASTDict"]
    identifier: str
    constant: bool
    value: Any
    name: str
    parameters: list[str]
    is_async: bool
    target: "ASTDict"
    left: "ASTDict"
    right: "ASTDict"
    operator: str
    properties: list["ASTDict"]
    key: str
    callee: "ASTDict"
    arguments: list["ASTDict"]
    object: "ASTDict"
    property: "ASTDict"
    is_computed: bool


class Node:
    """Base class of every AST variant; provides serialization."""

    kind: ClassVar[str] = "Node"

    def to_dict(self) -> ASTDict:
        out: dict[str, Any] = {"kind": self.kind}
        for f in dataclasses.fields(self):  # type: ignore[arg-type]
            out[f.name] = _serialize(getattr(self, f.name))
        return out  # type: ignore[return-value]


def _serialize(value: Any) -> Any:
    if isinstance(value, Node):
        return value.to_dict()
    if isinstance(value, tuple):
        return [_serialize(v) for v in value]
    return value


@dataclass(frozen=True)
class Program(Node):
    kind: ClassVar[str] = "Program"

    body: tuple[Stmt, ...] = ()


@dataclass(frozen=True)
class VarDeclaration(Node):
    """`let name`, `let name = value` or `const name = value`."""

    kind: ClassVar[str] = "VarDeclaration"

    identifier: str
    constant: bool = False
    value: Expr | None = None


@dataclass(frozen=True)
class FunctionDeclaration(Node):
    """`[async] name(a, b) { ... }`; parameters are bare names."""

    kind: ClassVar[str] = "FunctionDeclaration"

    name: str
    parameters: tuple[str, ...] = ()
    body: tuple[Stmt, ...] = ()
    is_async: bool = False


@dataclass(frozen=True)
class AssignmentExpr(Node):
    kind: ClassVar[str] = "AssignmentExpr"

    target: Expr
    value: Expr


@dataclass(frozen=True)
class BinaryExpr(Node):
    kind: ClassVar[str] = "BinaryExpr"

    left: Expr
    right: Expr
    operator: str


@dataclass(frozen=True)
class Property(Node):
    kind: ClassVar[str] = "Property"

    key: str
    value: Expr | None = None

    @property
    def is_shorthand(self) -> bool:
        return self.value is None


@dataclass(frozen=True)
class ObjectLiteral(Node):
    kind: ClassVar[str] = "ObjectLiteral"

    properties: tuple[Property, ...] = ()


@dataclass(frozen=True)
class CallExpr(Node):
    kind: ClassVar[str] = "CallExpr"

    callee: Expr
    arguments: tuple[Expr, ...] = ()


@dataclass(frozen=True)
class MemberExpr(Node):
    """`object.property` (is_computed False) or `object[property` (is_computed True)."""

    kind: ClassVar[str] = "MemberExpr"

    object: Expr
    property: Expr
    is_computed: bool = False


@dataclass(frozen=True)
class Identifier(Node):
    kind: ClassVar[str] = "Identifier"

    name: str


@dataclass(frozen=True)
class NumericLiteral(Node):
    kind: ClassVar[str] = "NumericLiteral"

    value: float


@dataclass(frozen=True)
class StringLiteral(Node):
    kind: ClassVar[str] = "StringLiteral"

    value: str


Expr = Union[
    AssignmentExpr,
    BinaryExpr,
    ObjectLiteral,
    CallExpr,
    MemberExpr,
    Identifier,
    NumericLiteral,
    StringLiteral,
]
Stmt = Union[VarDeclaration, FunctionDeclaration, Expr]

NODE_TYPES: dict[str, type[Node]] = {
    cls.kind: cls
    for cls in (
        Program,
        VarDeclaration,
        FunctionDeclaration,
        AssignmentExpr,
        BinaryExpr,
        Property,
        ObjectLiteral,
        CallExpr,
        MemberExpr,
        Identifier,
        NumericLiteral,
        StringLiteral,
    )
}


def snake_kind(kind: str) -> str:
    """`"VarDeclaration"` -> `"var_declaration"`; used to name emit_* methods."""
    return re.sub(r"(?<!^)(?=[A-Z])", "_", kind).lower()


def node_from_dict(data: ASTDict | dict[str, Any]) -> Node:
    """Rebuild an AST node (and its subtree) from the mapping produced by `to_dict()`.

    Raises:
        ValueError: If a mapping has a missing or unknown `kind`.
    """
    kind = data.get("kind")
    if kind not in NODE_TYPES:
        raise ValueError(f"Unknown AST node kind: {kind!r}")
    cls = NODE_TYPES[kind]  # type: ignore[index]
    kwargs: dict[str, Any] = {}
    for f in dataclasses.fields(cls):  # type: ignore[arg-type]
        if f.name in data:
            kwargs[f.name] = _deserialize(data[f.name])  # type: ignore[literal-required]
    if cls is NumericLiteral and "value" in kwargs:
        # non-finite values travel as strings such as "Infinity"
        kwargs["value"] = float(kwargs["value"])
    return cls(**kwargs)


def _deserialize(value: Any) -> Any:
    if isinstance(value, dict):
        return node_from_dict(value)
    if isinstance(value, list):
        return tuple(_deserialize(v) for v in value)
    return value


def iter_children(node: Node) -> Iterator[Node]:
    for f in dataclasses.fields(node):  # type: ignore[arg-type]
        value = getattr(node, f.name)
        if isinstance(value, Node):
            yield value
        elif isinstance(value, tuple):
            yield from (v for v in value if isinstance(v, Node))


def walk(node: Node) -> Iterator[Node]:
    yield node
    for child in iter_children(node):
        yield from walk(child)
