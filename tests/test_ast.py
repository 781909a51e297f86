import dataclasses
import json

import hypothesis.strategies as st
import pytest
from hypothesis import given

from sprig.sprig_ast import (
    AssignmentExpr,
    BinaryExpr,
    CallExpr,
    FunctionDeclaration,
    Identifier,
    MemberExpr,
    NumericLiteral,
    ObjectLiteral,
    Program,
    Property,
    StringLiteral,
    VarDeclaration,
    iter_children,
    node_from_dict,
    snake_kind,
    walk,
)


def sample_program() -> Program:
    return Program(
        (
            VarDeclaration("x", True, NumericLiteral(1.0)),
            FunctionDeclaration(
                "f",
                ("a",),
                (BinaryExpr(Identifier("a"), StringLiteral("s"), "+"),),
                is_async=True,
            ),
            AssignmentExpr(
                MemberExpr(Identifier("o"), Identifier("k"), False),
                CallExpr(Identifier("f"), (ObjectLiteral((Property("x"),)),)),
            ),
        )
    )


def test_nodes_are_frozen() -> None:
    node = Identifier("x")
    with pytest.raises(dataclasses.FrozenInstanceError):
        node.name = "y"  # type: ignore[misc]


def test_structural_equality() -> None:
    assert BinaryExpr(Identifier("a"), NumericLiteral(1.0), "+") == BinaryExpr(
        Identifier("a"), NumericLiteral(1.0), "+"
    )
    assert Identifier("a") != StringLiteral("a")


def test_kind_tags() -> None:
    assert Program().kind == "Program"
    assert MemberExpr(Identifier("a"), Identifier("b")).kind == "MemberExpr"


def test_property_shorthand() -> None:
    assert Property("x").is_shorthand
    assert not Property("x", Identifier("y")).is_shorthand


def test_to_dict_basic() -> None:
    d = VarDeclaration("x", False, NumericLiteral(2.0)).to_dict()
    assert d == {
        "kind": "VarDeclaration",
        "identifier": "x",
        "constant": False,
        "value": {"kind": "NumericLiteral", "value": 2.0},
    }


def test_to_dict_sequences_become_lists() -> None:
    d = FunctionDeclaration("f", ("a", "b")).to_dict()
    assert d["parameters"] == ["a", "b"]
    assert d["body"] == []
    assert d["is_async"] is False


def test_to_dict_is_json_serializable() -> None:
    text = json.dumps(sample_program().to_dict())
    assert '"kind": "FunctionDeclaration"' in text


def test_node_from_dict_rebuilds_tree() -> None:
    program = sample_program()
    assert node_from_dict(json.loads(json.dumps(program.to_dict()))) == program


def test_node_from_dict_unknown_kind() -> None:
    with pytest.raises(ValueError, match="Unknown AST node kind"):
        node_from_dict({"kind": "WhileLoop"})


def test_iter_children_in_field_order() -> None:
    node = BinaryExpr(Identifier("a"), Identifier("b"), "*")
    assert list(iter_children(node)) == [Identifier("a"), Identifier("b")]


def test_walk_is_preorder() -> None:
    kinds = [n.kind for n in walk(sample_program())]
    assert kinds[:4] == ["Program", "VarDeclaration", "NumericLiteral", "FunctionDeclaration"]
    assert kinds.count("Identifier") == 4


def test_snake_kind() -> None:
    assert snake_kind("VarDeclaration") == "var_declaration"
    assert snake_kind("Program") == "program"


@given(
    names=st.lists(
        st.from_regex(r"[a-z]{1,6}", fullmatch=True), min_size=0, max_size=5
    )
)  # type: ignore[misc]
def test_walk_visits_every_statement(names: list[str]) -> None:
    program = Program(tuple(Identifier(n) for n in names))
    assert [n.name for n in walk(program) if isinstance(n, Identifier)] == names
