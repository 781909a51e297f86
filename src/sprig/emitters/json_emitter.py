"""
Serializes Sprig AST nodes to JSON.

`JsonEmitter` is the `json` target of the `Formatter`: it writes the `to_dict()` form of a
`Program`, which `sprig.sprig_ast.node_from_dict` can turn back into nodes.

The output is strict JSON. A numeric literal too large for a float (its value is
infinite) is written as the string "Infinity"; `node_from_dict` reads it back as a float.
"""

import json
import math
from typing import Any

from sprig.sprig_ast import Program


def _strict(value: Any) -> Any:
    if isinstance(value, float) and not math.isfinite(value):
        return "Infinity" if value > 0 else "-Infinity" if value < 0 else "NaN"
    if isinstance(value, dict):
        return {key: _strict(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_strict(item) for item in value]
    return value


class JsonEmitter:
    """Emits the JSON form of a program.

    Attributes:
        indent (int | None): Indentation passed to `json.dumps`; None writes one line.
    """

    def __init__(self, indent: int | None = 2) -> None:
        self.indent = indent
        self.documents: list[str] = []

    def emit_program(self, node: Program) -> None:
        self.documents.append(
            json.dumps(_strict(node.to_dict()), indent=self.indent, allow_nan=False)
        )

    def get_output(self) -> str:
        return "\n".join(self.documents)
