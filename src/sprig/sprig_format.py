"""
Provides the `Formatter` class and emitter interface for rendering Sprig ASTs as text.

Classes and Features:
    - Emitter (Protocol): Interface for all output emitters. Requires `get_output`.
    - SourceEmitter: Writes Sprig source back out (target `sprig`, alias `source`).
    - JsonEmitter: Writes the serialized AST as JSON (target `json`).
    - Formatter: Selects the emitter for a target and dispatches `Program` nodes to
      its `emit_*` methods.

Example:
    >>> formatter = Formatter("sprig")
    >>> formatter.format(parse_source("let x = 1 + 2"))
    'let x = 1 + 2'

Raises:
    ValueError: If the target is not supported.
    TypeError: If the value to format is not a `Program`.
    NotImplementedError: If the emitter lacks an `emit_*` method for a node kind.
"""

from collections.abc import Callable
from typing import Protocol

from sprig.emitters.json_emitter import JsonEmitter
from sprig.emitters.source_emitter import SourceEmitter
from sprig.sprig_ast import Node, Program, snake_kind


class Emitter(Protocol):  # pragma: no cover
    """Protocol for all Sprig output emitters.

    Methods:
        get_output(): Returns the complete emitted text.
    """

    def get_output(self) -> str: ...  # pragma: no cover


EmitterFactory = Callable[[int | None], Emitter]
"""Builds an emitter from the requested indentation."""


def _source_emitter(indent: int | None) -> Emitter:
    return SourceEmitter(indent_width=2 if indent is None else indent)


def _json_emitter(indent: int | None) -> Emitter:
    return JsonEmitter(indent=indent)


EMITTERS: dict[str, EmitterFactory] = {
    "sprig": _source_emitter,
    "source": _source_emitter,
    "json": _json_emitter,
}


class Formatter:
    """Dispatches Sprig AST nodes to the emitter for an output target.

    Attributes:
        target (str): The normalized target name.
        emitter (Emitter): The emitter instance for the output target.
    """

    def __init__(self, target: str, indent: int | None = 2) -> None:
        """
        Args:
            target: The output format ("json", "sprig" or "source").
            indent: Indentation width; for JSON, None writes a single line.

        Raises:
            ValueError: If the target is not supported.
        """
        target = target.lower()
        if target not in EMITTERS:
            raise ValueError(f"Unknown output target: {target!r}")
        self.target = target
        self.indent = indent
        self._factory = EMITTERS[target]
        self.emitter: Emitter = self._factory(indent)

    def format(self, program: Program) -> str:
        """Renders a program with the selected emitter.

        Raises:
            TypeError: If `program` is not a Program node.
        """
        if not isinstance(program, Program):
            raise TypeError("Only Program nodes can be formatted.")
        # emitters accumulate output, so every call starts from a fresh one
        self.emitter = self._factory(self.indent)
        self._visit(program)
        return self.emitter.get_output()

    def _visit(self, node: Node) -> None:
        method_name = f"emit_{snake_kind(node.kind)}"
        if hasattr(self.emitter, method_name):
            getattr(self.emitter, method_name)(node)
        else:
            raise NotImplementedError(
                f"No emitter method for node kind '{node.kind}'"
            )
