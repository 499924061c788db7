"""Declaration file parser using Lark."""

import ast
import os
from dataclasses import dataclass
from typing import Any, TypeVar

from lark import Lark
from lark.visitors import Transformer

from protodsl.props.types import (
    ExtendDeclaration,
    FieldDeclaration,
    MessageDeclaration,
    ModuleDeclaration,
    OneofDeclaration,
)

_g_parser: Lark | None = None


@dataclass
class _Options:
    value: dict[str, Any]


@dataclass
class _Extensions:
    ranges: list[list[int]]


TFilter = TypeVar("TFilter", bound=object)


def _find_many(args: list[Any], class_type: type[TFilter]) -> list[TFilter]:
    return [v for v in args if isinstance(v, class_type)]


def _options(args: list[Any]) -> dict[str, Any]:
    found = _find_many(args, _Options)
    if len(found) > 1:
        raise RuntimeError("Found more than one option list")
    return found[0].value if found else {}


class TreeTransformer(Transformer):
    """Transform parse tree into declarations."""

    def start(self, args: list[Any]) -> ModuleDeclaration:
        return ModuleDeclaration(
            messages=_find_many(args, MessageDeclaration),
            extends=[ext for group in args if isinstance(group, list) for ext in group],
        )

    def message(self, args: list[Any]) -> MessageDeclaration:
        extensions = _find_many(args, _Extensions)
        return MessageDeclaration(
            name=str(args[0]),
            fields=_find_many(args, FieldDeclaration),
            oneofs=_find_many(args, OneofDeclaration),
            extensions=[r for ext in extensions for r in ext.ranges] if extensions else None,
            options=_options(args),
        )

    def enum(self, args: list[Any]) -> MessageDeclaration:
        return MessageDeclaration(
            name=str(args[0]),
            fields=_find_many(args, FieldDeclaration),
            options={**_options(args), "enum": True},
        )

    def enum_value(self, args: list[Any]) -> FieldDeclaration:
        return FieldDeclaration(name=str(args[0]), number=int(args[1]), options=_options(args))

    def extend(self, args: list[Any]) -> list[ExtendDeclaration]:
        extendee = str(args[0])
        return [
            ExtendDeclaration(extendee=extendee, name=f.name, number=f.number, options=f.options)
            for f in _find_many(args, FieldDeclaration)
        ]

    def field(self, args: list[Any]) -> FieldDeclaration:
        return FieldDeclaration(name=str(args[0]), number=int(args[1]), options=_options(args))

    def oneof(self, args: list[Any]) -> OneofDeclaration:
        return OneofDeclaration(name=str(args[0]), index=int(args[1]))

    def extensions(self, args: list[Any]) -> _Extensions:
        return _Extensions(ranges=list(args))

    def range(self, args: list[Any]) -> list[int]:
        return [int(args[0]), int(args[1])]

    def options(self, args: list[Any]) -> _Options:
        return _Options(value=dict(args))

    def option(self, args: list[Any]) -> tuple[str, Any]:
        # A bare option name switches the option on.
        if len(args) == 1:
            return (str(args[0]), True)
        return (str(args[0]), args[1])

    def string(self, args: list[Any]) -> str:
        return ast.literal_eval(str(args[0]))

    def number(self, args: list[Any]) -> int | float:
        text = str(args[0])
        try:
            return int(text)
        except ValueError:
            return float(text)

    def symbol(self, args: list[Any]) -> str | bool:
        text = str(args[0])
        if text in ("true", "false"):
            return text == "true"
        return text


def parse(text: str) -> ModuleDeclaration:
    """Parse a declaration file into module declarations."""
    global _g_parser

    if not _g_parser:
        with open(f"{os.path.dirname(__file__)}/protodsl.lark", encoding="utf-8") as f:
            grammar = f.read()

        _g_parser = Lark(grammar, parser="lalr")

    tree = _g_parser.parse(text)
    return TreeTransformer().transform(tree)
