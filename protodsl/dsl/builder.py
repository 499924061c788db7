"""Collect declarations and finalize them into derived properties."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Self

from protodsl.props.defaults import default_value, record_layout
from protodsl.props.enums import EnumAccessors, build_enum_accessors
from protodsl.props.errors import Rule, StructureError
from protodsl.props.extensions import build_extension_props
from protodsl.props.messages import build_message_props
from protodsl.props.types import (
    ExtendDeclaration,
    ExtensionProps,
    FieldDeclaration,
    MessageDeclaration,
    MessageProps,
    ModuleDeclaration,
    OneofDeclaration,
)

from .parser import parse

_LOG = logging.getLogger(__name__)


@dataclass(frozen=True)
class MessageDefinition:
    """Everything derived from one message builder."""

    props: MessageProps
    extension_props: ExtensionProps | None
    enum_accessors: EnumAccessors | None


class MessageBuilder:
    """Collects field, oneof, extend and extensions declarations for one message.

    Example:
        builder = MessageBuilder("Person", syntax="proto3")
        builder.field("id", 1, type="int32")
        builder.field("tags", 2, type="string", repeated=True)
        definition = builder.finalize()
    """

    def __init__(self, name: str, **options: Any) -> None:
        self.name = name
        self.options = options
        self._fields: list[FieldDeclaration] = []
        self._oneofs: list[OneofDeclaration] = []
        self._extends: list[ExtendDeclaration] = []
        self._extensions: list[list[int]] | None = None
        self._finalized = False

    def _check_open(self) -> None:
        if self._finalized:
            raise RuntimeError(f"{self.name} has already been finalized")

    def field(self, name: str, number: int, **options: Any) -> Self:
        self._check_open()
        self._fields.append(FieldDeclaration(name, number, options))
        return self

    def oneof(self, name: str, index: int) -> Self:
        self._check_open()
        self._oneofs.append(OneofDeclaration(name, index))
        return self

    def extend(self, extendee: str, name: str, number: int, **options: Any) -> Self:
        """Declare an extension of another message from this one."""
        self._check_open()
        self._extends.append(ExtendDeclaration(extendee, name, number, options))
        return self

    def extensions(self, ranges: list[tuple[int, int]]) -> Self:
        """Accept extensions in the given inclusive number ranges."""
        self._check_open()
        self._extensions = [*(self._extensions or []), *([start, end] for start, end in ranges)]
        return self

    def declaration(self) -> MessageDeclaration:
        return MessageDeclaration(
            name=self.name,
            fields=list(self._fields),
            oneofs=list(self._oneofs),
            extensions=None if self._extensions is None else list(self._extensions),
            options=dict(self.options),
        )

    def finalize(self) -> MessageDefinition:
        """Derive the message, its extensions and, for enums, its accessors."""
        self._check_open()
        decl = self.declaration()
        props = build_message_props(decl)
        definition = MessageDefinition(
            props=props,
            extension_props=build_extension_props(self._extends),
            enum_accessors=build_enum_accessors(decl.name, decl.fields) if props.enum else None,
        )
        self._finalized = True
        return definition


@dataclass(frozen=True)
class Schema:
    """Derived properties of every declaration in one module."""

    messages: dict[str, MessageProps]
    enums: dict[str, EnumAccessors]
    extensions: ExtensionProps | None
    declarations: ModuleDeclaration = field(repr=False, compare=False)

    def default_value(self, message: str, field_name: str) -> Any:
        props = self.messages[message]
        return default_value(props.syntax, props.field_by_name(field_name), self.enums)

    def record_layout(self, message: str) -> list[tuple[str, Any]]:
        return record_layout(self.messages[message], self.enums)


def build_module(module: ModuleDeclaration) -> Schema:
    """Build every message, enum and extension of a module.

    Raises:
        SchemaError: on the first declaration that breaks a schema rule.
    """
    messages: dict[str, MessageProps] = {}
    enums: dict[str, EnumAccessors] = {}

    for decl in module.messages:
        if decl.name in messages:
            raise StructureError(Rule.DUPLICATE_NAME, decl.name, "message declared twice")
        props = build_message_props(decl)
        messages[decl.name] = props
        if props.enum:
            enums[decl.name] = build_enum_accessors(decl.name, decl.fields)

    extensions = build_extension_props(module.extends)

    _LOG.debug(
        "Built module with %d messages, %d enums and %d extensions",
        len(messages) - len(enums),
        len(enums),
        len(extensions.entries) if extensions else 0,
    )
    return Schema(messages=messages, enums=enums, extensions=extensions, declarations=module)


def load(path: str | Path) -> Schema:
    """Load and build a declaration file.

    Files ending in .json hold a ModuleDeclaration as JSON; anything else is
    parsed as the declaration language.
    """
    path = Path(path)
    text = path.read_text(encoding="utf-8")

    if path.suffix == ".json":
        module = ModuleDeclaration.from_json(text)
    else:
        module = parse(text)

    return build_module(module)
