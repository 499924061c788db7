"""Declarations and derived property records."""

from dataclasses import dataclass, field
from enum import IntEnum, StrEnum
from types import MappingProxyType
from typing import Any, NamedTuple

from dataclasses_json import DataClassJsonMixin


class Syntax(StrEnum):
    """Protocol syntax version of a message."""

    PROTO2 = "proto2"
    PROTO3 = "proto3"


class Label(StrEnum):
    OPTIONAL = "optional"
    REQUIRED = "required"
    REPEATED = "repeated"


class WireType(IntEnum):
    """On-the-wire encoding category of a field value."""

    VARINT = 0
    FIXED64 = 1
    LENGTH_DELIMITED = 2
    START_GROUP = 3
    END_GROUP = 4
    FIXED32 = 5


class TypeRef(NamedTuple):
    """Reference to a user-defined type.

    kind is "enum" or "message", target is the referenced type name.
    """

    kind: str
    target: str


@dataclass
class FieldDeclaration(DataClassJsonMixin):
    """One field as declared: name, number and raw options."""

    name: str
    number: int
    options: dict[str, Any] = field(default_factory=dict)


@dataclass
class OneofDeclaration(DataClassJsonMixin):
    name: str
    index: int


@dataclass
class ExtendDeclaration(DataClassJsonMixin):
    """A proto2 extension field declared for another message."""

    extendee: str
    name: str
    number: int
    options: dict[str, Any] = field(default_factory=dict)


@dataclass
class MessageDeclaration(DataClassJsonMixin):
    """Represents a message (or enum) definition before derivation.

    For extensions:
    - extensions=None: the message does not accept extensions
    - extensions=[]: the message accepts extensions, no ranges given
    """

    name: str
    fields: list[FieldDeclaration] = field(default_factory=list)
    oneofs: list[OneofDeclaration] = field(default_factory=list)
    extensions: list[list[int]] | None = None
    options: dict[str, Any] = field(default_factory=dict)


@dataclass
class ModuleDeclaration(DataClassJsonMixin):
    """All declarations of one module, in declaration order."""

    messages: list[MessageDeclaration] = field(default_factory=list)
    extends: list[ExtendDeclaration] = field(default_factory=list)


@dataclass(frozen=True)
class FieldProps:
    """Fully resolved properties of one field."""

    number: int
    name: str
    json_name: str
    type: str | TypeRef
    wire_type: WireType
    optional: bool
    required: bool
    repeated: bool
    map: bool
    embedded: bool
    enum: bool
    packed: bool
    deprecated: bool
    default: Any
    oneof: int | None
    encoded_tag: bytes
    packed_tag: bytes

    @property
    def label(self) -> Label:
        if self.repeated:
            return Label.REPEATED
        if self.required:
            return Label.REQUIRED
        return Label.OPTIONAL


@dataclass(frozen=True)
class MessageProps:
    """Derived properties of one message or enum."""

    name: str
    syntax: Syntax
    enum: bool
    map: bool
    fields: MappingProxyType[int, FieldProps]
    ordered_numbers: tuple[int, ...]
    tags_map: MappingProxyType[int, int]
    name_to_number: MappingProxyType[str, int]
    repeated_field_names: frozenset[str]
    embedded_field_names: frozenset[str]
    oneofs: tuple[tuple[str, int], ...]
    extension_ranges: tuple[tuple[int, int], ...] | None

    @property
    def accepts_extensions(self) -> bool:
        return self.extension_ranges is not None

    def field_by_name(self, name: str) -> FieldProps:
        return self.fields[self.name_to_number[name]]

    def in_extension_range(self, number: int) -> bool:
        if self.extension_ranges is None:
            return False
        return any(start <= number <= end for start, end in self.extension_ranges)


@dataclass(frozen=True)
class Extension:
    """Field properties of an extension, tagged with the message it extends."""

    extendee: str
    field_props: FieldProps


@dataclass(frozen=True)
class ExtensionProps:
    """Extensions declared by one module, indexed for decoding and by name."""

    entries: MappingProxyType[tuple[str, int], Extension]
    name_index: MappingProxyType[tuple[str, str], tuple[str, int]]


SCALAR_TYPES = frozenset(
    [
        "int32",
        "int64",
        "uint32",
        "uint64",
        "sint32",
        "sint64",
        "bool",
        "fixed32",
        "sfixed32",
        "fixed64",
        "sfixed64",
        "float",
        "double",
        "string",
        "bytes",
    ]
)

NUMERIC_TYPES = SCALAR_TYPES - {"string", "bytes"}


def is_numeric(t: str | TypeRef) -> bool:
    """Check if a type can be packed (numeric, bool or enum)."""
    if isinstance(t, TypeRef):
        return t.kind == "enum"
    return t in NUMERIC_TYPES
