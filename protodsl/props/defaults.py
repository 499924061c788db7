"""Default values for fields and the record layout built from them."""

from collections.abc import Mapping
from typing import Any

from .enums import EnumAccessors
from .types import FieldProps, MessageProps, Syntax, TypeRef

TYPE_DEFAULTS: dict[str, Any] = {
    "int32": 0,
    "int64": 0,
    "uint32": 0,
    "uint64": 0,
    "sint32": 0,
    "sint64": 0,
    "bool": False,
    "fixed32": 0,
    "sfixed32": 0,
    "fixed64": 0,
    "sfixed64": 0,
    "float": 0.0,
    "double": 0.0,
    "bytes": b"",
    "string": "",
}

EXTENSIONS_ATTR = "__pb_extensions__"
UNKNOWN_FIELDS_ATTR = "__unknown_fields__"


def type_default(t: str | TypeRef, enums: Mapping[str, EnumAccessors] | None = None) -> Any:
    """Zero value of a type as used by proto3."""
    if isinstance(t, TypeRef):
        if t.kind != "enum":
            return None
        enums = enums or {}
        # Fields may reference the enum by its qualified name.
        accessors = enums.get(t.target) or enums.get(t.target.rsplit(".", 1)[-1])
        return accessors.key(0) if accessors else 0
    return TYPE_DEFAULTS.get(t)


def default_value(
    syntax: Syntax | str,
    props: FieldProps,
    enums: Mapping[str, EnumAccessors] | None = None,
) -> Any:
    """Return the value a field holds before anything is assigned to it.

    None means the field is unset (proto2) or is an unset message (proto3).
    """
    if props.default is not None:
        return props.default
    if props.repeated:
        return []
    if props.map:
        return {}
    if Syntax(syntax) == Syntax.PROTO3:
        return type_default(props.type, enums)
    return None


def record_layout(
    message: MessageProps, enums: Mapping[str, EnumAccessors] | None = None
) -> list[tuple[str, Any]]:
    """Attributes and initial values for a record of this message.

    Oneof members share their oneof's slot, so they are left out and the
    oneof name is listed instead.
    """
    regular = [
        (props.name, default_value(message.syntax, props, enums))
        for number in message.ordered_numbers
        if (props := message.fields[number]).oneof is None
    ]
    oneofs = [(name, None) for name, _index in message.oneofs]
    extensions = [(EXTENSIONS_ATTR, {})] if message.accepts_extensions else []

    return regular + oneofs + extensions + [(UNKNOWN_FIELDS_ATTR, [])]
