"""Aggregate field properties into message properties."""

import logging
from types import MappingProxyType

from .errors import EnumShapeError, OptionError, Rule, StructureError
from .fields import derive_field_props, parse_syntax, validate_field_number
from .types import FieldDeclaration, FieldProps, MessageDeclaration, MessageProps, Syntax

_LOG = logging.getLogger(__name__)

MESSAGE_OPTIONS = frozenset(["syntax", "enum", "map"])

# Enum values are int32 on the wire.
ENUM_VALUE_TYPE = "int32"


def _extension_ranges(decl: MessageDeclaration) -> tuple[tuple[int, int], ...] | None:
    if decl.extensions is None:
        return None

    ranges = []
    for start, end in decl.extensions:
        if start > end:
            raise StructureError(
                Rule.INVALID_EXTENSION_RANGE,
                decl.name,
                f"extension range {start}..{end} is empty",
            )
        ranges.append((start, end))
    return tuple(ranges)


def _enum_field(decl: FieldDeclaration) -> FieldDeclaration:
    if "type" in decl.options:
        return decl
    return FieldDeclaration(decl.name, decl.number, {**decl.options, "type": ENUM_VALUE_TYPE})


def _derive_fields(
    decl: MessageDeclaration, syntax: Syntax, is_enum: bool
) -> dict[int, FieldProps]:
    fields: dict[int, FieldProps] = {}
    names: set[str] = set()

    for field_decl in decl.fields:
        subject = f"{decl.name}.{field_decl.name}"
        if is_enum:
            field_decl = _enum_field(field_decl)
        else:
            validate_field_number(field_decl.number, subject)

        props = derive_field_props(field_decl, syntax, message=decl.name)

        if field_decl.name in names:
            raise StructureError(Rule.DUPLICATE_NAME, subject, "field name declared twice")
        names.add(field_decl.name)

        if props.number in fields:
            # Enum values may alias a number; the first declaration owns it.
            if is_enum:
                continue
            raise StructureError(
                Rule.DUPLICATE_NUMBER,
                subject,
                f"field number {props.number} already used by {fields[props.number].name}",
            )
        fields[props.number] = props

    return fields


def _verify_enum_shape(decl: MessageDeclaration, syntax: Syntax) -> None:
    if syntax != Syntax.PROTO3 or not decl.fields:
        return
    first = decl.fields[0]
    if first.number != 0:
        raise EnumShapeError(
            Rule.ENUM_FIRST_NOT_ZERO,
            decl.name,
            f"the first enum value must be zero in proto3, got {first.name} = {first.number}",
        )


def build_message_props(decl: MessageDeclaration) -> MessageProps:
    """Derive message properties from a message or enum declaration.

    Raises:
        SchemaError: if a field, oneof or range declaration is invalid.
    """
    for key in decl.options:
        if key not in MESSAGE_OPTIONS:
            raise OptionError(Rule.UNKNOWN_OPTION, decl.name, f"unknown message option {key!r}")

    syntax = parse_syntax(decl.options.get("syntax", Syntax.PROTO2), decl.name)
    is_enum = decl.options.get("enum") is True
    is_map = decl.options.get("map") is True

    if is_enum:
        _verify_enum_shape(decl, syntax)

    fields = _derive_fields(decl, syntax, is_enum)

    oneof_indices = {oneof.index for oneof in decl.oneofs}
    for props in fields.values():
        if props.oneof is not None and props.oneof not in oneof_indices:
            raise StructureError(
                Rule.UNKNOWN_ONEOF,
                f"{decl.name}.{props.name}",
                f"oneof index {props.oneof} is not declared",
            )

    name_to_number = {props.name: number for number, props in fields.items()}
    if is_enum:
        # Aliases are not in fields but still resolve by name.
        name_to_number = {field_decl.name: field_decl.number for field_decl in decl.fields}

    message = MessageProps(
        name=decl.name,
        syntax=syntax,
        enum=is_enum,
        map=is_map,
        fields=MappingProxyType(fields),
        ordered_numbers=tuple(sorted(fields)),
        tags_map=MappingProxyType({number: number for number in fields}),
        name_to_number=MappingProxyType(name_to_number),
        repeated_field_names=frozenset(p.name for p in fields.values() if p.repeated),
        embedded_field_names=frozenset(
            p.name for p in fields.values() if p.embedded and not p.map
        ),
        oneofs=tuple((oneof.name, oneof.index) for oneof in decl.oneofs),
        extension_ranges=_extension_ranges(decl),
    )

    _LOG.debug(
        "Built %s %s (%s) with %d fields",
        "enum" if is_enum else "message",
        decl.name,
        syntax,
        len(fields),
    )
    return message
