"""Field property derivation.

A field declaration goes through a fixed sequence of steps. Later steps read
what earlier steps resolved, so the order in derive_field_props must not
change.
"""

from dataclasses import dataclass
from typing import Any

from .errors import OptionError, Rule, StructureError
from .types import FieldDeclaration, FieldProps, Syntax, TypeRef, WireType, is_numeric
from .wire import encode_tag, is_qualified_ref, wire_type

FIELD_OPTIONS = frozenset(
    [
        "optional",
        "required",
        "repeated",
        "enum",
        "map",
        "embedded",
        "deprecated",
        "packed",
        "type",
        "default",
        "oneof",
        "json_name",
    ]
)

MAX_FIELD_NUMBER = (1 << 29) - 1
RESERVED_NUMBERS = range(19000, 20000)


@dataclass
class _Draft:
    """Field properties while they are being resolved."""

    number: int
    name: str
    subject: str
    json_name: str | None = None
    type: Any = None
    wire_type: WireType | None = None
    optional: bool = False
    required: bool = False
    repeated: bool = False
    map: bool = False
    embedded: bool = False
    enum: bool = False
    packed: bool | None = None
    deprecated: bool = False
    default: Any = None
    oneof: int | None = None
    encoded_tag: bytes = b""
    packed_tag: bytes = b""

    def freeze(self) -> FieldProps:
        if self.wire_type is None or self.json_name is None:
            raise RuntimeError(f"{self.subject}: field properties are not fully resolved")
        return FieldProps(
            number=self.number,
            name=self.name,
            json_name=self.json_name,
            type=self.type,
            wire_type=self.wire_type,
            optional=self.optional,
            required=self.required,
            repeated=self.repeated,
            map=self.map,
            embedded=self.embedded,
            enum=self.enum,
            packed=bool(self.packed),
            deprecated=self.deprecated,
            default=self.default,
            oneof=self.oneof,
            encoded_tag=self.encoded_tag,
            packed_tag=self.packed_tag,
        )


def _merge_options(draft: _Draft, options: dict[str, Any]) -> None:
    for key, value in options.items():
        if key not in FIELD_OPTIONS:
            raise OptionError(Rule.UNKNOWN_OPTION, draft.subject, f"unknown field option {key!r}")
        setattr(draft, key, value)

    if draft.type is None:
        raise StructureError(Rule.MISSING_TYPE, draft.subject, "field has no type")


def _verify_no_default_in_proto3(draft: _Draft, syntax: Syntax) -> None:
    if syntax == Syntax.PROTO3 and draft.default is not None:
        raise OptionError(Rule.DEFAULT_IN_PROTO3, draft.subject, "default can't be used in proto3")


def _wrap_enum_type(draft: _Draft) -> None:
    if draft.enum:
        draft.type = TypeRef("enum", draft.type)
    draft.wire_type = wire_type(draft.type)


def _cal_label(draft: _Draft, syntax: Syntax) -> None:
    if syntax != Syntax.PROTO3:
        return
    if draft.required:
        raise OptionError(Rule.REQUIRED_IN_PROTO3, draft.subject, "required can't be used in proto3")
    draft.optional = True


def _cal_json_name(draft: _Draft) -> None:
    if not isinstance(draft.json_name, str):
        draft.json_name = draft.name


def _cal_embedded(draft: _Draft) -> None:
    if draft.enum:
        draft.embedded = False
    elif is_qualified_ref(draft.type):
        draft.embedded = True
        draft.type = TypeRef("message", draft.type)


def _cal_packed(draft: _Draft, syntax: Syntax) -> None:
    if draft.packed is True:
        if draft.embedded:
            raise OptionError(
                Rule.PACKED_EMBEDDED, draft.subject, "packed can't be used with embedded field"
            )
        if not draft.repeated:
            raise OptionError(
                Rule.PACKED_NOT_REPEATED, draft.subject, "packed must be used with repeated"
            )
    elif draft.packed is False:
        pass
    elif syntax == Syntax.PROTO3 and draft.repeated:
        draft.packed = (draft.enum or not draft.embedded) and is_numeric(draft.type)
    else:
        draft.packed = False


def _cal_repeated(draft: _Draft) -> None:
    if draft.map:
        draft.repeated = False
    elif draft.repeated and draft.oneof is not None:
        raise OptionError(Rule.REPEATED_ONEOF, draft.subject, "oneof can't be used with repeated")


def _cal_encoded_tag(draft: _Draft) -> None:
    wire = WireType.LENGTH_DELIMITED if draft.packed else draft.wire_type
    if wire is None:
        raise RuntimeError(f"{draft.subject}: wire type is not resolved")
    draft.encoded_tag = encode_tag(draft.number, wire)
    draft.packed_tag = encode_tag(draft.number, WireType.LENGTH_DELIMITED)


def derive_field_props(
    decl: FieldDeclaration, syntax: Syntax | str, *, message: str | None = None
) -> FieldProps:
    """Resolve one field declaration under the given syntax.

    Raises:
        SchemaError: if the declaration breaks one of the field rules.
    """
    subject = f"{message}.{decl.name}" if message else decl.name
    syntax = parse_syntax(syntax, subject)
    draft = _Draft(number=decl.number, name=decl.name, subject=subject)

    _merge_options(draft, decl.options)
    _verify_no_default_in_proto3(draft, syntax)
    _wrap_enum_type(draft)
    _cal_label(draft, syntax)
    _cal_json_name(draft)
    _cal_embedded(draft)
    _cal_packed(draft, syntax)
    _cal_repeated(draft)
    _cal_encoded_tag(draft)

    return draft.freeze()


def validate_field_number(number: int, subject: str) -> None:
    """Reject numbers outside the valid field range or in the reserved block."""
    if not 1 <= number <= MAX_FIELD_NUMBER:
        raise StructureError(
            Rule.NUMBER_OUT_OF_RANGE,
            subject,
            f"field number {number} is outside 1..{MAX_FIELD_NUMBER}",
        )
    if number in RESERVED_NUMBERS:
        raise StructureError(
            Rule.RESERVED_NUMBER,
            subject,
            f"field number {number} is in the reserved range 19000..19999",
        )


def parse_syntax(raw: Syntax | str, subject: str) -> Syntax:
    try:
        return Syntax(raw)
    except ValueError:
        raise OptionError(Rule.UNKNOWN_SYNTAX, subject, f"unknown syntax {raw!r}") from None
