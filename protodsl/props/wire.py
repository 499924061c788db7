"""Wire type resolution and tag pre-computation."""

import re

from .errors import Rule, StructureError
from .types import TypeRef, WireType

WIRE_TYPES: dict[str, WireType] = {
    "int32": WireType.VARINT,
    "int64": WireType.VARINT,
    "uint32": WireType.VARINT,
    "uint64": WireType.VARINT,
    "sint32": WireType.VARINT,
    "sint64": WireType.VARINT,
    "bool": WireType.VARINT,
    "fixed64": WireType.FIXED64,
    "sfixed64": WireType.FIXED64,
    "double": WireType.FIXED64,
    "string": WireType.LENGTH_DELIMITED,
    "bytes": WireType.LENGTH_DELIMITED,
    "fixed32": WireType.FIXED32,
    "sfixed32": WireType.FIXED32,
    "float": WireType.FIXED32,
}

# Message names are capitalized; scalar tags never are.
_QUALIFIED_NAME = re.compile(r"^\.?(?:[A-Za-z_]\w*\.)*[A-Z]\w*$")


def is_qualified_ref(t: object) -> bool:
    """Check if a type tag names another message definition."""
    return isinstance(t, str) and t not in WIRE_TYPES and bool(_QUALIFIED_NAME.match(t))


def wire_type(t: str | TypeRef) -> WireType:
    """Resolve the wire type for a scalar tag, enum or message reference."""
    if isinstance(t, TypeRef):
        return WireType.VARINT if t.kind == "enum" else WireType.LENGTH_DELIMITED

    if t in WIRE_TYPES:
        return WIRE_TYPES[t]

    if is_qualified_ref(t):
        return WireType.LENGTH_DELIMITED

    raise StructureError(Rule.UNKNOWN_TYPE, str(t), f"unknown type {t!r}")


VARINT_2SC_MASK = (1 << 64) - 1


def encode_varint(number: int) -> bytes:
    """Encode an integer as a base-128 varint.

    Negative numbers are written as 64-bit two's complement, so they always
    take ten bytes.
    """
    number &= VARINT_2SC_MASK

    buf = bytearray()
    while True:
        towrite = number & 0x7F
        number >>= 7
        if number:
            buf.append(towrite | 0x80)
        else:
            buf.append(towrite)
            return bytes(buf)


def encode_tag(number: int, wire: WireType | int) -> bytes:
    """Encode a field key: (field number << 3) | wire type."""
    return encode_varint((number << 3) | int(wire))
