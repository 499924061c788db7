"""Name/number accessors for enum definitions."""

from collections.abc import Iterable
from dataclasses import dataclass
from types import MappingProxyType

from .types import FieldDeclaration


class EnumLookupError(KeyError):
    """Raised when an enum name is looked up that was never declared."""


@dataclass(frozen=True)
class EnumAccessors:
    """Lookup tables for one enum.

    number_to_name holds the first declared name for each number, so the
    numeric lookup stays single-valued when values are aliased.
    """

    name: str
    name_to_number: MappingProxyType[str, int]
    number_to_name: MappingProxyType[int, str]
    reverse_mapping: MappingProxyType[int | str, str]

    def value(self, key: str | int) -> int:
        """Return the number for a name; integers pass through unchanged."""
        if isinstance(key, str):
            if key in self.name_to_number:
                return self.name_to_number[key]
            raise EnumLookupError(f"{self.name} has no value named {key!r}")
        return key

    def key(self, number: int | str) -> int | str:
        """Return the canonical name for a number; unknown integers pass through."""
        if number in self.reverse_mapping:
            return self.reverse_mapping[number]
        if isinstance(number, int):
            return number
        raise EnumLookupError(f"{self.name} has no value named {number!r}")

    def mapping(self) -> dict[str, int]:
        return dict(self.name_to_number)


def build_enum_accessors(name: str, fields: Iterable[FieldDeclaration]) -> EnumAccessors:
    """Derive the accessor tables from an enum's ordered value declarations."""
    name_to_number: dict[str, int] = {}
    number_to_name: dict[int, str] = {}
    reverse: dict[int | str, str] = {}

    for decl in fields:
        name_to_number[decl.name] = decl.number
        number_to_name.setdefault(decl.number, decl.name)
        reverse.setdefault(decl.number, number_to_name[decl.number])
        reverse[decl.name] = decl.name

    return EnumAccessors(
        name=name,
        name_to_number=MappingProxyType(name_to_number),
        number_to_name=MappingProxyType(number_to_name),
        reverse_mapping=MappingProxyType(reverse),
    )
