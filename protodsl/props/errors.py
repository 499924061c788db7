"""Schema-definition errors raised while deriving properties."""

from enum import StrEnum


class Rule(StrEnum):
    """The schema rule a declaration violated."""

    UNKNOWN_OPTION = "unknown-option"
    UNKNOWN_SYNTAX = "unknown-syntax"
    REQUIRED_IN_PROTO3 = "required-in-proto3"
    DEFAULT_IN_PROTO3 = "default-in-proto3"
    PACKED_EMBEDDED = "packed-embedded"
    PACKED_NOT_REPEATED = "packed-not-repeated"
    REPEATED_ONEOF = "repeated-oneof"
    ENUM_FIRST_NOT_ZERO = "enum-first-not-zero"
    MISSING_TYPE = "missing-type"
    UNKNOWN_TYPE = "unknown-type"
    NUMBER_OUT_OF_RANGE = "number-out-of-range"
    RESERVED_NUMBER = "reserved-number"
    DUPLICATE_NUMBER = "duplicate-number"
    DUPLICATE_NAME = "duplicate-name"
    UNKNOWN_ONEOF = "unknown-oneof"
    INVALID_EXTENSION_RANGE = "invalid-extension-range"
    CONFLICTING_EXTENSION = "conflicting-extension"


class SchemaError(RuntimeError):
    """Raised when a declaration cannot be turned into a valid schema.

    These are fatal to building the offending message; there is no partial
    result.
    """

    def __init__(self, rule: Rule, subject: str, message: str):
        super().__init__(f"{subject}: {message}")
        self.rule = rule
        self.subject = subject


class OptionError(SchemaError):
    """A field or message option is unknown or used in an invalid combination."""


class EnumShapeError(SchemaError):
    """An enum declaration has an invalid shape."""


class StructureError(SchemaError):
    """A declaration is structurally incomplete or inconsistent."""
