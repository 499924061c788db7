"""Tests for message property building."""

import pytest

from protodsl.props.errors import EnumShapeError, OptionError, Rule, StructureError
from protodsl.props.messages import build_message_props
from protodsl.props.types import (
    FieldDeclaration,
    MessageDeclaration,
    OneofDeclaration,
    Syntax,
    TypeRef,
)


def person(**kwargs):
    return MessageDeclaration(
        name="Person",
        fields=[
            FieldDeclaration("name", 3, {"type": "string"}),
            FieldDeclaration("id", 1, {"type": "int32"}),
            FieldDeclaration("tags", 2, {"type": "int32", "repeated": True}),
            FieldDeclaration("address", 4, {"type": "pkg.Address"}),
            FieldDeclaration("friends", 5, {"type": "pkg.Person", "repeated": True}),
            FieldDeclaration(
                "attrs", 6, {"type": "Person.AttrsEntry", "map": True, "repeated": True}
            ),
        ],
        options={"syntax": "proto3"},
        **kwargs,
    )


def describe_build_message_props():
    def builds_field_tables(expect):
        props = build_message_props(person())

        expect(props.name) == "Person"
        expect(props.syntax) == Syntax.PROTO3
        expect(props.ordered_numbers) == (1, 2, 3, 4, 5, 6)
        expect(dict(props.name_to_number)) == {
            "name": 3,
            "id": 1,
            "tags": 2,
            "address": 4,
            "friends": 5,
            "attrs": 6,
        }
        expect(dict(props.tags_map)) == {1: 1, 2: 2, 3: 3, 4: 4, 5: 5, 6: 6}
        expect(props.field_by_name("tags").packed) == True

    def collects_repeated_and_embedded_names(expect):
        props = build_message_props(person())

        expect(props.repeated_field_names) == frozenset(["tags", "friends"])
        expect(props.embedded_field_names) == frozenset(["address", "friends"])

    def defaults_to_proto2(expect):
        decl = MessageDeclaration("Legacy", [FieldDeclaration("id", 1, {"type": "int32"})])
        props = build_message_props(decl)

        expect(props.syntax) == Syntax.PROTO2
        expect(props.enum) == False
        expect(props.map) == False

    def reads_map_entry_option(expect):
        decl = MessageDeclaration(
            "AttrsEntry",
            [
                FieldDeclaration("key", 1, {"type": "string"}),
                FieldDeclaration("value", 2, {"type": "string"}),
            ],
            options={"syntax": "proto3", "map": True},
        )

        expect(build_message_props(decl).map) == True

    def rejects_unknown_message_option(expect):
        decl = MessageDeclaration("Bad", options={"packed": True})
        with pytest.raises(OptionError) as exinfo:
            build_message_props(decl)

        expect(exinfo.value.rule) == Rule.UNKNOWN_OPTION

    def rejects_unknown_syntax(expect):
        decl = MessageDeclaration("Bad", options={"syntax": "proto4"})
        with pytest.raises(OptionError) as exinfo:
            build_message_props(decl)

        expect(exinfo.value.rule) == Rule.UNKNOWN_SYNTAX

    def props_are_read_only(expect):
        props = build_message_props(person())

        with pytest.raises(TypeError):
            props.fields[99] = props.fields[1]


def describe_field_numbers():
    def rejects_duplicate_numbers(expect):
        decl = MessageDeclaration(
            "Dup",
            [
                FieldDeclaration("a", 1, {"type": "int32"}),
                FieldDeclaration("b", 1, {"type": "string"}),
            ],
        )
        with pytest.raises(StructureError) as exinfo:
            build_message_props(decl)

        expect(exinfo.value.rule) == Rule.DUPLICATE_NUMBER
        expect(exinfo.value.subject) == "Dup.b"

    def rejects_duplicate_names(expect):
        decl = MessageDeclaration(
            "Dup",
            [
                FieldDeclaration("a", 1, {"type": "int32"}),
                FieldDeclaration("a", 2, {"type": "int32"}),
            ],
        )
        with pytest.raises(StructureError) as exinfo:
            build_message_props(decl)

        expect(exinfo.value.rule) == Rule.DUPLICATE_NAME

    def rejects_reserved_numbers(expect):
        decl = MessageDeclaration("R", [FieldDeclaration("a", 19001, {"type": "int32"})])
        with pytest.raises(StructureError) as exinfo:
            build_message_props(decl)

        expect(exinfo.value.rule) == Rule.RESERVED_NUMBER

    def rejects_zero(expect):
        decl = MessageDeclaration("R", [FieldDeclaration("a", 0, {"type": "int32"})])
        with pytest.raises(StructureError) as exinfo:
            build_message_props(decl)

        expect(exinfo.value.rule) == Rule.NUMBER_OUT_OF_RANGE


def describe_oneofs():
    def keeps_declaration_order(expect):
        decl = MessageDeclaration(
            "Contact",
            [
                FieldDeclaration("email", 1, {"type": "string", "oneof": 1}),
                FieldDeclaration("phone", 2, {"type": "string", "oneof": 0}),
            ],
            oneofs=[OneofDeclaration("primary", 1), OneofDeclaration("backup", 0)],
            options={"syntax": "proto3"},
        )
        props = build_message_props(decl)

        expect(props.oneofs) == (("primary", 1), ("backup", 0))
        expect(props.fields[1].oneof) == 1

    def rejects_undeclared_oneof_index(expect):
        decl = MessageDeclaration(
            "Contact",
            [FieldDeclaration("email", 1, {"type": "string", "oneof": 2})],
            oneofs=[OneofDeclaration("primary", 0)],
        )
        with pytest.raises(StructureError) as exinfo:
            build_message_props(decl)

        expect(exinfo.value.rule) == Rule.UNKNOWN_ONEOF


def describe_extension_ranges():
    def absent_by_default(expect):
        props = build_message_props(person())

        expect(props.extension_ranges) == None
        expect(props.accepts_extensions) == False

    def kept_verbatim(expect):
        props = build_message_props(person(extensions=[[100, 199], [500, 536870911]]))

        expect(props.extension_ranges) == ((100, 199), (500, 536870911))
        expect(props.in_extension_range(150)) == True
        expect(props.in_extension_range(200)) == False

    def empty_ranges_still_accept_extensions(expect):
        props = build_message_props(person(extensions=[]))

        expect(props.extension_ranges) == ()
        expect(props.accepts_extensions) == True

    def rejects_inverted_range(expect):
        with pytest.raises(StructureError) as exinfo:
            build_message_props(person(extensions=[[200, 100]]))

        expect(exinfo.value.rule) == Rule.INVALID_EXTENSION_RANGE


def describe_enums():
    def _enum_decl(syntax, first=0):
        return MessageDeclaration(
            "Color",
            [FieldDeclaration("RED", first), FieldDeclaration("GREEN", first + 1)],
            options={"syntax": syntax, "enum": True},
        )

    def builds_enum_values(expect):
        props = build_message_props(_enum_decl("proto3"))

        expect(props.enum) == True
        expect(props.ordered_numbers) == (0, 1)
        expect(props.fields[0].type) == "int32"

    def rejects_proto3_enum_not_starting_at_zero(expect):
        with pytest.raises(EnumShapeError) as exinfo:
            build_message_props(_enum_decl("proto3", first=1))

        expect(exinfo.value.rule) == Rule.ENUM_FIRST_NOT_ZERO

    def allows_proto2_enum_not_starting_at_zero(expect):
        props = build_message_props(_enum_decl("proto2", first=1))

        expect(props.ordered_numbers) == (1, 2)

    def allows_negative_values(expect):
        decl = MessageDeclaration(
            "Signed",
            [FieldDeclaration("ZERO", 0), FieldDeclaration("MINUS", -1)],
            options={"syntax": "proto3", "enum": True},
        )

        expect(build_message_props(decl).ordered_numbers) == (-1, 0)

    def first_declaration_owns_aliased_number(expect):
        decl = MessageDeclaration(
            "Status",
            [
                FieldDeclaration("UNKNOWN", 0),
                FieldDeclaration("STARTED", 1),
                FieldDeclaration("RUNNING", 1),
            ],
            options={"syntax": "proto3", "enum": True},
        )
        props = build_message_props(decl)

        expect(props.fields[1].name) == "STARTED"
        expect(props.name_to_number["RUNNING"]) == 1

    def wraps_enum_references_in_messages(expect):
        decl = MessageDeclaration(
            "Paint",
            [FieldDeclaration("color", 1, {"type": "Color", "enum": True})],
            options={"syntax": "proto3"},
        )

        expect(build_message_props(decl).fields[1].type) == TypeRef("enum", "Color")
