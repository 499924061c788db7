"""Command-line interface for checking and inspecting declarations."""

from __future__ import annotations

import json
import logging
import sys
from typing import Any

import click
from lark.exceptions import LarkError
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from protodsl.dsl.builder import Schema, load
from protodsl.props.defaults import default_value
from protodsl.props.errors import SchemaError
from protodsl.props.types import FieldProps, MessageProps, TypeRef

_LOG = logging.getLogger(__name__)


@click.group()
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """Protocol Buffers schema property tool."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(show_time=False, show_path=False)],
        )


def _load_or_exit(input_file: str) -> Schema:
    try:
        return load(input_file)
    except SchemaError as e:
        click.echo(f"Schema error [{e.rule}]: {e}")
        sys.exit(1)
    except LarkError as e:
        click.echo(f"Parse error: {e}")
        sys.exit(1)


@cli.command()
@click.option("--input", "-i", "input_file", required=True, help="Declaration file")
def check(input_file: str) -> None:
    """Build every declaration and report the first violated rule."""
    schema = _load_or_exit(input_file)
    _LOG.debug("Checked %s", input_file)
    click.echo(f"ok: {len(schema.messages)} definitions")


@cli.command()
@click.option("--input", "-i", "input_file", required=True, help="Declaration file")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
def info(input_file: str, output_json: bool) -> None:
    """Display derived field properties."""
    schema = _load_or_exit(input_file)

    if output_json:
        _output_json(schema)
    else:
        _output_plain(schema)


def _format_type(t: str | TypeRef) -> str:
    if isinstance(t, TypeRef):
        return f"{t.kind}:{t.target}"
    return t


def _field_to_dict(schema: Schema, message: MessageProps, props: FieldProps) -> dict[str, Any]:
    default = default_value(message.syntax, props, schema.enums)
    if isinstance(default, bytes):
        default = default.hex()

    return {
        "number": props.number,
        "name": props.name,
        "json_name": props.json_name,
        "type": _format_type(props.type),
        "wire_type": props.wire_type.name.lower(),
        "label": props.label.value,
        "map": props.map,
        "embedded": props.embedded,
        "packed": props.packed,
        "deprecated": props.deprecated,
        "oneof": props.oneof,
        "encoded_tag": props.encoded_tag.hex(),
        "default": default,
    }


def _output_json(schema: Schema) -> None:
    """Output derived properties as JSON."""
    data: dict = {"messages": {}, "extensions": []}

    for name, message in schema.messages.items():
        data["messages"][name] = {
            "syntax": message.syntax.value,
            "enum": message.enum,
            "map": message.map,
            "oneofs": [list(oneof) for oneof in message.oneofs],
            "extension_ranges": (
                [list(r) for r in message.extension_ranges]
                if message.extension_ranges is not None
                else None
            ),
            "fields": [
                _field_to_dict(schema, message, message.fields[number])
                for number in message.ordered_numbers
            ],
        }

    if schema.extensions:
        for (extendee, number), ext in sorted(schema.extensions.entries.items()):
            data["extensions"].append(
                {
                    "extendee": extendee,
                    "number": number,
                    "name": ext.field_props.name,
                    "type": _format_type(ext.field_props.type),
                    "encoded_tag": ext.field_props.encoded_tag.hex(),
                }
            )

    print(json.dumps(data, indent=2))


def _output_plain(schema: Schema) -> None:
    """Output derived properties using rich tables."""
    console = Console()

    for name, message in schema.messages.items():
        kind = "enum" if message.enum else "map entry" if message.map else "message"
        console.print(f"[bold cyan]{name}[/bold cyan] [dim]({kind}, {message.syntax})[/dim]")

        table = Table(show_header=True, box=None, padding=(0, 2, 0, 0))
        table.add_column("#", style="green", justify="right")
        table.add_column("Name", style="white")
        table.add_column("Type", style="yellow")
        table.add_column("Label", style="dim")
        table.add_column("Wire", style="dim")
        table.add_column("Packed", style="dim")
        table.add_column("Tag", style="magenta")
        table.add_column("Default", style="white")

        for number in message.ordered_numbers:
            row = _field_to_dict(schema, message, message.fields[number])
            table.add_row(
                str(row["number"]),
                row["name"],
                row["type"],
                row["label"],
                row["wire_type"],
                "yes" if row["packed"] else "",
                row["encoded_tag"],
                repr(row["default"]),
            )

        console.print(table)
        if message.oneofs:
            oneofs = ", ".join(f"{oneof} ({index})" for oneof, index in message.oneofs)
            console.print(f"  [dim]oneofs:[/dim] {oneofs}")
        if message.extension_ranges is not None:
            ranges = ", ".join(f"{start}..{end}" for start, end in message.extension_ranges)
            console.print(f"  [dim]extensions:[/dim] {ranges or 'any'}")
        console.print()

    if schema.extensions:
        console.print("[bold cyan]Extensions[/bold cyan]")
        ext_table = Table(show_header=True, box=None, padding=(0, 2, 0, 0))
        ext_table.add_column("Extendee", style="white")
        ext_table.add_column("#", style="green", justify="right")
        ext_table.add_column("Name", style="white")
        ext_table.add_column("Type", style="yellow")
        ext_table.add_column("Tag", style="magenta")

        for (extendee, number), ext in sorted(schema.extensions.entries.items()):
            ext_table.add_row(
                extendee,
                str(number),
                ext.field_props.name,
                _format_type(ext.field_props.type),
                ext.field_props.encoded_tag.hex(),
            )

        console.print(ext_table)


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
