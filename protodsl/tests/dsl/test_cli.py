"""Tests for CLI interface."""

import json
import os

from click.testing import CliRunner

from protodsl.dsl.cli import cli

FILE_DIR = os.path.dirname(os.path.realpath(__file__))


def describe_check_command():
    def accepts_valid_file(expect):
        runner = CliRunner()
        result = runner.invoke(cli, ["check", "-i", f"{FILE_DIR}/person.pdsl"])

        expect(result.exit_code) == 0
        expect(result.output).includes("ok: 4 definitions")

    def reports_violated_rule(expect):
        runner = CliRunner()
        result = runner.invoke(cli, ["check", "-i", f"{FILE_DIR}/invalid.pdsl"])

        expect(result.exit_code) == 1
        expect(result.output).includes("required-in-proto3")
        expect(result.output).includes("Bad.id")

    def reports_parse_errors(expect):
        runner = CliRunner()
        with runner.isolated_filesystem():
            with open("broken.pdsl", "w", encoding="utf-8") as f:
                f.write("message {")
            result = runner.invoke(cli, ["check", "-i", "broken.pdsl"])

        expect(result.exit_code) == 1
        expect(result.output).includes("Parse error")

    def accepts_verbose_flag(expect):
        runner = CliRunner()
        result = runner.invoke(cli, ["-v", "check", "-i", f"{FILE_DIR}/person.json"])

        expect(result.exit_code) == 0


def describe_info_command():
    def prints_tables(expect):
        runner = CliRunner()
        result = runner.invoke(cli, ["info", "-i", f"{FILE_DIR}/person.pdsl"])

        expect(result.exit_code) == 0
        expect(result.output).includes("Person")
        expect(result.output).includes("Extensions")
        expect(result.output).includes("nickname")

    def prints_json(expect):
        runner = CliRunner()
        result = runner.invoke(cli, ["info", "-i", f"{FILE_DIR}/person.pdsl", "--json"])

        expect(result.exit_code) == 0
        data = json.loads(result.output)
        tags = data["messages"]["Person"]["fields"][2]
        expect(tags["name"]) == "tags"
        expect(tags["packed"]) == True
        expect(tags["encoded_tag"]) == "1a"
        expect(tags["label"]) == "repeated"
        expect(tags["default"]) == []
        expect(data["messages"]["Legacy"]["extension_ranges"]) == [[100, 199], [1000, 2000]]
        expect(data["extensions"][0]["name"]) == "nickname"
        expect(data["extensions"][0]["encoded_tag"]) == "a206"
