# Copyright (c) 2025 Artoo Corporation
# Licensed under the Business Source License 1.1 (see LICENSE).
# Change Date: 2029-09-08  •  Change License: LGPL-3.0-or-later

import argparse
import importlib
import json

import pytest


SCHEMA_YAML = """
type: object
shape:
  name: {type: string, min: 1}
  tags: {type: array, element: string}
"""


def _get_subparser_names(parser: argparse.ArgumentParser) -> set:
    subparser_actions = [
        action
        for action in parser._actions
        if isinstance(action, argparse._SubParsersAction)
    ]
    if not subparser_actions:
        raise AssertionError("expected at least one subparser action")
    names = set()
    for action in subparser_actions:
        names.update(action.choices.keys())
    return names


def test_build_parser_registers_expected_commands():
    cli_main = importlib.import_module("shapeguard.cli.main")
    parser = cli_main.build_parser()

    assert {"check", "inspect"}.issubset(_get_subparser_names(parser))


def test_run_command_dispatches_parsed_command(write_file, capsys):
    cli_main = importlib.import_module("shapeguard.cli.main")
    schema = write_file("schema.yaml", SCHEMA_YAML)
    args = cli_main.build_parser().parse_args(["inspect", str(schema)])

    assert cli_main.run_command(args) == 0
    assert capsys.readouterr().out.startswith("object (exact)")


def test_check_accepts_valid_documents(write_file, capsys):
    from shapeguard.cli.main import main

    schema = write_file("schema.yaml", SCHEMA_YAML)
    data = write_file("ok.json", json.dumps({"name": "Ada", "tags": []}))

    exit_code = main(["check", str(schema), str(data)])

    assert exit_code == 0
    assert f"{data}: ok" in capsys.readouterr().out


def test_check_reports_failures_pretty(write_file, capsys):
    from shapeguard.cli.main import main

    schema = write_file("schema.yaml", SCHEMA_YAML)
    good = write_file("good.yaml", "name: Ada\ntags: [x]\n")
    bad = write_file("bad.yaml", "name: ''\ntags: [1]\n")

    exit_code = main(["check", str(schema), str(good), str(bad)])

    out = capsys.readouterr().out
    assert exit_code == 1
    assert f"{good}: ok" in out
    assert f"{bad}: 2 issues" in out
    assert "→ at tags[0]" in out


def test_check_tree_format_prints_json(write_file, capsys):
    from shapeguard.cli.main import main

    schema = write_file("schema.yaml", SCHEMA_YAML)
    bad = write_file("bad.json", json.dumps({"name": 3, "tags": []}))

    exit_code = main(["check", "--format", "tree", str(schema), str(bad)])

    out = capsys.readouterr().out
    tree = json.loads(out.split("\n", 1)[1])
    assert exit_code == 1
    assert tree["properties"]["name"]["errors"] == ["Invalid input: expected string, received number"]


def test_inspect_prints_outline(write_file, capsys):
    from shapeguard.cli.main import main

    schema = write_file("schema.yaml", SCHEMA_YAML)

    exit_code = main(["inspect", str(schema)])

    out = capsys.readouterr().out.splitlines()
    assert exit_code == 0
    assert out[0] == "object (exact)"
    assert "  name: string [min]" in out
    assert "  tags: array" in out


def test_bad_schema_file_exits_with_usage_error(write_file, capsys):
    from shapeguard.cli.main import main

    schema = write_file("schema.yaml", "type: strng\n")

    exit_code = main(["inspect", str(schema)])

    assert exit_code == 2
    assert "did you mean 'string'" in capsys.readouterr().err


def test_missing_command_is_rejected():
    from shapeguard.cli.main import build_parser

    with pytest.raises(SystemExit):
        build_parser().parse_args([])
