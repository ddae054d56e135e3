# Copyright (c) 2025 Artoo Corporation
# Licensed under the Business Source License 1.1 (see LICENSE).
# Change Date: 2029-09-08  •  Change License: LGPL-3.0-or-later

"""``shapeguard`` console script.

    shapeguard check schema.yaml payload.json other.yaml
    shapeguard check --format tree schema.yaml payload.json
    shapeguard inspect schema.yaml
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from typing import List, Optional

from ..config import LOG_LEVEL_ENV
from ..definitions import SUPPORTED_TYPES, load_schema, read_document
from ..exceptions import ConfigurationError
from ..formatting import prettify
from ..schema.nodes import Kind, SchemaNode
from ..validation.engine import validate

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_INVALID = 1
EXIT_USAGE = 2


# ----------------------------------------------------------------------
# Commands
# ----------------------------------------------------------------------


def _check(args: argparse.Namespace) -> int:
    schema = load_schema(args.schema)
    exit_code = EXIT_OK
    for data_path in args.data:
        logger.debug("Validating %s against %s", data_path, args.schema)
        result = validate(schema, read_document(data_path))
        if result.success:
            print(f"{data_path}: ok")
            continue

        exit_code = EXIT_INVALID
        count = len(result.issues)
        print(f"{data_path}: {count} issue{'s' if count != 1 else ''}")
        if args.format == "tree":
            print(json.dumps(result.tree.to_dict(), indent=2, ensure_ascii=False))
        elif args.format == "json":
            print(json.dumps([issue.to_dict() for issue in result.issues], indent=2, ensure_ascii=False, default=str))
        else:
            print(prettify(result.issues, limit=args.limit))
    return exit_code


def render_schema(node: SchemaNode, indent: int = 0) -> List[str]:
    """Return an indented outline of *node* for ``inspect``."""

    pad = "  " * indent
    label = node.kind.value
    if node.kind is Kind.OBJECT:
        label += f" ({node.effective_mode.value})"
    elif node.kind in (Kind.LITERAL, Kind.ENUM):
        label += f" {list(node.values)}"
    elif node.kind is Kind.CUSTOM_FORMAT:
        label += f" <{node.format}>"
    if node.checks:
        label += f" [{', '.join(check.name for check in node.checks)}]"
    if node.description:
        label += f"  # {node.description}"
    lines = [pad + label]

    if node.kind is Kind.OBJECT:
        for key, child in node.shape.items():
            child_lines = render_schema(child, indent + 1)
            child_lines[0] = f"{'  ' * (indent + 1)}{key}: {child_lines[0].lstrip()}"
            lines.extend(child_lines)
        if node.catchall is not None:
            lines.append(f"{'  ' * (indent + 1)}*:")
            lines.extend(render_schema(node.catchall, indent + 2))
    elif node.kind is Kind.RECORD:
        lines.extend(render_schema(node.key_schema, indent + 1))
        lines.extend(render_schema(node.value_schema, indent + 1))
    elif node.kind is Kind.ARRAY:
        lines.extend(render_schema(node.element, indent + 1))
    elif node.kind is Kind.TUPLE:
        for item in node.items:
            lines.extend(render_schema(item, indent + 1))
        if node.rest is not None:
            lines.append(f"{'  ' * (indent + 1)}...:")
            lines.extend(render_schema(node.rest, indent + 2))
    elif node.kind is Kind.UNION:
        for option in node.options:
            lines.extend(render_schema(option, indent + 1))
    elif node.inner is not None:
        lines.extend(render_schema(node.inner, indent + 1))
    return lines


def _inspect(args: argparse.Namespace) -> int:
    schema = load_schema(args.schema)
    print("\n".join(render_schema(schema)))
    return EXIT_OK


# ----------------------------------------------------------------------
# Parser
# ----------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="shapeguard",
        description="Validate YAML / JSON documents against declarative schema definitions.",
        epilog=f"Definition types: {', '.join(SUPPORTED_TYPES)}",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    check = subparsers.add_parser("check", help="Validate documents against a schema definition")
    check.add_argument("schema", help="Schema definition file (.yaml, .yml or .json)")
    check.add_argument("data", nargs="+", help="Documents to validate")
    check.add_argument(
        "--format",
        choices=("pretty", "tree", "json"),
        default="pretty",
        help="Report format for failed documents (default: pretty)",
    )
    check.add_argument("--limit", type=int, default=None, help="Show at most this many issues per document")
    check.set_defaults(func=_check)

    inspect = subparsers.add_parser("inspect", help="Print an outline of a schema definition")
    inspect.add_argument("schema", help="Schema definition file (.yaml, .yml or .json)")
    inspect.set_defaults(func=_inspect)

    return parser


def run_command(args: argparse.Namespace) -> Optional[int]:
    """Dispatch to the handler registered by the chosen subcommand."""

    return args.func(args)


def _configure_logging(verbose: bool) -> None:
    if verbose:
        level = logging.DEBUG
    else:
        level = getattr(logging, os.getenv(LOG_LEVEL_ENV, "WARNING").upper(), logging.WARNING)
        if not isinstance(level, int):
            level = logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)
    try:
        return run_command(args) or EXIT_OK
    except ConfigurationError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_USAGE


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
