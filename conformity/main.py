"""Command-line entrypoints for the conformity validator."""
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import orjson

from conformity.config.options import ValidationOptions, load_options
from conformity.engine.errors import ConformityError, ValidatorError
from conformity.engine.validator import Validator
from conformity.observability.log import configure_logging

DEFAULT_LOGGING_CONFIG = Path("config/logging.yaml")


def _load_document(path: Path) -> Any:
    if not path.exists():
        raise SystemExit(f"File not found: {path}")
    try:
        return orjson.loads(path.read_bytes())
    except orjson.JSONDecodeError as exc:
        raise SystemExit(f"Invalid JSON in {path}: {exc}") from exc


def _parse_assignment(raw: str) -> Dict[str, Any]:
    """Turn ``name=value`` into a single option, decoding JSON literals when possible."""
    name, sep, text = raw.partition("=")
    if not sep or not name:
        raise argparse.ArgumentTypeError(f"expected name=value, got {raw!r}")
    try:
        value = orjson.loads(text)
    except orjson.JSONDecodeError:
        value = text
    return {name.strip(): value}


def _emit(payload: Any) -> None:
    sys.stdout.write(orjson.dumps(payload, option=orjson.OPT_INDENT_2, default=str).decode() + "\n")


def build_arg_parser() -> argparse.ArgumentParser:
    """Create the CLI argument parser."""
    parser = argparse.ArgumentParser(prog="conformity", description="schema-driven object validator")
    parser.add_argument("--logging", type=Path, default=DEFAULT_LOGGING_CONFIG, help="Logging YAML config")
    sub = parser.add_subparsers(dest="command", required=True)

    check = sub.add_parser("validate", help="Validate a JSON document against a JSON schema")
    check.add_argument("schema", type=Path, help="Path to the schema document")
    check.add_argument("data", type=Path, help="Path to the object to validate")
    check.add_argument("--options", type=Path, help="TOML or YAML file with validation options")
    check.add_argument(
        "--set",
        dest="overrides",
        action="append",
        type=_parse_assignment,
        default=[],
        metavar="NAME=VALUE",
        help="Override a single option, e.g. --set exitOnFirstError=true",
    )

    sub.add_parser("formats", help="List registered format names")
    return parser


def run_validate(args: argparse.Namespace) -> int:
    options = load_options(args.options) if args.options else ValidationOptions()
    for override in args.overrides:
        options = options.merged(override)
    checker = Validator(options.model_dump(by_alias=True))
    schema = _load_document(args.schema)
    data = _load_document(args.data)
    try:
        result = checker.validate(data, schema)
    except ValidatorError as exc:
        _emit({"valid": False, "errors": [exc.issue.to_dict()]})
        return 1
    _emit(result.to_dict())
    return 0 if result.valid else 1


def run_formats(_: argparse.Namespace) -> int:
    checker = Validator()
    _emit({"formats": sorted(checker.formats), "extensions": sorted(checker.format_extensions)})
    return 0


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the CLI."""
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    configure_logging(args.logging)

    if args.command == "formats":
        raise SystemExit(run_formats(args))

    try:
        code = run_validate(args)
    except (ConformityError, FileNotFoundError, ValueError, TypeError) as exc:
        raise SystemExit(f"Validation could not run: {exc}") from exc
    raise SystemExit(code)


if __name__ == "__main__":
    main()
