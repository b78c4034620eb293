"""
Airtable CLI - Command-line interface over the SDK.

This layer provides the user-facing commands, using the SDK layer for all
operations. It handles:
- Argument parsing
- .env loading for credentials
- TTY detection for pretty vs compact JSON
- Error output as JSON
"""

import argparse
import json
import logging
import sys
from typing import Any

from dotenv import load_dotenv

from airtable_kit.core.errors import AirtableError, InvalidParametersError
from airtable_kit.core.types import Record
from airtable_kit.sdk import Airtable

# =============================================================================
# Output Helpers
# =============================================================================


def is_tty() -> bool:
    """Check if stdout is a TTY (human) or pipe (machine)."""
    return sys.stdout.isatty()


def json_output(data: Any, pretty: bool = False) -> None:
    """Print JSON output."""
    indent = 2 if pretty or is_tty() else None
    print(json.dumps(data, indent=indent, default=str, ensure_ascii=False))


def error_output(error: AirtableError) -> None:
    """Print error and exit."""
    json_output(error.to_dict())
    sys.exit(1)


def read_json_arg(value: str) -> Any:
    """Parse a JSON argument, reading stdin when the value is '-'."""
    raw = sys.stdin.read() if value == "-" else value
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        raise InvalidParametersError(f"Invalid JSON: {e}") from e


# =============================================================================
# CLI Commands
# =============================================================================


def cmd_list(client: Airtable, args: argparse.Namespace) -> None:
    """List records of a table."""
    records = client.list(
        args.table,
        fields=args.field,
        formula=args.formula,
        max_records=args.max_records,
        page_size=args.page_size,
    )
    json_output({"records": [r.to_dict() for r in records]})


def cmd_get(client: Airtable, args: argparse.Namespace) -> None:
    """Get a single record."""
    json_output(client.get(args.table, args.record_id).to_dict())


def cmd_create(client: Airtable, args: argparse.Namespace) -> None:
    """Create one record from an object, or several from an array of objects."""
    data = read_json_arg(args.fields)
    if isinstance(data, dict):
        json_output(client.create(args.table, Record(fields=data)).to_dict())
    elif isinstance(data, list) and all(isinstance(item, dict) for item in data):
        records = client.create_many(args.table, [Record(fields=item) for item in data])
        json_output({"records": [r.to_dict() for r in records]})
    else:
        raise InvalidParametersError("--fields must be a JSON object or an array of objects")


def cmd_update(client: Airtable, args: argparse.Namespace) -> None:
    """Update a record's fields."""
    data = read_json_arg(args.fields)
    if not isinstance(data, dict):
        raise InvalidParametersError("--fields must be a JSON object")
    record = client.update(args.table, Record(fields=data, id=args.record_id), replace=args.replace)
    json_output(record.to_dict())


def cmd_delete(client: Airtable, args: argparse.Namespace) -> None:
    """Delete one or more records."""
    if len(args.record_ids) == 1:
        deleted = [client.delete(args.table, args.record_ids[0])]
    else:
        deleted = client.delete_many(args.table, args.record_ids)
    json_output({"records": [{"id": r.id, "deleted": True} for r in deleted]})


# =============================================================================
# Main CLI
# =============================================================================


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="airtable",
        description="Airtable CLI - Manage records of an Airtable base",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Credentials are read from AIRTABLE_API_KEY and AIRTABLE_BASE_ID
(a .env file in the working directory is loaded first).

Examples:
  airtable list Tasks --field Name --field Status --formula "{Status} = 'Open'"
  airtable get Tasks recXXXXXXXXXXXXXX
  airtable create Tasks --fields '{"Name": "Write docs"}'
  airtable update Tasks recXXXXXXXXXXXXXX --fields '{"Status": "Done"}'
  airtable delete Tasks recXXXXXXXXXXXXXX recYYYYYYYYYYYYYY
""",
    )
    parser.add_argument("--base", "-b", help="Base ID (overrides AIRTABLE_BASE_ID)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log HTTP requests to stderr")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    p_list = subparsers.add_parser("list", help="List records")
    p_list.add_argument("table", help="Table name or ID")
    p_list.add_argument("--field", "-f", action="append", help="Field to include (repeatable)")
    p_list.add_argument("--formula", help="filterByFormula expression")
    p_list.add_argument("--max-records", "-n", type=int, default=100, help="Maximum records returned")
    p_list.add_argument("--page-size", type=int, default=100, help="Records per request (max 100)")
    p_list.set_defaults(func=cmd_list)

    p_get = subparsers.add_parser("get", help="Get a record")
    p_get.add_argument("table", help="Table name or ID")
    p_get.add_argument("record_id", help="Record ID")
    p_get.set_defaults(func=cmd_get)

    p_create = subparsers.add_parser("create", help="Create records")
    p_create.add_argument("table", help="Table name or ID")
    p_create.add_argument(
        "--fields",
        "-f",
        required=True,
        help="JSON object of field values, or array of objects for a batch (or - for stdin)",
    )
    p_create.set_defaults(func=cmd_create)

    p_update = subparsers.add_parser("update", help="Update a record")
    p_update.add_argument("table", help="Table name or ID")
    p_update.add_argument("record_id", help="Record ID")
    p_update.add_argument("--fields", "-f", required=True, help="JSON object of field values (or - for stdin)")
    p_update.add_argument(
        "--replace",
        action="store_true",
        help="Replace the entire record, clearing fields not given",
    )
    p_update.set_defaults(func=cmd_update)

    p_delete = subparsers.add_parser("delete", help="Delete records")
    p_delete.add_argument("table", help="Table name or ID")
    p_delete.add_argument("record_ids", nargs="+", help="Record IDs")
    p_delete.set_defaults(func=cmd_delete)

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    load_dotenv()

    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(0)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    try:
        client = Airtable(base_id=args.base)
        args.func(client, args)
    except AirtableError as e:
        error_output(e)


if __name__ == "__main__":
    main()
