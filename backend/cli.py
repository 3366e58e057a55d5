"""
Command-line interface.

    sql-data-extractor extract-rows --db postgresql --connection URL --table orders --where "id < 10"
    sql-data-extractor extract-schema --db sqlite --connection sqlite:///demo.db
"""
import argparse
import logging
import sys
from typing import Optional

from config import settings
from core.db_connector import ConnectionManager
from core.exceptions import ExtractionError
from core.row_extractor import RowExtractor
from core.schema_extractor import SchemaExtractor
from integrations import ProviderRegistry, build_provider_registry
from models.connection import ConnectionRequest


def _add_connection_options(parser: argparse.ArgumentParser, supported: list[str], schema_help: str) -> None:
    parser.add_argument("--db", choices=supported, default="postgresql", help="The type of SQL database.")
    parser.add_argument("--connection", required=True, help="The database connection URL (SQLAlchemy format).")
    parser.add_argument("--schema", default="", help=schema_help)
    parser.add_argument("--output-dir", default=settings.OUTPUT_DIR, help="Directory the SQL script is written to.")


def build_parser(supported: list[str]) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sql-data-extractor",
        description="An application for extracting data from SQL-based databases.",
    )
    parser.add_argument("--log-level", default=settings.LOG_LEVEL, help="Logging level (DEBUG, INFO, ...).")
    commands = parser.add_subparsers(dest="command", required=True)

    rows = commands.add_parser(
        "extract-rows", help="Extracts rows from a table whilst preserving referential integrity."
    )
    _add_connection_options(rows, supported, "The database schema containing the table.")
    rows.add_argument("--table", required=True, help="The table in the schema to fetch the initial rows from.")
    rows.add_argument("--where", default="", help="The table's row filtering expression.")
    rows.add_argument(
        "--limit", type=int, default=None,
        help="The maximum number of rows to fetch from the table. Leave this unset to have no limit.",
    )

    schema = commands.add_parser(
        "extract-schema",
        help="Extracts user-defined types, functions, tables, indices, and constraints from a schema.",
    )
    _add_connection_options(schema, supported, "The database schema to extract.")
    return parser


def run(args: argparse.Namespace, registry: ProviderRegistry) -> bool:
    provider = registry.get(args.db)
    connections = ConnectionManager(ConnectionRequest(db_type=args.db, connection_url=args.connection))

    if args.command == "extract-rows":
        extractor = RowExtractor(provider, connections, args.schema, args.output_dir)
        ok = extractor.extract(args.table, args.where, args.limit)
        if ok:
            print(f"Wrote {sum(extractor.row_counts.values())} rows from "
                  f"{len(extractor.row_counts)} tables to {extractor.destination}")
        return ok

    extractor = SchemaExtractor(provider, connections, args.schema, args.output_dir)
    ok = extractor.extract()
    print(f"Wrote DDL for {len(extractor.tables)} tables to {extractor.destination}")
    return ok


def main(argv: Optional[list[str]] = None) -> int:
    registry = build_provider_registry()
    args = build_parser(registry.supported).parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
    )

    try:
        ok = run(args, registry)
    except ExtractionError as e:
        print(f"ERROR: {e.message}", file=sys.stderr)
        return 1
    if not ok:
        print(f"ERROR: {args.command} failed; see the log for details.", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
