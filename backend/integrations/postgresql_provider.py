"""
PostgreSQL metadata provider.
Schema reflection goes through the SQLAlchemy inspector; DDL is rebuilt from
the pg_catalog / information_schema views.
"""
import logging
from itertools import groupby
from typing import Any, Optional
from sqlalchemy import text
from sqlalchemy.engine import Connection

from core.db_connector import reflect_schema
from core.sql_literals import BINARY_TYPES, array_literal, render_literal
from integrations.provider import Row, entity_full_name, fetch_rows, quote_with, select_statement
from models.schema import Schema, Table

logger = logging.getLogger(__name__)

QUOTABLE_TYPES = {
    "TEXT", "VARCHAR", "CHARACTER VARYING", "CHAR", "CHARACTER", "BPCHAR", "CITEXT",
    "JSON", "JSONB", "NAME", "UUID", "DATE", "INTERVAL",
    "TIME", "TIME WITH TIME ZONE", "TIME WITHOUT TIME ZONE",
    "TIMESTAMP", "TIMESTAMP WITH TIME ZONE", "TIMESTAMP WITHOUT TIME ZONE",
    "ENUM", "ARRAY", "USER-DEFINED",
}

JSON_TYPES = {"JSON", "JSONB"}

_ENUM_TYPES_SQL = """
    SELECT t.typname, e.enumlabel
    FROM pg_type t
    JOIN pg_enum e ON e.enumtypid = t.oid
    WHERE t.typnamespace = CAST(:schema AS regnamespace)
    ORDER BY t.typname, e.enumsortorder
"""

_FUNCTIONS_SQL = """
    SELECT pg_get_functiondef(p.oid)
    FROM pg_proc p
    WHERE p.pronamespace = CAST(:schema AS regnamespace) AND p.prokind = 'f'
    ORDER BY p.proname
"""

_COLUMNS_SQL = """
    SELECT column_name, udt_name, is_nullable, column_default, is_identity, identity_generation
    FROM information_schema.columns
    WHERE table_schema = :schema AND table_name = :table
    ORDER BY ordinal_position
"""

# Indexes backing a PK/UNIQUE/EXCLUDE constraint are recreated by the constraint itself
_INDEXES_SQL = """
    SELECT i.indexdef
    FROM pg_indexes i
    WHERE i.schemaname = :schema AND i.tablename = :table
      AND NOT EXISTS (
          SELECT 1 FROM pg_constraint c
          WHERE c.conindid = CAST(quote_ident(i.schemaname) || '.' || quote_ident(i.indexname) AS regclass)
            AND c.contype IN ('p', 'u', 'x')
      )
    ORDER BY i.indexname
"""

# Keys first so that self-referencing FKs find their target
_CONSTRAINTS_SQL = """
    SELECT conname, pg_get_constraintdef(oid)
    FROM pg_constraint
    WHERE connamespace = CAST(:schema AS regnamespace) AND conrelid = CAST(:table AS regclass)
      AND contype IN ('p', 'u', 'c', 'x', 'f')
    ORDER BY CASE contype WHEN 'p' THEN 0 WHEN 'u' THEN 1 WHEN 'f' THEN 3 ELSE 2 END, conname
"""

_TRIGGERS_SQL = """
    SELECT trigger_name, action_timing, event_manipulation, action_orientation, action_statement
    FROM information_schema.triggers
    WHERE event_object_schema = :schema AND event_object_table = :table
    ORDER BY action_order
"""


class PostgresProvider:
    name = "postgresql"
    default_schema = "public"
    identifier_quote = '"'
    value_quote = "'"

    def full_name(self, schema_name: str, entity_name: str) -> str:
        return entity_full_name(schema_name, entity_name, self.default_schema, self.identifier_quote)

    def quote_identifier(self, name: str) -> str:
        return quote_with(name, self.identifier_quote)

    def quote_value(self, value: str) -> str:
        return quote_with(value, self.value_quote)

    def is_quotable_type(self, type_name: str) -> bool:
        type_name = (type_name or "").upper()
        return type_name in QUOTABLE_TYPES or type_name.endswith("[]")

    def render_literal(self, value: Any, type_name: str) -> str:
        """bytea as hex escape input, arrays as {..} text; JSON documents stay JSON."""
        if isinstance(value, BINARY_TYPES):
            hex_text = "\\x" + bytes(value).hex()
            return f"{self.quote_value(hex_text)}::bytea"
        if isinstance(value, (list, tuple)) and (type_name or "").upper() not in JSON_TYPES:
            return self.quote_value(array_literal(value))
        return render_literal(value, self.is_quotable_type(type_name), self.value_quote)

    # ── Schema & rows ─────────────────────────────────────────────────────────

    def load_schema(self, conn: Connection, schema_name: str) -> Schema:
        return reflect_schema(conn, schema_name or self.default_schema, self.full_name)

    def get_table(self, schema: Schema, name: str) -> Optional[Table]:
        return next((t for t in schema.tables if t.name == name), None)

    def query_rows(self, conn, schema_name, table_name, row_filter="", limit=None) -> list[Row]:
        sql = select_statement(self.full_name(schema_name or self.default_schema, table_name), row_filter, limit)
        return fetch_rows(conn, sql)

    def query_rows_where_in(self, conn, table_full_name, column_name, value_set) -> list[Row]:
        sql = f"SELECT * FROM {table_full_name} WHERE {self.quote_identifier(column_name)} IN {value_set};"
        return fetch_rows(conn, sql)

    # ── DDL ───────────────────────────────────────────────────────────────────

    def get_schema_defined_types(self, conn, schema_name) -> list[str]:
        rows = conn.execute(text(_ENUM_TYPES_SQL), {"schema": schema_name}).all()
        definitions = []
        for type_name, labels in groupby(rows, key=lambda r: r[0]):
            values = ",\n\t".join(self.quote_value(label) for _, label in labels)
            definitions.append(f"CREATE TYPE {self.full_name(schema_name, type_name)} AS ENUM (\n\t{values}\n);")
        return definitions

    def get_schema_defined_functions(self, conn, schema_name) -> list[str]:
        rows = conn.execute(text(_FUNCTIONS_SQL), {"schema": schema_name})
        return [f"{r[0].rstrip()};" for r in rows]

    def get_table_definition(self, conn, schema_name, table: Table) -> str:
        rows = conn.execute(text(_COLUMNS_SQL), {"schema": schema_name, "table": table.name})
        lines = []
        for name, udt_name, is_nullable, default, is_identity, identity_generation in rows:
            line = f"\t{self.quote_identifier(name)} {udt_name} {'NULL' if is_nullable == 'YES' else 'NOT NULL'}"
            if (is_identity or "NO").upper() == "YES":
                line += f" GENERATED {identity_generation} AS IDENTITY"
            elif default is not None:
                line += f" DEFAULT {default}"
            lines.append(line)
        return f"CREATE TABLE {table.full_name} (\n" + ",\n".join(lines) + "\n);"

    def get_table_indexes(self, conn, schema_name, table: Table) -> list[str]:
        rows = conn.execute(text(_INDEXES_SQL), {"schema": schema_name, "table": table.name})
        return [f"{r[0]};" for r in rows]

    def get_table_constraints(self, conn, schema_name, table: Table) -> list[str]:
        rows = conn.execute(text(_CONSTRAINTS_SQL), {"schema": schema_name, "table": table.full_name})
        return [
            f"ALTER TABLE {table.full_name} ADD CONSTRAINT {self.quote_identifier(name)} {definition};"
            for name, definition in rows
        ]

    def get_table_triggers(self, conn, schema_name, table: Table) -> list[str]:
        rows = conn.execute(text(_TRIGGERS_SQL), {"schema": schema_name, "table": table.name})
        return [
            f"CREATE TRIGGER {self.quote_identifier(name)} {timing} {event} ON {table.full_name} "
            f"FOR EACH {orientation} {action};"
            for name, timing, event, orientation, action in rows
        ]
