"""SQLite metadata provider. DDL comes straight from sqlite_master."""
import logging
from typing import Any, Optional
from sqlalchemy import text
from sqlalchemy.engine import Connection

from core.db_connector import reflect_schema
from core.sql_literals import render_literal
from integrations.provider import Row, entity_full_name, fetch_rows, quote_with, select_statement
from models.schema import Schema, Table

logger = logging.getLogger(__name__)

# Type names with TEXT affinity contain one of these
_TEXT_AFFINITY = ("CHAR", "CLOB", "TEXT")
_QUOTABLE_TYPES = {"DATE", "DATETIME", "TIME", "TIMESTAMP", "JSON", "UUID", "ENUM"}


class SqliteProvider:
    name = "sqlite"
    default_schema = "main"
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
        return type_name in _QUOTABLE_TYPES or any(k in type_name for k in _TEXT_AFFINITY)

    def render_literal(self, value: Any, type_name: str) -> str:
        return render_literal(value, self.is_quotable_type(type_name), self.value_quote)

    # ── Schema & rows ─────────────────────────────────────────────────────────

    def load_schema(self, conn: Connection, schema_name: str) -> Schema:
        return reflect_schema(conn, schema_name or self.default_schema, self.full_name)

    def get_table(self, schema: Schema, name: str) -> Optional[Table]:
        return next((t for t in schema.tables if t.name == name), None)

    def query_rows(self, conn, schema_name, table_name, row_filter="", limit=None) -> list[Row]:
        sql = select_statement(self.full_name(schema_name, table_name), row_filter, limit)
        return fetch_rows(conn, sql)

    def query_rows_where_in(self, conn, table_full_name, column_name, value_set) -> list[Row]:
        sql = f"SELECT * FROM {table_full_name} WHERE {self.quote_identifier(column_name)} IN {value_set};"
        return fetch_rows(conn, sql)

    # ── DDL ───────────────────────────────────────────────────────────────────

    def _master(self, schema_name: str) -> str:
        return f"{self.quote_identifier(schema_name or self.default_schema)}.sqlite_master"

    def _master_sql(self, conn, schema_name: str, kind: str, table: Table) -> list[str]:
        rows = conn.execute(
            text(
                f"SELECT sql FROM {self._master(schema_name)} "
                "WHERE type = :kind AND tbl_name = :table AND sql IS NOT NULL ORDER BY name"
            ),
            {"kind": kind, "table": table.name},
        )
        return [f"{r[0]};" for r in rows]

    def get_schema_defined_types(self, conn, schema_name) -> list[str]:
        return []   # SQLite has no user-defined types

    def get_schema_defined_functions(self, conn, schema_name) -> list[str]:
        return []   # functions are registered per connection, not stored

    def get_table_definition(self, conn, schema_name, table: Table) -> str:
        definitions = self._master_sql(conn, schema_name, "table", table)
        return definitions[0] if definitions else ""

    def get_table_indexes(self, conn, schema_name, table: Table) -> list[str]:
        return self._master_sql(conn, schema_name, "index", table)

    def get_table_constraints(self, conn, schema_name, table: Table) -> list[str]:
        return []   # constraints are part of CREATE TABLE

    def get_table_triggers(self, conn, schema_name, table: Table) -> list[str]:
        return self._master_sql(conn, schema_name, "trigger", table)
