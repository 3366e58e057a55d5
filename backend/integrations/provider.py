"""
Metadata provider interface and registry.

A provider knows one database engine: how to reflect a schema, fetch rows,
quote identifiers and values, classify string-like types, and render DDL.
The extraction engines only talk to this interface.
"""
from typing import Any, Optional, Protocol

from sqlalchemy.engine import Connection

from models.schema import Schema, Table

Row = tuple[Any, ...]


class MetadataProvider(Protocol):
    name: str
    default_schema: str
    identifier_quote: str
    value_quote: str

    def full_name(self, schema_name: str, entity_name: str) -> str: ...

    def quote_identifier(self, name: str) -> str: ...

    def quote_value(self, value: str) -> str: ...

    def is_quotable_type(self, type_name: str) -> bool: ...

    def render_literal(self, value: Any, type_name: str) -> str: ...

    def load_schema(self, conn: Connection, schema_name: str) -> Schema: ...

    def get_table(self, schema: Schema, name: str) -> Optional[Table]: ...

    def query_rows(
        self, conn: Connection, schema_name: str, table_name: str,
        row_filter: str = "", limit: Optional[int] = None,
    ) -> list[Row]: ...

    def query_rows_where_in(
        self, conn: Connection, table_full_name: str, column_name: str, value_set: str,
    ) -> list[Row]: ...

    def get_schema_defined_types(self, conn: Connection, schema_name: str) -> list[str]: ...

    def get_schema_defined_functions(self, conn: Connection, schema_name: str) -> list[str]: ...

    def get_table_definition(self, conn: Connection, schema_name: str, table: Table) -> str: ...

    def get_table_indexes(self, conn: Connection, schema_name: str, table: Table) -> list[str]: ...

    def get_table_constraints(self, conn: Connection, schema_name: str, table: Table) -> list[str]: ...

    def get_table_triggers(self, conn: Connection, schema_name: str, table: Table) -> list[str]: ...


def needs_quoting(identifier: str) -> bool:
    """Identifiers with whitespace or upper-case letters only survive quoted."""
    return any(ch.isspace() or ch.isupper() for ch in identifier)


def quote_with(identifier: str, quote: str) -> str:
    return f"{quote}{identifier.replace(quote, quote * 2)}{quote}"


def entity_full_name(schema_name: str, entity_name: str, default_schema: str, quote: str = '"') -> str:
    """`schema.entity`, dropping the default schema and quoting where required."""
    parts = []
    if schema_name and schema_name != default_schema:
        parts.append(quote_with(schema_name, quote) if needs_quoting(schema_name) else schema_name)
    parts.append(quote_with(entity_name, quote) if needs_quoting(entity_name) else entity_name)
    return ".".join(parts)


def fetch_rows(conn: Connection, sql: str) -> list[Row]:
    """Run literal SQL (no bind parameters) and return plain tuples."""
    result = conn.execution_options(no_parameters=True).exec_driver_sql(sql)
    return [tuple(row) for row in result]


def select_statement(full_name: str, row_filter: str = "", limit: Optional[int] = None) -> str:
    sql = f"SELECT * FROM {full_name}"
    if row_filter and row_filter.strip():
        sql += f" WHERE {row_filter}"
    if limit is not None:
        sql += f" LIMIT {int(limit)}"
    return sql + ";"


class ProviderRegistry:
    """Maps a database kind (``sqlite``, ``postgresql``) to its provider."""

    def __init__(self, providers: dict[str, MetadataProvider]):
        self._providers = dict(providers)

    @property
    def supported(self) -> list[str]:
        return sorted(self._providers)

    def get(self, db_type: str) -> MetadataProvider:
        try:
            return self._providers[db_type]
        except KeyError:
            raise ValueError(
                f"Unsupported database '{db_type}'. Supported: {', '.join(self.supported)}"
            ) from None
