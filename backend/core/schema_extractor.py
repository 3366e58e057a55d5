"""
Schema extractor: replayable DDL for a whole schema.

Output order: user-defined types, functions, then for every table in
dependency order its CREATE TABLE, indexes, triggers and constraints.
"""
import logging
from pathlib import Path
from typing import Optional

from core.db_connector import ConnectionManager
from core.schema_linearizer import linearize
from core.script_assembler import assemble, clear_fragments, write_fragment
from integrations.provider import MetadataProvider

logger = logging.getLogger(__name__)

FRAGMENT_PREFIX = "schema_dump_"
DESTINATION_NAME = "schema_dump"


class SchemaExtractor:
    def __init__(
        self,
        provider: MetadataProvider,
        connections: ConnectionManager,
        schema_name: str = "",
        output_dir: str = ".",
    ):
        self.provider = provider
        self.connections = connections
        self.schema_name = schema_name or provider.default_schema
        self.output_dir = Path(output_dir)
        self.fragments_written = 0
        self.tables: list[str] = []
        self.destination: Optional[Path] = None

    def extract(self) -> bool:
        """
        Write `schema_dump.sql`.

        Raises:
            CircularDependencyError: before any fragment is written.
        """
        self.fragments_written = 0
        self.tables = []
        self.destination = None
        clear_fragments(self.output_dir, FRAGMENT_PREFIX)
        try:
            count = self._write_fragments()
        except Exception:
            clear_fragments(self.output_dir, FRAGMENT_PREFIX)
            raise
        finally:
            self.connections.close()
        self.destination = assemble(
            count, FRAGMENT_PREFIX, DESTINATION_NAME, reversed=False, directory=self.output_dir,
        )
        return True

    def _write_fragments(self) -> int:
        provider, schema_name = self.provider, self.schema_name
        schema = provider.load_schema(self.connections.acquire(), schema_name)
        order = linearize(schema)

        sections: list[list[str]] = [
            provider.get_schema_defined_types(self.connections.acquire(), schema_name),
            provider.get_schema_defined_functions(self.connections.acquire(), schema_name),
        ]
        index = 0
        for statements in sections:
            self._save(index, statements)
            index += 1

        for position in order:
            table = schema.tables[position]
            self.tables.append(table.full_name)
            definition = provider.get_table_definition(self.connections.acquire(), schema_name, table)
            indexes = provider.get_table_indexes(self.connections.acquire(), schema_name, table)
            triggers = provider.get_table_triggers(self.connections.acquire(), schema_name, table)
            constraints = provider.get_table_constraints(self.connections.acquire(), schema_name, table)
            for statements in ([definition], indexes, triggers, constraints):
                self._save(index, statements)
                index += 1
        logger.info("Extracted DDL for %d tables of schema %s", len(order), schema_name)
        return index

    def _save(self, index: int, statements: list[str]) -> None:
        if write_fragment(self.output_dir, FRAGMENT_PREFIX, index, statements):
            self.fragments_written += 1
