"""
Row extractor: referentially-consistent row subsets.

Starting from a filtered root table, every foreign-key column of every
emitted row is followed until no new rows turn up, so each emitted row's
FK targets are emitted too. Each batch becomes one INSERT fragment; the
fragments are joined into `row_dump.sql` at the end.
"""
import logging
from collections import deque
from pathlib import Path
from typing import Any, Iterable, Optional, Sequence

from core.db_connector import ConnectionManager
from core.script_assembler import assemble, clear_fragments, write_fragment
from core.sql_literals import render_insert, render_value_set, unique_values
from integrations.provider import MetadataProvider
from models.extraction import ForeignKeyWorkItem
from models.schema import Table

logger = logging.getLogger(__name__)

FRAGMENT_PREFIX = "row_dump_"
DESTINATION_NAME = "row_dump"

Row = tuple[Any, ...]


def foreign_work_items(table: Table, rows: Sequence[Row]) -> list[ForeignKeyWorkItem]:
    """
    One work item per FK column of `table`, carrying that column's values
    from `rows`. Self-references come first, the rest by target table name.
    """
    items = [
        ForeignKeyWorkItem(
            source_table=table.full_name,
            source_column=column.name,
            target_table=column.foreign_table_name,
            target_column=column.foreign_column_name,
            values=unique_values(row[position] for row in rows),
        )
        for position, column in table.foreign_columns
    ]
    items.sort(key=lambda item: (not item.is_self_reference, item.target_table))
    return items


def record_new_rows(ledger: dict[str, list[Row]], table_full_name: str, rows: Iterable[Row], position: int) -> list[Row]:
    """
    Append to the ledger the rows whose value at `position` is not there yet
    and return them. Rows repeated within `rows` are only taken once.
    """
    known = ledger.setdefault(table_full_name, [])
    seen = {row[position] for row in known}
    new_rows = []
    for row in rows:
        if row[position] in seen:
            continue
        seen.add(row[position])
        known.append(row)
        new_rows.append(row)
    return new_rows


class RowExtractor:
    """Breadth-first FK-following extraction of rows into a replayable script."""

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
        self.row_counts: dict[str, int] = {}
        self.destination: Optional[Path] = None

    def extract(self, root_table_name: str, row_filter: str = "", row_limit: Optional[int] = None) -> bool:
        """Run one extraction. Returns False when a table or FK target column is missing."""
        self.fragments_written = 0
        self.row_counts = {}
        self.destination = None
        clear_fragments(self.output_dir, FRAGMENT_PREFIX)
        try:
            ok = self._traverse(root_table_name, row_filter, row_limit)
        except Exception:
            clear_fragments(self.output_dir, FRAGMENT_PREFIX)
            raise
        finally:
            self.connections.close()

        if not ok:
            clear_fragments(self.output_dir, FRAGMENT_PREFIX)
            return False
        self.destination = assemble(
            self.fragments_written, FRAGMENT_PREFIX, DESTINATION_NAME,
            reversed=False, directory=self.output_dir,
        )
        return True

    def _traverse(self, root_table_name: str, row_filter: str, row_limit: Optional[int]) -> bool:
        provider = self.provider
        schema = provider.load_schema(self.connections.acquire(), self.schema_name)

        # ── Root phase ────────────────────────────────────────────────────
        root = provider.get_table(schema, root_table_name)
        if root is None:
            logger.error("Table %s not found in schema %s", root_table_name, self.schema_name)
            return False
        rows = provider.query_rows(self.connections.acquire(), self.schema_name, root.name, row_filter, row_limit)
        logger.info("Root table %s: %d rows", root.full_name, len(rows))

        ledger: dict[str, list[Row]] = {root.full_name: list(rows)}
        queue = deque(foreign_work_items(root, rows))
        self._save(root, rows)

        # ── Foreign phase ─────────────────────────────────────────────────
        while queue:
            item = queue.popleft()
            if not item.values:
                continue
            target = schema.find_table(item.target_table)
            position = target.column_position(item.target_column) if target else -1
            if target is None or position < 0:
                logger.error(
                    "Foreign key %s.%s references missing %s.%s",
                    item.source_table, item.source_column, item.target_table, item.target_column,
                )
                return False

            value_set = render_value_set(item.values, target.columns[position].data_type, provider)
            results = provider.query_rows_where_in(
                self.connections.acquire(), target.full_name, item.target_column, value_set,
            )
            new_rows = record_new_rows(ledger, target.full_name, results, position)
            logger.info(
                "%s.%s -> %s.%s: %d rows fetched, %d new",
                item.source_table, item.source_column, target.full_name, item.target_column,
                len(results), len(new_rows),
            )
            if new_rows:
                follow_ups = foreign_work_items(target, new_rows)
                logger.debug("Queueing %d foreign keys of %s", len(follow_ups), target.full_name)
                queue.extend(follow_ups)
                self._save(target, new_rows)
        return True

    def _save(self, table: Table, rows: Sequence[Row]) -> None:
        if not rows:
            return
        statement = render_insert(table, rows, self.provider)
        if write_fragment(self.output_dir, FRAGMENT_PREFIX, self.fragments_written, [statement]):
            self.fragments_written += 1
            self.row_counts[table.full_name] = self.row_counts.get(table.full_name, 0) + len(rows)
