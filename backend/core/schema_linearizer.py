"""
Schema linearizer: dependency-first table order for DDL emission.

A table is placed after every table its foreign keys reference, so the
resulting script never creates a table before one it points at.
"""
import logging

from core.exceptions import CircularDependencyError
from models.schema import Schema, Table

logger = logging.getLogger(__name__)


def linearize(schema: Schema) -> list[int]:
    """
    Return positions into `schema.tables` in emission order.

    Depth-first over tables sorted by full name; referenced tables are
    visited (in name order) before the referencing table is appended.
    Self-references impose no order. Re-entering a table that is still on
    the current chain raises CircularDependencyError.
    """
    positions = {table.full_name: i for i, table in enumerate(schema.tables)}
    ordered: list[str] = []
    done: set[str] = set()
    chain: list[str] = []

    def visit(table: Table) -> None:
        if table.full_name in done:
            return
        if table.full_name in chain:
            start = chain.index(table.full_name)
            raise CircularDependencyError(chain[start:] + [table.full_name])

        chain.append(table.full_name)
        targets = sorted({c.foreign_table_name for _, c in table.foreign_columns})
        for target in targets:
            if target == table.full_name or target in done:
                continue
            if target not in positions:
                logger.debug("%s references %s outside schema %s; ignoring", table.full_name, target, schema.name)
                continue
            visit(schema.tables[positions[target]])
        chain.pop()

        done.add(table.full_name)
        ordered.append(table.full_name)

    for full_name in sorted(positions):
        visit(schema.tables[positions[full_name]])

    logger.debug("Linearized %d tables: %s", len(ordered), ", ".join(ordered))
    return [positions[name] for name in ordered]
