"""Pydantic schemas for the reflected database schema (tables, columns, FK edges)."""
from typing import Optional
from pydantic import BaseModel, ConfigDict


class Column(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    table_name: str
    data_type: str
    is_nullable: bool = True
    is_foreign_reference: bool = False
    foreign_table_name: Optional[str] = None    # full name of the referenced table
    foreign_column_name: Optional[str] = None


class Table(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    full_name: str
    columns: tuple[Column, ...] = ()

    @property
    def foreign_columns(self) -> list[tuple[int, Column]]:
        """(ordinal, column) pairs for every foreign-reference column."""
        return [(i, c) for i, c in enumerate(self.columns) if c.is_foreign_reference]

    def column_position(self, column_name: str) -> int:
        for i, column in enumerate(self.columns):
            if column.name == column_name:
                return i
        return -1


class Schema(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    tables: tuple[Table, ...] = ()

    def find_table(self, full_name: str) -> Optional[Table]:
        """Look a table up by its fully-qualified name."""
        for table in self.tables:
            if table.full_name == full_name:
                return table
        return None
