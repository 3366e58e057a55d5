"""Pydantic schemas for extraction requests, responses and traversal work items."""
from typing import Any, Optional
from pydantic import BaseModel, Field

from models.connection import ConnectionRequest


class ForeignKeyWorkItem(BaseModel):
    """One pending foreign-key lookup: fetch `target_table` rows whose
    `target_column` is in `values`."""
    source_table: str
    source_column: str
    target_table: str             # full name
    target_column: str
    values: list[Any] = Field(default_factory=list)

    @property
    def is_self_reference(self) -> bool:
        return self.source_table == self.target_table


class RowExtractionRequest(ConnectionRequest):
    table_name: str = Field(..., description="Root table to start the traversal from")
    where_filter: str = Field("", description="Row filter expression for the root table")
    limit: Optional[int] = Field(None, ge=0, description="Maximum number of root rows")
    output_dir: Optional[str] = Field(None, description="Subdirectory of OUTPUT_DIR to write into")


class SchemaExtractionRequest(ConnectionRequest):
    output_dir: Optional[str] = Field(None, description="Subdirectory of OUTPUT_DIR to write into")


class ExtractionResponse(BaseModel):
    output_dir: str                     # per-run directory holding the script
    destination: str
    fragments_written: int
    duration_seconds: float
    row_counts: dict[str, int] = {}     # table full name -> rows emitted
    tables: list[str] = []              # emission order
