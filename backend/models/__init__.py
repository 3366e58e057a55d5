from models.connection import ConnectionRequest  # noqa: F401
from models.schema import Schema, Table, Column  # noqa: F401
from models.extraction import (  # noqa: F401
    ExtractionResponse, ForeignKeyWorkItem, RowExtractionRequest, SchemaExtractionRequest,
)
