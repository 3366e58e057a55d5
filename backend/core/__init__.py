from core.db_connector import ConnectionManager, create_engine_from_request, reflect_schema  # noqa: F401
from core.row_extractor import RowExtractor  # noqa: F401
from core.schema_extractor import SchemaExtractor  # noqa: F401
from core.schema_linearizer import linearize  # noqa: F401
from core.script_assembler import assemble, write_fragment  # noqa: F401
