import pytest

from core.db_connector import ConnectionManager
from core.exceptions import CircularDependencyError
from core.schema_extractor import SchemaExtractor
from integrations.sqlite_provider import SqliteProvider
from models.connection import ConnectionRequest


class TypedSqliteProvider(SqliteProvider):
    """SQLite provider that also reports a schema-level type and function."""

    def get_schema_defined_types(self, conn, schema_name):
        return ["CREATE TYPE mood AS ENUM ('sad', 'happy');"]

    def get_schema_defined_functions(self, conn, schema_name):
        return ["CREATE OR REPLACE FUNCTION noop() RETURNS void AS $$ $$ LANGUAGE sql;"]


def make_extractor(db_path: str, output_dir, provider=None) -> SchemaExtractor:
    req = ConnectionRequest(db_type="sqlite", file_path=db_path)
    return SchemaExtractor(provider or SqliteProvider(), ConnectionManager(req, backoff_seconds=0),
                           output_dir=str(output_dir))


def test_tables_are_emitted_in_dependency_order(shop_db, tmp_path):
    extractor = make_extractor(shop_db, tmp_path)

    assert extractor.extract() is True

    dump = (tmp_path / "schema_dump.sql").read_text()
    assert extractor.tables == ["customers", "employees", "orders"]
    assert dump.index("CREATE TABLE customers") < dump.index("CREATE TABLE orders")
    assert dump.index("CREATE TABLE orders") < dump.index("CREATE INDEX ix_orders_customer")
    assert dump.index("CREATE INDEX ix_orders_customer") < dump.index("CREATE TRIGGER trg_orders_status")
    assert sorted(p.name for p in tmp_path.iterdir()) == ["schema_dump.sql"]


def test_types_and_functions_come_before_tables(shop_db, tmp_path):
    extractor = make_extractor(shop_db, tmp_path, TypedSqliteProvider())

    extractor.extract()

    dump = (tmp_path / "schema_dump.sql").read_text()
    assert dump.index("CREATE TYPE mood") < dump.index("CREATE OR REPLACE FUNCTION noop") < dump.index("CREATE TABLE")


def test_referenced_table_created_before_referencing_table(sqlite_db_factory, tmp_path):
    db = sqlite_db_factory([
        "CREATE TABLE a_items (id INTEGER PRIMARY KEY, z_id INTEGER REFERENCES z_owners(id));",
        "CREATE TABLE z_owners (id INTEGER PRIMARY KEY);",
    ])
    extractor = make_extractor(db, tmp_path)

    extractor.extract()

    dump = (tmp_path / "schema_dump.sql").read_text()
    assert extractor.tables == ["z_owners", "a_items"]
    assert dump.index("CREATE TABLE z_owners") < dump.index("CREATE TABLE a_items")


def test_circular_schema_emits_nothing(sqlite_db_factory, tmp_path):
    db = sqlite_db_factory([
        "CREATE TABLE a (id INTEGER PRIMARY KEY, b_id INTEGER REFERENCES b(id));",
        "CREATE TABLE b (id INTEGER PRIMARY KEY, a_id INTEGER REFERENCES a(id));",
    ])
    extractor = make_extractor(db, tmp_path, TypedSqliteProvider())

    with pytest.raises(CircularDependencyError):
        extractor.extract()
    assert list(tmp_path.iterdir()) == []


def test_stale_fragment_is_not_concatenated(shop_db, tmp_path):
    # SQLite never writes fragments 0 and 1 (no types or functions)
    (tmp_path / "schema_dump_0.sql").write_text("DROP TABLE customers;\n")
    extractor = make_extractor(shop_db, tmp_path)

    extractor.extract()

    dump = (tmp_path / "schema_dump.sql").read_text()
    assert "DROP TABLE" not in dump
    assert dump.startswith("CREATE TABLE customers")
    assert sorted(p.name for p in tmp_path.iterdir()) == ["schema_dump.sql"]


class BrokenTriggersProvider(SqliteProvider):
    def get_table_triggers(self, conn, schema_name, table):
        raise RuntimeError("trigger lookup failed")


def test_fragments_are_removed_when_extraction_raises(shop_db, tmp_path):
    extractor = make_extractor(shop_db, tmp_path, BrokenTriggersProvider())

    with pytest.raises(RuntimeError, match="trigger lookup failed"):
        extractor.extract()
    assert list(tmp_path.iterdir()) == []
