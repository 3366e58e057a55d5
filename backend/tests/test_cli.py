from config import settings
from cli import main


def test_extract_rows_command(shop_db, tmp_path, capsys):
    code = main([
        "extract-rows", "--db", "sqlite", "--connection", f"sqlite:///{shop_db}",
        "--table", "orders", "--where", "id = 1", "--output-dir", str(tmp_path),
    ])
    assert code == 0
    dump = (tmp_path / "row_dump.sql").read_text()
    assert "'NEW'" in dump and "'SHIPPED'" not in dump
    assert "Wrote 2 rows from 2 tables" in capsys.readouterr().out


def test_extract_rows_missing_table_exits_nonzero(shop_db, tmp_path, capsys):
    code = main([
        "extract-rows", "--db", "sqlite", "--connection", f"sqlite:///{shop_db}",
        "--table", "nope", "--output-dir", str(tmp_path),
    ])
    assert code == 1
    assert "extract-rows failed" in capsys.readouterr().err


def test_extract_schema_command(shop_db, tmp_path):
    code = main([
        "extract-schema", "--db", "sqlite", "--connection", f"sqlite:///{shop_db}",
        "--output-dir", str(tmp_path),
    ])
    assert code == 0
    assert "CREATE TABLE orders" in (tmp_path / "schema_dump.sql").read_text()


def test_connection_failure_is_reported(tmp_path, capsys, monkeypatch):
    monkeypatch.setattr(settings, "CONNECT_MAX_RETRIES", 0)
    code = main([
        "extract-schema", "--db", "sqlite", "--connection", "sqlite:////nonexistent-dir/deeper/shop.db",
        "--output-dir", str(tmp_path),
    ])
    assert code == 1
    assert "Failed to create a connection to the database." in capsys.readouterr().err
