from core.script_assembler import assemble, clear_fragments, fragment_path, write_fragment


def test_write_fragment_skips_empty(tmp_path):
    assert write_fragment(tmp_path, "dump_", 0, []) is False
    assert write_fragment(tmp_path, "dump_", 1, ["", ""]) is False
    assert list(tmp_path.iterdir()) == []


def test_assemble_ascending_skips_missing_and_deletes(tmp_path):
    write_fragment(tmp_path, "dump_", 0, ["SELECT 0;"])
    write_fragment(tmp_path, "dump_", 2, ["SELECT 2;", "SELECT 2b;"])

    destination = assemble(3, "dump_", "dump", reversed=False, directory=tmp_path)

    assert destination == tmp_path / "dump.sql"
    assert destination.read_text() == "SELECT 0;\n\nSELECT 2;\nSELECT 2b;\n\n"
    assert not fragment_path(tmp_path, "dump_", 0).exists()
    assert not fragment_path(tmp_path, "dump_", 2).exists()


def test_assemble_reversed(tmp_path):
    for i in range(3):
        write_fragment(tmp_path, "dump_", i, [f"SELECT {i};"])

    destination = assemble(3, "dump_", "dump", reversed=True, directory=tmp_path)

    assert destination.read_text().split() == ["SELECT", "2;", "SELECT", "1;", "SELECT", "0;"]


def test_assemble_without_fragments_writes_empty_script(tmp_path):
    destination = assemble(0, "dump_", "dump", reversed=False, directory=tmp_path)
    assert destination.read_text() == ""


def test_clear_fragments_only_touches_numbered_fragments(tmp_path):
    write_fragment(tmp_path, "dump_", 0, ["SELECT 0;"])
    write_fragment(tmp_path, "dump_", 12, ["SELECT 12;"])
    (tmp_path / "dump.sql").write_text("SELECT 1;\n")
    (tmp_path / "dump_notes.sql").write_text("-- keep\n")

    assert clear_fragments(tmp_path, "dump_") == 2
    assert sorted(p.name for p in tmp_path.iterdir()) == ["dump.sql", "dump_notes.sql"]


def test_clear_fragments_in_missing_directory(tmp_path):
    assert clear_fragments(tmp_path / "absent", "dump_") == 0
