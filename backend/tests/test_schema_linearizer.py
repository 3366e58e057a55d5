import pytest

from core.exceptions import CircularDependencyError
from core.schema_linearizer import linearize
from models.schema import Column, Schema, Table


def make_table(name: str, refs: dict[str, str] = None) -> Table:
    """Table with an `id` column plus one FK column per (column -> target table) entry."""
    columns = [Column(name="id", table_name=name, data_type="INTEGER")]
    for column, target in (refs or {}).items():
        columns.append(Column(
            name=column, table_name=name, data_type="INTEGER",
            is_foreign_reference=True, foreign_table_name=target, foreign_column_name="id",
        ))
    return Table(name=name, full_name=name, columns=tuple(columns))


def ordered_names(schema: Schema) -> list[str]:
    return [schema.tables[i].full_name for i in linearize(schema)]


def test_referenced_tables_come_first():
    schema = Schema(name="main", tables=(
        make_table("order_items", {"order_id": "orders", "product_id": "products"}),
        make_table("orders", {"customer_id": "customers"}),
        make_table("products"),
        make_table("customers"),
    ))
    assert ordered_names(schema) == ["customers", "orders", "products", "order_items"]


def test_every_foreign_key_target_precedes_its_table():
    schema = Schema(name="main", tables=(
        make_table("e", {"d_id": "d", "a_id": "a"}),
        make_table("d", {"c_id": "c"}),
        make_table("c", {"b_id": "b", "a_id": "a"}),
        make_table("b", {"a_id": "a"}),
        make_table("a"),
    ))
    order = ordered_names(schema)
    position = {name: i for i, name in enumerate(order)}
    for table in schema.tables:
        for _, column in table.foreign_columns:
            assert position[column.foreign_table_name] < position[table.full_name]
    assert sorted(order) == ["a", "b", "c", "d", "e"]


def test_self_reference_is_not_a_cycle():
    schema = Schema(name="main", tables=(
        make_table("employees", {"manager_id": "employees"}),
        make_table("departments"),
    ))
    assert ordered_names(schema) == ["departments", "employees"]


def test_mutual_reference_raises():
    schema = Schema(name="main", tables=(
        make_table("a", {"b_id": "b"}),
        make_table("b", {"a_id": "a"}),
    ))
    with pytest.raises(CircularDependencyError) as exc_info:
        linearize(schema)
    assert exc_info.value.chain == ["a", "b", "a"]


def test_three_table_cycle_raises():
    schema = Schema(name="main", tables=(
        make_table("a", {"b_id": "b"}),
        make_table("b", {"c_id": "c"}),
        make_table("c", {"a_id": "a"}),
    ))
    with pytest.raises(CircularDependencyError) as exc_info:
        linearize(schema)
    assert exc_info.value.chain == ["a", "b", "c", "a"]
    assert "a -> b -> c -> a" in str(exc_info.value)


def test_reference_outside_schema_is_ignored():
    schema = Schema(name="main", tables=(
        make_table("orders", {"customer_id": "crm.customers"}),
    ))
    assert ordered_names(schema) == ["orders"]
