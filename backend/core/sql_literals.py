"""Rendering of fetched values as SQL literals and multi-row INSERT statements."""
import json
from typing import Any, Callable, Iterable, Sequence

NULL_LITERAL = "null"

BINARY_TYPES = (bytes, bytearray, memoryview)


def hex_blob_literal(data: bytes) -> str:
    """SQL-standard blob literal, e.g. X'00FF'."""
    return f"X'{bytes(data).hex().upper()}'"


def array_literal(values: Iterable[Any]) -> str:
    """PostgreSQL array input text, e.g. {1,"a b",NULL}, without the outer value quotes."""
    elements = []
    for value in values:
        if value is None:
            elements.append("NULL")
        elif isinstance(value, (list, tuple)):
            elements.append(array_literal(value))
        else:
            if isinstance(value, bool):
                text = "t" if value else "f"
            elif isinstance(value, dict):
                text = json.dumps(value)
            else:
                text = str(value)
            text = text.replace("\\", "\\\\").replace('"', '\\"')
            elements.append(f'"{text}"')
    return "{" + ",".join(elements) + "}"


def render_literal(
    value: Any,
    quotable: bool,
    quote: str = "'",
    binary_literal: Callable[[bytes], str] = hex_blob_literal,
) -> str:
    """Render one value. `quotable` comes from the provider's type classification.

    Binary values go through `binary_literal`; dicts and lists (JSON documents
    as returned by the driver) are serialised with `json.dumps` and quoted.
    """
    if value is None:
        return NULL_LITERAL
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, BINARY_TYPES):
        return binary_literal(bytes(value))
    if isinstance(value, (dict, list)):
        value, quotable = json.dumps(value), True
    if quotable:
        text = str(value).replace(quote, quote * 2)
        return f"{quote}{text}{quote}"
    return str(value)


def unique_values(values: Iterable[Any]) -> list[Any]:
    """Distinct values in first-seen order. Unhashable values (JSON, arrays) compare by their rendering."""
    distinct: dict[Any, Any] = {}
    for value in values:
        key = json.dumps(value, sort_keys=True, default=str) if isinstance(value, (dict, list)) else value
        distinct.setdefault(key, value)
    return list(distinct.values())


def render_value_set(values: Iterable[Any], type_name: str, provider) -> str:
    """`(v1, v2, ...)` over the distinct values, for use after IN."""
    return "(" + ", ".join(provider.render_literal(v, type_name) for v in unique_values(values)) + ")"


def render_insert(table, rows: Sequence[Sequence[Any]], provider) -> str:
    """One INSERT statement covering every row, values aligned to `table.columns`."""
    types = [c.data_type for c in table.columns]
    column_list = ", ".join(provider.quote_identifier(c.name) for c in table.columns)
    lines = [f"INSERT INTO {table.full_name}({column_list}) VALUES"]
    for i, row in enumerate(rows):
        values = ", ".join(provider.render_literal(value, types[j]) for j, value in enumerate(row))
        lines.append(f"    ({values})" + (";" if i == len(rows) - 1 else ","))
    return "\n".join(lines)
