from __future__ import annotations

import pytest

from db_console.session import schema
from db_console.session.schema import SchemaInspector
from db_console.shared.exceptions import MalformedResponseError


def test_load_table_info_parses_columns_and_indexes(fake_api) -> None:
    info = SchemaInspector(fake_api).load_table_info("main", "users")

    id_column, name_column = info.columns
    assert id_column.is_primary_key is True
    assert id_column.not_null is True
    assert id_column.default_value is None
    assert name_column.default_value == "'anon'"
    assert name_column.is_primary_key is False
    assert info.indexes[0].name == "idx_users_name"
    assert info.create_table_sql.startswith("CREATE TABLE users")


def test_composite_primary_key_positions_count(fake_api) -> None:
    fake_api.schemas[("main", "pairs")] = {
        "columns": [
            {"name": "a", "type": "INT", "notnull": 1, "dflt_value": None, "pk": 1},
            {"name": "b", "type": "INT", "notnull": 1, "dflt_value": None, "pk": 2},
        ],
        "indexes": [],
    }

    info = SchemaInspector(fake_api).load_table_info("main", "pairs")

    assert [column.is_primary_key for column in info.columns] == [True, True]


def test_empty_schema_uses_placeholders(fake_api) -> None:
    info = SchemaInspector(fake_api).load_table_info("main", "ghost")

    assert schema.column_grid(info).placeholder == "No schema information available"
    assert schema.index_grid(info).placeholder == "No indexes"
    assert schema.ddl_text(info) == "Not available"


def test_column_grid_keeps_markup_as_text(fake_api) -> None:
    fake_api.schemas[("main", "odd")] = {
        "columns": [{"name": "<b>", "type": "TEXT", "notnull": 0, "dflt_value": 0, "pk": 0}],
        "indexes": [],
        "createTable": "CREATE TABLE odd (\"<b>\" TEXT DEFAULT 0)",
    }

    grid = schema.column_grid(SchemaInspector(fake_api).load_table_info("main", "odd"))

    assert grid.rows == (("<b>", "TEXT", "No", "0", "No"),)


def test_malformed_columns_raise(fake_api) -> None:
    fake_api.schemas[("main", "bad")] = {"columns": ["not-a-mapping"], "indexes": []}

    with pytest.raises(MalformedResponseError):
        SchemaInspector(fake_api).load_table_info("main", "bad")
