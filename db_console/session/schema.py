"""Table schema inspection."""

from __future__ import annotations

from typing import Any, Mapping

from db_console.api.client import ApiClient
from db_console.shared.exceptions import MalformedResponseError

from . import render
from .types import IndexDescriptor, TableColumn, TableSchema, TabularModel

COLUMN_HEADERS = ("Name", "Type", "Not Null", "Default", "Primary Key")
INDEX_HEADERS = ("Name", "SQL")
NO_SCHEMA_TEXT = "No schema information available"
NO_INDEXES_TEXT = "No indexes"
NO_DDL_TEXT = "Not available"


class SchemaInspector:
    """Fetch and structure column, index and DDL details for a table."""

    def __init__(self, api: ApiClient) -> None:
        self._api = api

    def load_table_info(self, db_id: str, table: str) -> TableSchema:
        payload = self._api.table_schema(db_id, table)
        try:
            columns = tuple(_parse_column(col) for col in payload.get("columns") or ())
            indexes = tuple(_parse_index(idx) for idx in payload.get("indexes") or ())
        except (AttributeError, TypeError) as exc:
            raise MalformedResponseError(f"Schema payload for {table} is malformed: {exc}") from exc
        create_sql = payload.get("createTable")
        return TableSchema(
            columns=columns,
            indexes=indexes,
            create_table_sql=str(create_sql) if create_sql else None,
        )


def column_grid(schema: TableSchema) -> TabularModel:
    return render.grid(
        COLUMN_HEADERS,
        (
            (
                column.name,
                column.type,
                _yes_no(column.not_null),
                column.default_value,
                _yes_no(column.is_primary_key),
            )
            for column in schema.columns
        ),
        empty=NO_SCHEMA_TEXT,
    )


def index_grid(schema: TableSchema) -> TabularModel:
    return render.grid(
        INDEX_HEADERS,
        ((index.name, index.definition_sql) for index in schema.indexes),
        empty=NO_INDEXES_TEXT,
    )


def ddl_text(schema: TableSchema) -> str:
    return schema.create_table_sql or NO_DDL_TEXT


def _parse_column(raw: Mapping[str, Any]) -> TableColumn:
    default = raw.get("dflt_value")
    return TableColumn(
        name=str(raw.get("name") or ""),
        type=str(raw.get("type") or ""),
        not_null=_flag(raw.get("notnull")),
        default_value=None if default is None else str(default),
        # Composite keys number their columns 1..n, so any positive position counts.
        is_primary_key=_flag(raw.get("pk")),
    )


def _parse_index(raw: Mapping[str, Any]) -> IndexDescriptor:
    return IndexDescriptor(
        name=str(raw.get("name") or ""),
        definition_sql=str(raw.get("sql") or ""),
    )


def _flag(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value > 0
    return False


def _yes_no(value: bool) -> str:
    return "Yes" if value else "No"
