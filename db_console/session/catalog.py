"""Database and table catalog loading."""

from __future__ import annotations

from typing import Any, Mapping, Sequence

from db_console.api.client import ApiClient
from db_console.shared.exceptions import MalformedResponseError

from .types import Database

NO_TABLES_TEXT = "No tables found"
TABLES_FAILED_TEXT = "Failed to load tables"


class CatalogLoader:
    """Fetch the database catalog and per-database table lists."""

    def __init__(self, api: ApiClient) -> None:
        self._api = api

    def load_databases(self) -> list[Database]:
        """Return databases in backend order; raises ``ApiError`` on failure."""
        payload = self._api.list_databases()
        return [_parse_database(entry) for entry in _list_field(payload, "databases")]

    def load_tables(self, db_id: str) -> list[str]:
        payload = self._api.list_tables(db_id)
        return [str(name) for name in _list_field(payload, "tables")]

    def load_database_info(self, db_id: str) -> Mapping[str, Any]:
        return self._api.database_info(db_id)


def _list_field(payload: Mapping[str, Any], key: str) -> Sequence[Any]:
    value = payload.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise MalformedResponseError(f"'{key}' must be a list, got {type(value).__name__}")
    return value


def _parse_database(entry: Any) -> Database:
    if not isinstance(entry, Mapping) or "id" not in entry:
        raise MalformedResponseError(f"Database entry {entry!r} has no id")
    db_id = str(entry["id"])
    return Database(
        id=db_id,
        name=str(entry.get("name") or db_id),
        path=str(entry.get("path") or ""),
    )
