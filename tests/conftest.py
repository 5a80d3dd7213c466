"""Shared pytest fixtures for db-console tests.

``FakeApi`` stands in for ``ApiClient`` with an in-memory backend that
paginates and clamps like the real server, and ``RecordingSurface`` records
every call the controller makes so tests can assert on what was displayed.
"""

from __future__ import annotations

import math
from pathlib import Path
from typing import Any, Callable

import pytest

from db_console.session.catalog import CatalogLoader
from db_console.session.controller import SessionController
from db_console.session.paging import PaginatedDataFetcher
from db_console.session.query import QueryRunner
from db_console.session.schema import SchemaInspector
from db_console.shared.exceptions import TransportError


class StubLogger:
    def __init__(self) -> None:
        self.messages: list[tuple[str, str]] = []

    def info(self, message: str) -> None:
        self.messages.append(("info", message))

    def warning(self, message: str) -> None:
        self.messages.append(("warning", message))

    def debug(self, message: str) -> None:
        self.messages.append(("debug", message))

    def error(self, message: str) -> None:
        self.messages.append(("error", message))

    def success(self, message: str) -> None:
        self.messages.append(("success", message))

    def of_level(self, level: str) -> list[str]:
        return [message for lvl, message in self.messages if lvl == level]


class RecordingSurface:
    def __init__(self) -> None:
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self.alerts: list[str] = []
        self.status: list[bool] = []

    def __getattr__(self, name: str) -> Callable[..., None]:
        if name.startswith("_"):
            raise AttributeError(name)

        def record(*args: Any) -> None:
            self.calls.append((name, args))
            if name == "alert":
                self.alerts.append(args[0])
            elif name == "set_connection_status":
                self.status.append(args[0])

        return record

    def named(self, name: str) -> list[tuple[Any, ...]]:
        return [args for call, args in self.calls if call == name]

    def last(self, name: str) -> tuple[Any, ...]:
        matches = self.named(name)
        assert matches, f"surface.{name} was never called"
        return matches[-1]


class FakeApi:
    """In-memory backend mirroring the REST endpoints."""

    def __init__(self) -> None:
        self.databases: list[dict[str, Any]] = [
            {"id": "main", "name": "Main", "path": "/data/main.db"},
            {"id": "logs", "name": "Logs", "path": "/data/logs.db"},
        ]
        self.tables: dict[str, list[str]] = {"main": ["users", "orders"], "logs": []}
        self.rows: dict[tuple[str, str], list[dict[str, Any]]] = {
            ("main", "users"): [{"id": i, "name": f"user{i}"} for i in range(1, 51)],
            ("main", "orders"): [],
        }
        self.schemas: dict[tuple[str, str], dict[str, Any]] = {
            ("main", "users"): {
                "columns": [
                    {"name": "id", "type": "INTEGER", "notnull": 1, "dflt_value": None, "pk": 1},
                    {"name": "name", "type": "TEXT", "notnull": 0, "dflt_value": "'anon'", "pk": 0},
                ],
                "indexes": [{"name": "idx_users_name", "sql": "CREATE INDEX idx_users_name ON users(name)"}],
                "createTable": "CREATE TABLE users (id INTEGER PRIMARY KEY, name TEXT DEFAULT 'anon')",
            }
        }
        self.query_payload: dict[str, Any] = {"data": [{"x": 1}], "rowCount": 1, "executionTime": 3}
        self.failing: set[str] = set()
        self.calls: list[tuple[Any, ...]] = []

    def _check(self, name: str) -> None:
        if name in self.failing:
            raise TransportError(f"{name} failed: connection refused")

    def ping(self) -> bool:
        self.calls.append(("ping",))
        self._check("ping")
        return True

    def list_databases(self) -> dict[str, Any]:
        self.calls.append(("list_databases",))
        self._check("list_databases")
        return {"databases": list(self.databases)}

    def database_info(self, db_id: str) -> dict[str, Any]:
        self.calls.append(("database_info", db_id))
        self._check("database_info")
        return {"id": db_id}

    def list_tables(self, db_id: str) -> dict[str, Any]:
        self.calls.append(("list_tables", db_id))
        self._check("list_tables")
        return {"tables": list(self.tables.get(db_id, []))}

    def table_schema(self, db_id: str, table: str) -> dict[str, Any]:
        self.calls.append(("table_schema", db_id, table))
        self._check("table_schema")
        return self.schemas.get((db_id, table), {"columns": [], "indexes": []})

    def table_page(self, db_id: str, table: str, *, page: int, limit: int) -> dict[str, Any]:
        self.calls.append(("table_page", db_id, table, page, limit))
        self._check("table_page")
        rows = self.rows.get((db_id, table), [])
        total_pages = max(math.ceil(len(rows) / limit), 1)
        page = min(page, total_pages)
        start = (page - 1) * limit
        return {
            "data": rows[start : start + limit],
            "pagination": {"page": page, "totalPages": total_pages, "total": len(rows)},
        }

    def run_query(self, db_id: str, query: str) -> dict[str, Any]:
        self.calls.append(("run_query", db_id, query))
        self._check("run_query")
        return dict(self.query_payload)

    def requests(self, name: str) -> list[tuple[Any, ...]]:
        return [call for call in self.calls if call[0] == name]


class RecordingDownloader:
    def __init__(self, directory: Path) -> None:
        self.directory = directory
        self.delivered: list[tuple[str, bytes]] = []

    def deliver(self, filename: str, payload: bytes) -> Path:
        self.delivered.append((filename, payload))
        return self.directory / filename


@pytest.fixture()
def fake_api() -> FakeApi:
    return FakeApi()


@pytest.fixture()
def surface() -> RecordingSurface:
    return RecordingSurface()


@pytest.fixture()
def stub_logger() -> StubLogger:
    return StubLogger()


@pytest.fixture()
def downloader(tmp_path: Path) -> RecordingDownloader:
    return RecordingDownloader(tmp_path)


@pytest.fixture()
def make_controller(
    fake_api: FakeApi,
    surface: RecordingSurface,
    stub_logger: StubLogger,
    downloader: RecordingDownloader,
) -> Callable[..., SessionController]:
    """Build a controller over the fake backend; extra kwargs override defaults."""

    def factory(**overrides: Any) -> SessionController:
        options: dict[str, Any] = {
            "catalog": CatalogLoader(fake_api),  # type: ignore[arg-type]
            "inspector": SchemaInspector(fake_api),  # type: ignore[arg-type]
            "fetcher": PaginatedDataFetcher(fake_api),  # type: ignore[arg-type]
            "runner": QueryRunner(fake_api),  # type: ignore[arg-type]
            "surface": surface,
            "downloader": downloader,
            "logger": stub_logger,
            "page_size": 10,
            "clock": lambda: 1700000000.5,
        }
        options.update(overrides)
        return SessionController(**options)

    return factory


