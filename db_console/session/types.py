"""Data structures shared across the session modules."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Sequence, Union

Row = Mapping[str, Any]

HISTORY_LIMIT = 10


class Tab(str, Enum):
    """Table detail tabs."""

    INFO = "info"
    DATA = "data"


@dataclass(frozen=True, slots=True)
class Database:
    """A named database connection exposed by the backend."""

    id: str
    name: str
    path: str

    @property
    def label(self) -> str:
        return f"{self.name} ({self.id})"


@dataclass(slots=True)
class SessionState:
    """Mutable navigation state, owned by ``SessionController``."""

    databases: tuple[Database, ...] = ()
    current_db_id: str | None = None
    current_table: str | None = None
    current_tab: Tab = Tab.INFO
    current_page: int = 1
    page_size: int = 25
    query_history: tuple[str, ...] = ()

    def find_database(self, db_id: str | None) -> Database | None:
        for database in self.databases:
            if database.id == db_id:
                return database
        return None


@dataclass(frozen=True, slots=True)
class TableColumn:
    name: str
    type: str
    not_null: bool
    default_value: str | None
    is_primary_key: bool


@dataclass(frozen=True, slots=True)
class IndexDescriptor:
    name: str
    definition_sql: str


@dataclass(frozen=True, slots=True)
class TableSchema:
    """Column, index and DDL details for a single table."""

    columns: tuple[TableColumn, ...]
    indexes: tuple[IndexDescriptor, ...]
    create_table_sql: str | None


@dataclass(frozen=True, slots=True)
class PaginationInfo:
    page: int
    total_pages: int
    total_rows: int


@dataclass(frozen=True, slots=True)
class TabularModel:
    """Display-ready table: column names plus the text of every cell.

    When ``placeholder`` is set the table has no data and shows that single
    message across all columns instead.
    """

    columns: tuple[str, ...]
    rows: tuple[tuple[str, ...], ...]
    placeholder: str | None = None


@dataclass(frozen=True, slots=True)
class DataPage:
    """One fetched page of table data."""

    model: TabularModel
    pagination: PaginationInfo | None
    rows: tuple[Row, ...] = ()


@dataclass(frozen=True, slots=True)
class NavigationControls:
    """Enabled state of the first/prev/next/last page controls."""

    first: bool = False
    prev: bool = False
    next: bool = False
    last: bool = False

    @classmethod
    def for_page(cls, current_page: int, total_pages: int) -> NavigationControls:
        at_start = current_page == 1
        at_end = current_page >= total_pages
        return cls(first=not at_start, prev=not at_start, next=not at_end, last=not at_end)


@dataclass(frozen=True, slots=True)
class QuerySuccess:
    rows: Sequence[Row]
    row_count: int
    execution_time_ms: float


@dataclass(frozen=True, slots=True)
class QueryFailure:
    error_message: str


QueryResult = Union[QuerySuccess, QueryFailure]


@dataclass(frozen=True, slots=True)
class QueryOutcome:
    """A query result together with what the results panel should show."""

    result: QueryResult
    model: TabularModel | None = None
    timing: str | None = None
