"""Ad-hoc query execution and history."""

from __future__ import annotations

import time
from typing import Any, Callable, Mapping

from db_console.api.client import ApiClient
from db_console.shared.exceptions import ApiError, InputValidationError

from . import render
from .types import HISTORY_LIMIT, QueryFailure, QueryOutcome, QueryResult, QuerySuccess

NO_DATABASE_MESSAGE = "Please select a database first"
EMPTY_QUERY_MESSAGE = "Please enter a query"
HISTORY_LABEL_LENGTH = 100


def remember(history: tuple[str, ...], query: str, limit: int = HISTORY_LIMIT) -> tuple[str, ...]:
    """Return ``history`` with ``query`` prepended unless it is already present.

    Known queries keep their original position; the list records first-seen
    order of distinct queries, not most-recently-used.
    """
    if query in history:
        return history
    return (query, *history)[:limit]


def history_label(query: str) -> str:
    if len(query) > HISTORY_LABEL_LENGTH:
        return query[:HISTORY_LABEL_LENGTH] + "..."
    return query


def check_preconditions(db_id: str | None, query: str) -> str:
    """Validate the inputs of a query run and return the database id to use."""
    if not db_id:
        raise InputValidationError(NO_DATABASE_MESSAGE)
    if not query.strip():
        raise InputValidationError(EMPTY_QUERY_MESSAGE)
    return db_id


class QueryRunner:
    """Execute queries against the selected database and time them."""

    def __init__(self, api: ApiClient, *, clock: Callable[[], float] = time.perf_counter) -> None:
        self._api = api
        self._clock = clock

    def execute(self, db_id: str, query: str) -> QueryResult:
        started = self._clock()
        try:
            payload = self._api.run_query(db_id, query)
        except ApiError as exc:
            return QueryFailure(error_message=str(exc))
        elapsed_ms = (self._clock() - started) * 1000.0
        return parse_result(payload, elapsed_ms)


def parse_result(payload: Mapping[str, Any], elapsed_ms: float) -> QueryResult:
    error = payload.get("error")
    if error:
        return QueryFailure(error_message=str(error))
    rows = payload.get("data") or []
    if not isinstance(rows, list) or not all(isinstance(row, Mapping) for row in rows):
        return QueryFailure(error_message="Malformed query response: 'data' must be a list of objects")
    reported = payload.get("executionTime")
    try:
        row_count = int(payload.get("rowCount") or 0)
        execution_ms = float(reported) if reported else elapsed_ms
    except (TypeError, ValueError) as exc:
        return QueryFailure(error_message=f"Malformed query response: {exc}")
    return QuerySuccess(rows=rows, row_count=row_count, execution_time_ms=execution_ms)


def outcome(result: QueryResult) -> QueryOutcome:
    """Decide what the results panel shows for ``result``."""
    if isinstance(result, QueryFailure):
        return QueryOutcome(result=result)
    timing = f"Executed in {format_ms(result.execution_time_ms)}ms ({result.row_count} rows)"
    model = render.render(result.rows) if result.rows else None
    return QueryOutcome(result=result, model=model, timing=timing)


def format_ms(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.2f}".rstrip("0").rstrip(".")
