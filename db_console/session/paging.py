"""Paginated table data retrieval."""

from __future__ import annotations

from typing import Any, Mapping

from db_console.api.client import ApiClient
from db_console.shared.exceptions import MalformedResponseError

from . import render
from .types import DataPage, PaginationInfo


class PaginatedDataFetcher:
    """Fetch one page of rows for a table."""

    def __init__(self, api: ApiClient) -> None:
        self._api = api

    def load_page(self, db_id: str, table: str, page: int, page_size: int) -> DataPage:
        if page < 1:
            raise ValueError(f"page must be >= 1, got {page}")
        if page_size < 1:
            raise ValueError(f"page_size must be >= 1, got {page_size}")

        payload = self._api.table_page(db_id, table, page=page, limit=page_size)
        rows = payload.get("data") or []
        if not isinstance(rows, list) or not all(isinstance(row, Mapping) for row in rows):
            raise MalformedResponseError(f"Table data for {table} must be a list of objects")

        model = render.render(rows) if rows else render.placeholder(render.NO_DATA_TEXT)
        return DataPage(
            model=model,
            pagination=_parse_pagination(payload.get("pagination")),
            rows=tuple(rows),
        )


def page_info_text(pagination: PaginationInfo) -> str:
    return f"Page {pagination.page} of {pagination.total_pages} ({pagination.total_rows} rows)"


def _parse_pagination(raw: Any) -> PaginationInfo | None:
    if not isinstance(raw, Mapping):
        return None
    try:
        page = int(raw.get("page") or 1)
        # A table with no rows reports zero pages; the UI still shows page 1 of 1.
        total_pages = int(raw.get("totalPages") or 1)
        total_rows = int(raw.get("total") or 0)
    except (TypeError, ValueError) as exc:
        raise MalformedResponseError(f"Pagination block is malformed: {exc}") from exc
    return PaginationInfo(page=max(page, 1), total_pages=max(total_pages, 1), total_rows=total_rows)
