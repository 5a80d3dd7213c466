"""Thin httpx wrapper around the database browser REST API."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any
from urllib.parse import quote

import httpx

from db_console.shared.config import ApiSettings
from db_console.shared.exceptions import ApiError, MalformedResponseError, TransportError


def _segment(value: str) -> str:
    # Table names may contain spaces, slashes or '?', so every path segment is encoded.
    return quote(str(value), safe="")


class ApiClient:
    """Synchronous client for the ``/api`` endpoints.

    Methods return the decoded JSON payloads untouched; turning them into
    session types is the job of the loaders in ``db_console.session``.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = httpx.Client(base_url=self.base_url, timeout=timeout, transport=transport)

    @classmethod
    def from_settings(cls, settings: ApiSettings) -> ApiClient:
        return cls(settings.base_url, timeout=settings.timeout)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> ApiClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ------------------------------------------------------------------ endpoints

    def ping(self) -> bool:
        """Return True when the catalog endpoint answers with a success status."""
        response = self._send("GET", "/databases")
        return response.is_success

    def list_databases(self) -> Mapping[str, Any]:
        return self._get_json("/databases")

    def database_info(self, db_id: str) -> Mapping[str, Any]:
        return self._get_json(f"/databases/{_segment(db_id)}/info")

    def list_tables(self, db_id: str) -> Mapping[str, Any]:
        return self._get_json(f"/databases/{_segment(db_id)}/tables")

    def table_schema(self, db_id: str, table: str) -> Mapping[str, Any]:
        return self._get_json(f"/databases/{_segment(db_id)}/schema/{_segment(table)}")

    def table_page(self, db_id: str, table: str, *, page: int, limit: int) -> Mapping[str, Any]:
        return self._get_json(
            f"/databases/{_segment(db_id)}/table/{_segment(table)}",
            params={"page": page, "limit": limit},
        )

    def run_query(self, db_id: str, query: str) -> Mapping[str, Any]:
        """POST an ad-hoc query.

        Error payloads are returned rather than raised, because the backend
        reports SQL failures as ``{"error": ...}`` with a non-success status.
        A non-success status without an ``error`` field raises ``ApiError``.
        """
        path = f"/databases/{_segment(db_id)}/query"
        response = self._send("POST", path, json={"query": query})
        payload = self._decode(response, path)
        if not response.is_success and not payload.get("error"):
            raise ApiError(
                f"POST {path} returned HTTP {response.status_code}",
                status_code=response.status_code,
            )
        return payload

    # ------------------------------------------------------------------ helpers

    def _send(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            return self._client.request(method, path, **kwargs)
        except httpx.RequestError as exc:
            raise TransportError(f"{method} {path} failed: {exc}") from exc

    def _get_json(self, path: str, *, params: Mapping[str, Any] | None = None) -> Mapping[str, Any]:
        response = self._send("GET", path, params=params)
        if not response.is_success:
            raise ApiError(
                f"GET {path} returned HTTP {response.status_code}",
                status_code=response.status_code,
            )
        return self._decode(response, path)

    @staticmethod
    def _decode(response: httpx.Response, path: str) -> Mapping[str, Any]:
        try:
            payload = response.json()
        except ValueError as exc:
            raise MalformedResponseError(
                f"{path} returned a non-JSON body", status_code=response.status_code
            ) from exc
        if not isinstance(payload, Mapping):
            raise MalformedResponseError(
                f"{path} returned {type(payload).__name__}, expected an object",
                status_code=response.status_code,
            )
        return payload
