from __future__ import annotations

import json

import httpx
import pytest
import respx

from db_console.api.client import ApiClient
from db_console.shared.config import ApiSettings
from db_console.shared.exceptions import ApiError, MalformedResponseError, TransportError

BASE = "http://testserver/api"


@pytest.fixture()
def client():
    with ApiClient(BASE) as api:
        yield api


@respx.mock
def test_list_databases(client: ApiClient) -> None:
    respx.get(f"{BASE}/databases").mock(
        return_value=httpx.Response(200, json={"databases": [{"id": "main", "name": "Main", "path": "/m.db"}]})
    )

    payload = client.list_databases()

    assert payload["databases"][0]["id"] == "main"


@respx.mock
def test_table_page_sends_page_and_limit(client: ApiClient) -> None:
    route = respx.get(f"{BASE}/databases/main/table/users").mock(
        return_value=httpx.Response(200, json={"data": [], "pagination": {"page": 3, "totalPages": 3, "total": 0}})
    )

    client.table_page("main", "users", page=3, limit=50)

    request = route.calls.last.request
    assert request.url.params["page"] == "3"
    assert request.url.params["limit"] == "50"


@respx.mock
def test_path_segments_are_encoded(client: ApiClient) -> None:
    route = respx.get(f"{BASE}/databases/main/schema/order%20items").mock(
        return_value=httpx.Response(200, json={"columns": [], "indexes": []})
    )

    client.table_schema("main", "order items")

    assert route.called


@respx.mock
def test_run_query_posts_json_body(client: ApiClient) -> None:
    route = respx.post(f"{BASE}/databases/main/query").mock(
        return_value=httpx.Response(200, json={"data": [{"x": 1}], "rowCount": 1, "executionTime": 3})
    )

    payload = client.run_query("main", "SELECT 1 AS x")

    assert json.loads(route.calls.last.request.content) == {"query": "SELECT 1 AS x"}
    assert payload["rowCount"] == 1


@respx.mock
def test_run_query_returns_error_payload_on_bad_status(client: ApiClient) -> None:
    respx.post(f"{BASE}/databases/main/query").mock(
        return_value=httpx.Response(400, json={"error": "near \"SELEC\": syntax error"})
    )

    payload = client.run_query("main", "SELEC 1")

    assert payload["error"] == 'near "SELEC": syntax error'


@respx.mock
def test_run_query_bad_status_without_error_raises(client: ApiClient) -> None:
    respx.post(f"{BASE}/databases/main/query").mock(return_value=httpx.Response(502, json={}))

    with pytest.raises(ApiError) as excinfo:
        client.run_query("main", "SELECT 1")

    assert excinfo.value.status_code == 502


@respx.mock
def test_get_with_error_status_raises(client: ApiClient) -> None:
    respx.get(f"{BASE}/databases/ghost/tables").mock(return_value=httpx.Response(404, json={"error": "nope"}))

    with pytest.raises(ApiError) as excinfo:
        client.list_tables("ghost")

    assert excinfo.value.status_code == 404


@respx.mock
def test_non_json_body_is_malformed(client: ApiClient) -> None:
    respx.get(f"{BASE}/databases").mock(return_value=httpx.Response(200, text="<html>oops</html>"))

    with pytest.raises(MalformedResponseError):
        client.list_databases()


@respx.mock
def test_non_object_body_is_malformed(client: ApiClient) -> None:
    respx.get(f"{BASE}/databases").mock(return_value=httpx.Response(200, json=["main"]))

    with pytest.raises(MalformedResponseError):
        client.list_databases()


@respx.mock
def test_network_failure_is_transport_error(client: ApiClient) -> None:
    respx.get(f"{BASE}/databases").mock(side_effect=httpx.ConnectError("connection refused"))

    with pytest.raises(TransportError):
        client.list_databases()


@respx.mock
def test_ping_reflects_status(client: ApiClient) -> None:
    route = respx.get(f"{BASE}/databases")
    route.mock(return_value=httpx.Response(200, json={"databases": []}))
    assert client.ping() is True

    route.mock(return_value=httpx.Response(500))
    assert client.ping() is False


def test_from_settings_strips_trailing_slash() -> None:
    with ApiClient.from_settings(ApiSettings(base_url=f"{BASE}/", timeout=None)) as api:
        assert api.base_url == BASE
