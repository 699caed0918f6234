import asyncio
import json

import httpx
import pytest

from kiranawala.core.exceptions import RemoteUnavailable
from kiranawala.core.remote import RemoteStore, any_of, eq, ilike, matches_all, to_params


def make_store(handler, timeout=5.0):
    return RemoteStore(
        base_url="https://example.supabase.co",
        api_key="anon-key",
        access_token="user-token",
        timeout=timeout,
        transport=httpx.MockTransport(handler),
    )


def test_filters_render_as_postgrest_params():
    params = to_params([
        eq("subscription_status", "ACTIVE"),
        eq("is_open", True),
        any_of(ilike("name", "fresh"), ilike("address", "fresh")),
    ])

    assert params == [
        ("subscription_status", "eq.ACTIVE"),
        ("is_open", "eq.true"),
        ("or", "(name.ilike.*fresh*,address.ilike.*fresh*)"),
    ]


def test_reserved_characters_are_quoted():
    assert to_params([ilike("name", "Ram, Sons")]) == [("name", 'ilike."*Ram, Sons*"')]
    assert to_params([eq("deleted_at", None)]) == [("deleted_at", "is.null")]


def test_filters_evaluate_rows_locally():
    row = {"name": "Fresh Mart", "address": "Link Road", "is_open": True}

    assert matches_all([eq("is_open", True), ilike("name", "FRESH")], row)
    assert not matches_all([any_of(ilike("name", "dairy"), ilike("address", "dairy"))], row)
    assert matches_all(None, row)


def test_select_sends_auth_headers_and_params():
    seen = {}

    def handler(request):
        seen["url"] = request.url
        seen["headers"] = request.headers
        return httpx.Response(200, json=[{"id": "s1"}])

    rows = asyncio.run(make_store(handler).select("stores", [eq("id", "s1")], limit=1))

    assert rows == [{"id": "s1"}]
    assert seen["url"].path == "/rest/v1/stores"
    assert seen["url"].params["id"] == "eq.s1"
    assert seen["url"].params["limit"] == "1"
    assert seen["headers"]["apikey"] == "anon-key"
    assert seen["headers"]["authorization"] == "Bearer user-token"


def test_insert_asks_for_representation():
    seen = {}

    def handler(request):
        seen["prefer"] = request.headers.get("prefer")
        seen["body"] = json.loads(request.content)
        return httpx.Response(201, json=[{"id": "o1", **seen["body"]}])

    rows = asyncio.run(make_store(handler).insert("orders", {"customer_id": "c1"}))

    assert seen["prefer"] == "return=representation"
    assert rows[0]["id"] == "o1"


def test_http_error_status_becomes_remote_unavailable():
    store = make_store(lambda request: httpx.Response(500, text="boom"))

    with pytest.raises(RemoteUnavailable) as exc_info:
        asyncio.run(store.select("stores"))
    assert exc_info.value.table == "stores"


def test_connection_error_becomes_remote_unavailable():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(RemoteUnavailable):
        asyncio.run(make_store(handler).select("stores"))


def test_undecodable_body_becomes_remote_unavailable():
    store = make_store(lambda request: httpx.Response(200, content=b"<html>oops</html>"))

    with pytest.raises(RemoteUnavailable):
        asyncio.run(store.select("stores"))


def test_slow_remote_times_out():
    async def handler(request):
        await asyncio.sleep(1)
        return httpx.Response(200, json=[])

    with pytest.raises(RemoteUnavailable, match="timed out"):
        asyncio.run(make_store(handler, timeout=0.05).select("stores"))


def test_unfiltered_update_and_delete_are_refused():
    store = make_store(lambda request: httpx.Response(200, json=[]))

    with pytest.raises(ValueError):
        asyncio.run(store.update("stores", {"rating": 4.0}, []))
    with pytest.raises(ValueError):
        asyncio.run(store.delete("stores", []))
