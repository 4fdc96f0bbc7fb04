"""Tests for gateway/http.py — HttpGateway routing and error mapping."""
from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any

import httpx
import pytest

from sdk_build_action.core.exceptions import (
    APIConnectionError,
    APIStatusError,
    APITimeoutError,
    AuthenticationError,
    GatewayError,
    NotFoundError,
    RateLimitError,
)
from sdk_build_action.gateway.http import HttpGateway, _flatten_query

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _gateway(
    handler: Callable[[httpx.Request], httpx.Response],
) -> tuple[HttpGateway, list[httpx.Request]]:
    seen: list[httpx.Request] = []

    def record(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return handler(request)

    client = httpx.AsyncClient(
        base_url="https://api.example.test", transport=httpx.MockTransport(record)
    )
    return HttpGateway("https://api.example.test", client=client), seen


def _json(payload: Any, status: int = 200) -> Callable[[httpx.Request], httpx.Response]:
    return lambda _: httpx.Response(status, json=payload)


# ---------------------------------------------------------------------------
# _flatten_query
# ---------------------------------------------------------------------------


def test_flatten_query_nested_uses_brackets() -> None:
    flat = _flatten_query(
        {"project": "acme", "revision": {"openapi.yml": {"hash": "abc"}}, "limit": 1}
    )
    assert flat == {"project": "acme", "revision[openapi.yml][hash]": "abc", "limit": 1}


def test_flatten_query_skips_none_and_encodes_bools() -> None:
    assert _flatten_query({"a": None, "b": True, "c": False}) == {"b": "true", "c": "false"}


# ---------------------------------------------------------------------------
# Routing
# ---------------------------------------------------------------------------


async def test_get_sends_query_params() -> None:
    gw, seen = _gateway(_json({"data": []}))
    result = await gw.call(
        "builds.list",
        {"project": "acme", "limit": 1, "revision": {"openapi.yml": {"hash": "abc"}}},
    )
    assert result == {"data": []}
    request = seen[0]
    assert request.method == "GET"
    assert request.url.path == "/v0/builds"
    assert request.url.params["project"] == "acme"
    assert request.url.params["limit"] == "1"
    assert request.url.params["revision[openapi.yml][hash]"] == "abc"


async def test_path_parameters_are_filled_and_quoted() -> None:
    gw, seen = _gateway(_json({"branch": "preview/feature-x"}))
    await gw.call("branches.retrieve", {"project": "acme", "branch": "preview/feature-x"})
    request = seen[0]
    assert request.url.raw_path == b"/v0/projects/acme/branches/preview%2Ffeature-x"
    assert not request.url.params


async def test_post_sends_json_body_without_path_fields() -> None:
    gw, seen = _gateway(_json({"branch": "main"}))
    await gw.call(
        "branches.create",
        {"project": "acme", "branch": "main", "branch_from": "cfg_1", "force": True},
    )
    request = seen[0]
    assert request.method == "POST"
    assert request.url.path == "/v0/projects/acme/branches"
    assert json.loads(request.content) == {"branch": "main", "branch_from": "cfg_1", "force": True}


async def test_list_response_is_wrapped() -> None:
    gw, _ = _gateway(_json([{"id": "b1"}]))
    assert await gw.call("builds.list", {"project": "acme"}) == {"data": [{"id": "b1"}]}


async def test_empty_response_is_empty_dict() -> None:
    gw, _ = _gateway(lambda _: httpx.Response(200))
    assert await gw.call("builds.create", {"project": "acme", "revision": "a..b"}) == {}


async def test_missing_path_parameter_raises() -> None:
    gw, seen = _gateway(_json({}))
    with pytest.raises(GatewayError, match="build_id"):
        await gw.call("builds.retrieve", {})
    assert seen == []


async def test_unknown_method_raises() -> None:
    gw, _ = _gateway(_json({}))
    with pytest.raises(GatewayError, match="unknown method"):
        await gw.call("projects.delete", {})


async def test_call_before_connect_raises() -> None:
    gw = HttpGateway("https://api.example.test")
    with pytest.raises(GatewayError, match="not connected"):
        await gw.call("builds.list", {})


async def test_connect_sets_bearer_header() -> None:
    gw = HttpGateway("https://api.example.test/", api_key="sk-test")
    await gw.connect()
    try:
        assert gw._client is not None
        assert gw._client.headers["Authorization"] == "Bearer sk-test"
        assert gw._base_url == "https://api.example.test"
    finally:
        await gw.close()
    assert gw._client is None


# ---------------------------------------------------------------------------
# Error mapping
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    ("status", "exc_cls"),
    [
        (404, NotFoundError),
        (401, AuthenticationError),
        (403, AuthenticationError),
        (429, RateLimitError),
        (500, APIStatusError),
        (422, APIStatusError),
    ],
)
async def test_error_status_mapping(status: int, exc_cls: type[APIStatusError]) -> None:
    gw, _ = _gateway(_json({"message": "nope"}, status=status))
    with pytest.raises(exc_cls) as info:
        await gw.call("builds.retrieve", {"build_id": "b1"})
    assert info.value.status_code == status
    assert info.value.code == str(status)
    assert info.value.details == {"message": "nope"}


async def test_error_with_non_json_body() -> None:
    gw, _ = _gateway(lambda _: httpx.Response(502, text="bad gateway"))
    with pytest.raises(APIStatusError) as info:
        await gw.call("builds.retrieve", {"build_id": "b1"})
    assert info.value.details == {"raw": "bad gateway"}


async def test_500_is_not_a_not_found_error() -> None:
    gw, _ = _gateway(_json({}, status=500))
    with pytest.raises(APIStatusError) as info:
        await gw.call("builds.retrieve", {"build_id": "b1"})
    assert not isinstance(info.value, NotFoundError)


async def test_connection_error_is_mapped() -> None:
    def fail(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    gw, _ = _gateway(fail)
    with pytest.raises(APIConnectionError):
        await gw.call("builds.list", {})


async def test_timeout_is_mapped() -> None:
    def slow(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("slow", request=request)

    gw, _ = _gateway(slow)
    with pytest.raises(APITimeoutError):
        await gw.call("builds.list", {})


async def test_non_json_success_raises_gateway_error() -> None:
    gw, _ = _gateway(lambda _: httpx.Response(200, text="<html>"))
    with pytest.raises(GatewayError, match="Non-JSON"):
        await gw.call("builds.list", {})
