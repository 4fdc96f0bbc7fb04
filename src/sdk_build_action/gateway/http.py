from __future__ import annotations

import string
from typing import Any
from urllib.parse import quote

import httpx
import structlog

from sdk_build_action.core.exceptions import (
    APIConnectionError,
    APIStatusError,
    APITimeoutError,
    AuthenticationError,
    GatewayError,
    NotFoundError,
    RateLimitError,
)
from sdk_build_action.gateway.base import Gateway

logger = structlog.get_logger(__name__)

# Method → (HTTP verb, URL template) routing table.
# Template fields are filled from (and removed from) the call params.
_METHOD_ROUTES: dict[str, tuple[str, str]] = {
    # builds
    "builds.list": ("GET", "/v0/builds"),
    "builds.create": ("POST", "/v0/builds"),
    "builds.retrieve": ("GET", "/v0/builds/{build_id}"),
    # branches
    "branches.retrieve": ("GET", "/v0/projects/{project}/branches/{branch}"),
    "branches.create": ("POST", "/v0/projects/{project}/branches"),
    # configs
    "configs.retrieve": ("GET", "/v0/projects/{project}/configs"),
    "configs.guess": ("POST", "/v0/projects/{project}/configs/guess"),
}


def _template_fields(template: str) -> list[str]:
    return [field for _, field, _, _ in string.Formatter().parse(template) if field]


def _flatten_query(params: dict[str, Any], prefix: str = "") -> dict[str, Any]:
    """Flatten nested mappings into bracket notation.

    ``{"revision": {"openapi.yml": {"hash": "abc"}}}`` becomes
    ``{"revision[openapi.yml][hash]": "abc"}``.
    """
    flat: dict[str, Any] = {}
    for key, value in params.items():
        name = f"{prefix}[{key}]" if prefix else str(key)
        if value is None:
            continue
        if isinstance(value, dict):
            flat.update(_flatten_query(value, name))
        elif isinstance(value, bool):
            flat[name] = "true" if value else "false"
        else:
            flat[name] = value
    return flat


def _error_for_status(status: int) -> type[APIStatusError]:
    if status == 404:
        return NotFoundError
    if status in (401, 403):
        return AuthenticationError
    if status == 429:
        return RateLimitError
    return APIStatusError


class HttpGateway(Gateway):
    """REST adapter for the SDK build service.

    Translates the method-based calls used throughout the package into HTTP
    requests against the service's ``/v0`` API.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        *,
        timeout: float = 60.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Create an HttpGateway.

        Args:
            base_url: Base URL of the build service API,
                e.g. ``"https://api.stainless.com"``.
            api_key: Optional Bearer token sent as
                ``Authorization: Bearer <api_key>``.
            timeout: HTTP request timeout in seconds.
            client: Pre-built :class:`httpx.AsyncClient` (tests inject one
                backed by :class:`httpx.MockTransport`).
        """
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._timeout = timeout
        self._client: httpx.AsyncClient | None = client

    # ------------------------------------------------------------------ #
    # Connection lifecycle
    # ------------------------------------------------------------------ #

    async def connect(self) -> None:
        """Create the underlying :class:`httpx.AsyncClient`."""
        if self._client is not None:
            return

        headers: dict[str, str] = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"

        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers=headers,
            timeout=self._timeout,
        )

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    # ------------------------------------------------------------------ #
    # Method call → HTTP translation
    # ------------------------------------------------------------------ #

    async def call(
        self,
        method: str,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Translate a method call to an HTTP request.

        Args:
            method: Method name, e.g. ``"builds.retrieve"``.
            params: Path parameters plus query (GET) or body (POST) fields.

        Returns:
            Parsed JSON response body as a dict.

        Raises:
            NotFoundError: HTTP 404.
            AuthenticationError: HTTP 401 / 403.
            RateLimitError: HTTP 429.
            APIStatusError: Any other HTTP error status.
            APITimeoutError: The request timed out.
            APIConnectionError: Transport failure.
            GatewayError: Unknown method or non-JSON response.
        """
        if self._client is None:
            raise GatewayError("HttpGateway not connected. Call await gw.connect() first.")

        if method not in _METHOD_ROUTES:
            raise GatewayError(f"HttpGateway: unknown method '{method}'.")

        verb, template = _METHOD_ROUTES[method]
        body = dict(params or {})
        path_values: dict[str, str] = {}
        for field in _template_fields(template):
            if field not in body:
                raise GatewayError(f"Missing path parameter '{field}' for {method}")
            path_values[field] = quote(str(body.pop(field)), safe="")
        path = template.format(**path_values)

        logger.debug("service_request", method=method, verb=verb, path=path)
        try:
            if verb == "GET":
                resp = await self._client.get(path, params=_flatten_query(body) or None)
            elif verb == "POST":
                resp = await self._client.post(path, json=body)
            else:
                raise GatewayError(f"Unsupported HTTP verb: {verb}")
        except httpx.TimeoutException as exc:
            raise APITimeoutError(f"Request timed out for {method}: {exc}") from exc
        except httpx.RequestError as exc:
            raise APIConnectionError(f"HTTP request failed for {method}: {exc}") from exc

        if resp.status_code >= 400:
            try:
                err_body: dict[str, Any] = resp.json()
            except ValueError:
                err_body = {"raw": resp.text}
            error_cls = _error_for_status(resp.status_code)
            raise error_cls(
                f"Build service returned HTTP {resp.status_code} for {method}",
                code=str(resp.status_code),
                details=err_body,
                status_code=resp.status_code,
            )

        if not resp.content:
            return {}

        try:
            result = resp.json()
        except ValueError as exc:
            raise GatewayError(
                f"Non-JSON response from build service for {method}: {resp.text[:200]}"
            ) from exc

        if isinstance(result, list):
            return {"data": result}
        return dict(result)
