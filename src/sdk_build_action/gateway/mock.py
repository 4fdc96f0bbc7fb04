from __future__ import annotations

from typing import Any, Callable

from sdk_build_action.gateway.base import Gateway


class MockGateway(Gateway):
    """In-memory build service for testing.

    Usage::

        mock = MockGateway()
        mock.register("builds.list", {"data": []})                    # static response
        mock.register("builds.retrieve", lambda p: {"id": p["build_id"]})  # dynamic response
        await mock.connect()

        result = await mock.call("builds.list", {"project": "acme"})
        assert result == {"data": []}

    A callable response may raise (e.g. ``NotFoundError``) to simulate a
    failing remote call.
    """

    def __init__(self) -> None:
        self._connected = False
        self._responses: dict[str, Any] = {}
        self.calls: list[tuple[str, dict[str, Any] | None]] = []

    # ------------------------------------------------------------------ #
    # Registration helpers
    # ------------------------------------------------------------------ #

    def register(
        self,
        method: str,
        response: dict[str, Any] | Callable[[dict[str, Any] | None], dict[str, Any]],
    ) -> None:
        """Register a static dict or a callable that receives params and returns a dict."""
        self._responses[method] = response

    # ------------------------------------------------------------------ #
    # Gateway ABC implementation
    # ------------------------------------------------------------------ #

    async def connect(self) -> None:
        self._connected = True

    async def close(self) -> None:
        self._connected = False

    async def call(
        self,
        method: str,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        if not self._connected:
            raise RuntimeError("MockGateway not connected. Call await mock.connect() first.")
        self.calls.append((method, params))
        if method not in self._responses:
            raise KeyError(f"MockGateway: no response registered for method '{method}'")
        response = self._responses[method]
        if callable(response):
            result = response(params)
        else:
            result = response
        return dict(result)

    # ------------------------------------------------------------------ #
    # Test helpers
    # ------------------------------------------------------------------ #

    def assert_called(self, method: str) -> None:
        methods = [c[0] for c in self.calls]
        assert method in methods, f"Expected call to '{method}', got: {methods}"

    def assert_not_called(self, method: str) -> None:
        methods = [c[0] for c in self.calls]
        assert method not in methods, f"Unexpected call to '{method}': {self.calls}"

    def assert_called_with(
        self, method: str, params: dict[str, Any] | None
    ) -> None:
        assert (method, params) in self.calls, (
            f"Expected call ({method!r}, {params!r}), got: {self.calls}"
        )

    def call_count(self, method: str) -> int:
        return sum(1 for m, _ in self.calls if m == method)

    def calls_to(self, method: str) -> list[dict[str, Any] | None]:
        return [p for m, p in self.calls if m == method]

    def reset(self) -> None:
        self.calls.clear()
        self._responses.clear()
