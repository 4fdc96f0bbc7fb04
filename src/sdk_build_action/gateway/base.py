from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class GatewayProtocol(Protocol):
    """Structural type for any build service gateway.

    All managers accept this Protocol so they work with any backend
    (HttpGateway, MockGateway, etc.) without importing concrete classes.
    """

    async def call(
        self,
        method: str,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]: ...


class Gateway(ABC):
    """Abstract base for all build service gateways.

    ``call()`` is the single primitive: a dotted method name such as
    ``"builds.retrieve"`` plus a flat parameter dict, answered with the
    decoded JSON body.  The typed surface lives in the managers.
    """

    # ------------------------------------------------------------------ #
    # Connection lifecycle
    # ------------------------------------------------------------------ #

    @abstractmethod
    async def connect(self) -> None: ...

    @abstractmethod
    async def close(self) -> None: ...

    # ------------------------------------------------------------------ #
    # Protocol primitive
    # ------------------------------------------------------------------ #

    @abstractmethod
    async def call(
        self,
        method: str,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]: ...

    async def __aenter__(self) -> Gateway:
        await self.connect()
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()
