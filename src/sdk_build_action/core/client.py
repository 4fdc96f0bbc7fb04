from __future__ import annotations

from typing import Any

from sdk_build_action.branches.manager import BranchManager
from sdk_build_action.builds.manager import BuildManager
from sdk_build_action.config.manager import ConfigManager
from sdk_build_action.core.config import ClientConfig
from sdk_build_action.core.exceptions import ConfigurationError
from sdk_build_action.gateway.base import Gateway


class BuildClient:
    """Top-level client for the SDK build service.

    Create via the :meth:`connect` factory method::

        client = await BuildClient.connect(api_key="...")
        builds = await client.builds.list("acme", BranchRevision(branch="main"))

    Or use as an async context manager::

        async with await BuildClient.connect() as client:
            build = await client.builds.retrieve("bld_123")
    """

    def __init__(self, *, config: ClientConfig, gateway: Gateway) -> None:
        self._config = config
        self._gateway = gateway

        # Lazy-initialised manager instances
        self._builds: BuildManager | None = None
        self._branches: BranchManager | None = None
        self._configs: ConfigManager | None = None

    # ------------------------------------------------------------------ #
    # Factory
    # ------------------------------------------------------------------ #

    @classmethod
    async def connect(cls, **kwargs: Any) -> BuildClient:
        """Connect to the build service over HTTP.

        Any ``ClientConfig`` field can be passed as a keyword argument;
        unset fields are read from the environment (see
        :meth:`ClientConfig.from_env`).

        Raises:
            ConfigurationError: When no API key is available.
        """
        from sdk_build_action.gateway.http import HttpGateway  # noqa: PLC0415

        base = ClientConfig.from_env().model_dump()
        base.update({k: v for k, v in kwargs.items() if k in ClientConfig.model_fields})
        config = ClientConfig(**base)
        if not config.api_key:
            raise ConfigurationError(
                "No API key configured. Set stainless_api_key or SDK_BUILD_API_KEY."
            )

        gateway = HttpGateway(config.base_url, api_key=config.api_key, timeout=config.timeout)
        await gateway.connect()
        return cls(config=config, gateway=gateway)

    # ------------------------------------------------------------------ #
    # Properties
    # ------------------------------------------------------------------ #

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def gateway(self) -> Gateway:
        return self._gateway

    @property
    def builds(self) -> BuildManager:
        if self._builds is None:
            self._builds = BuildManager(self._gateway)
        return self._builds

    @property
    def branches(self) -> BranchManager:
        if self._branches is None:
            self._branches = BranchManager(self._gateway)
        return self._branches

    @property
    def configs(self) -> ConfigManager:
        if self._configs is None:
            self._configs = ConfigManager(self._gateway)
        return self._configs

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #

    async def close(self) -> None:
        await self._gateway.close()

    async def __aenter__(self) -> BuildClient:
        return self

    async def __aexit__(self, *_: object) -> None:
        await self.close()
