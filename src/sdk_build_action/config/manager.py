"""ConfigManager — thin wrapper around the service ``configs.*`` namespace.

Both endpoints answer with a mapping of config filename to file object::

    {"openapi.stainless.yml": {"content": "<yaml>"}}

The action only ever deals with a single config file, so the helpers
return the content of the first entry.
"""

from __future__ import annotations

from typing import Any

from sdk_build_action.gateway.base import GatewayProtocol


def _first_content(result: dict[str, Any]) -> str | None:
    for entry in result.values():
        if isinstance(entry, dict):
            content = entry.get("content")
            return content if isinstance(content, str) else None
    return None


class ConfigManager:
    """Read or infer a branch's SDK configuration.

    Usage::

        configs = ConfigManager(gateway)
        current = await configs.retrieve("acme", branch="preview/feature-x")
        guessed = await configs.guess("acme", branch="main", spec=oas_text)
    """

    def __init__(self, gateway: GatewayProtocol) -> None:
        self._gateway = gateway

    async def retrieve(self, project: str, *, branch: str) -> str | None:
        """Fetch the configuration currently stored on *branch*.

        Service method: ``configs.retrieve``

        Returns:
            The config file content, or ``None`` when the branch has none.
        """
        result = await self._gateway.call(
            "configs.retrieve", {"project": project, "branch": branch}
        )
        return _first_content(result)

    async def guess(self, project: str, *, branch: str, spec: str) -> str | None:
        """Ask the service to infer a configuration from an OpenAPI spec.

        Service method: ``configs.guess``
        """
        result = await self._gateway.call(
            "configs.guess", {"project": project, "branch": branch, "spec": spec}
        )
        return _first_content(result)
