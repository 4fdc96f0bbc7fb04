"""BranchManager — wrapper around the service ``branches.*`` namespace."""

from __future__ import annotations

from typing import Any

from sdk_build_action.core.types import Branch
from sdk_build_action.gateway.base import GatewayProtocol


class BranchManager:
    def __init__(self, gateway: GatewayProtocol) -> None:
        self._gateway = gateway

    async def retrieve(self, project: str, branch: str) -> Branch:
        """Fetch a branch with its latest build.

        Service method: ``branches.retrieve``

        Raises:
            NotFoundError: The branch does not exist.
        """
        result = await self._gateway.call(
            "branches.retrieve", {"project": project, "branch": branch}
        )
        return Branch.from_service(result)

    async def create(
        self,
        project: str,
        branch: str,
        *,
        branch_from: str,
        force: bool = False,
    ) -> Branch:
        """Create *branch* from a config commit (or another branch).

        Service method: ``branches.create``
        With ``force=True`` an existing branch is reset to *branch_from*.
        """
        params: dict[str, Any] = {
            "project": project,
            "branch": branch,
            "branch_from": branch_from,
        }
        if force:
            params["force"] = True
        result = await self._gateway.call("branches.create", params)
        return Branch.from_service({"branch": branch, **result})
