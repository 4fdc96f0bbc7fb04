"""BuildManager — typed wrapper around the service ``builds.*`` namespace."""

from __future__ import annotations

from typing import Any, assert_never

from sdk_build_action.core.types import (
    BranchRevision,
    Build,
    ContentRevision,
    HashRevision,
    ParentRevision,
)
from sdk_build_action.gateway.base import GatewayProtocol


def list_filter(revision: ParentRevision) -> dict[str, Any]:
    """Query parameters selecting builds of *revision*."""
    if isinstance(revision, BranchRevision):
        return {"branch": revision.branch}
    if isinstance(revision, HashRevision):
        return {"revision": {name: {"hash": digest} for name, digest in revision.hashes.items()}}
    assert_never(revision)


def create_revision(revision: ContentRevision | str) -> dict[str, Any] | str:
    """Request body ``revision`` field for a new build.

    A string is passed through as a declarative ``"<branch>..<merge_branch>"``
    expression.
    """
    if isinstance(revision, ContentRevision):
        return {name: {"content": content} for name, content in revision.files.items()}
    if isinstance(revision, str):
        return revision
    assert_never(revision)


class BuildManager:
    """List, create and fetch builds of a project.

    Usage::

        builds = BuildManager(gateway)
        latest = await builds.list("acme", BranchRevision(branch="main"))
        build = await builds.retrieve(latest[0].id)
    """

    def __init__(self, gateway: GatewayProtocol) -> None:
        self._gateway = gateway

    async def list(
        self,
        project: str,
        revision: ParentRevision | None = None,
        *,
        limit: int = 1,
    ) -> list[Build]:
        """Return the most recent builds of *project*, newest first.

        Service method: ``builds.list``
        """
        params: dict[str, Any] = {"project": project, "limit": limit}
        if revision is not None:
            params.update(list_filter(revision))
        result = await self._gateway.call("builds.list", params)
        return [Build.model_validate(item) for item in result.get("data", [])]

    async def create(
        self,
        project: str,
        revision: ContentRevision | str,
        *,
        branch: str | None = None,
        commit_message: str | None = None,
        allow_empty: bool = True,
    ) -> Build | None:
        """Request a new build.

        Service method: ``builds.create``

        Returns:
            The new build descriptor, or ``None`` when the service declined
            to create one (the revision was already built on *branch*).
        """
        params: dict[str, Any] = {
            "project": project,
            "revision": create_revision(revision),
            "allow_empty": allow_empty,
        }
        if branch is not None:
            params["branch"] = branch
        if commit_message is not None:
            params["commit_message"] = commit_message
        result = await self._gateway.call("builds.create", params)
        if not result.get("id"):
            return None
        return Build.model_validate(result)

    async def retrieve(self, build_id: str) -> Build:
        """Fetch the current state of a build.

        Service method: ``builds.retrieve``
        """
        result = await self._gateway.call("builds.retrieve", {"build_id": build_id})
        return Build.model_validate(result)
