"""Find the most recent build of each candidate ancestor revision."""

from __future__ import annotations

from collections.abc import Mapping, Sequence

import structlog
from pydantic import BaseModel, Field

from sdk_build_action.builds.manager import BuildManager
from sdk_build_action.core.exceptions import is_not_found
from sdk_build_action.core.types import (
    BranchRevision,
    Build,
    HashRevision,
    ParentRevision,
    revision_from,
)
from sdk_build_action.utils.async_helpers import gather_all

logger = structlog.get_logger(__name__)

RevisionLike = str | Mapping[str, str] | BranchRevision | HashRevision


class ParentBuilds(BaseModel):
    """Parent build per candidate revision, in candidate order.

    ``builds[i]`` is ``None`` when candidate *i* had no matching build.
    """

    revisions: list[ParentRevision] = Field(default_factory=list)
    builds: list[Build | None] = Field(default_factory=list)

    @property
    def primary(self) -> Build | None:
        """The first candidate that matched; the baseline for branch resets."""
        return next((build for build in self.builds if build is not None), None)

    @property
    def found(self) -> list[Build]:
        return [build for build in self.builds if build is not None]


async def _find_one(
    builds: BuildManager, project: str, revision: ParentRevision
) -> Build | None:
    logger.info("parent_build_search", project=project, revision=str(revision))
    try:
        matches = await builds.list(project, revision, limit=1)
    except Exception as exc:
        if not is_not_found(exc):
            raise
        logger.info("parent_build_not_found", revision=str(revision), error=str(exc))
        return None
    return matches[0] if matches else None


async def find_parent_builds(
    builds: BuildManager,
    project: str,
    candidates: Sequence[RevisionLike],
) -> ParentBuilds:
    """Look up the latest build of every candidate revision concurrently.

    Args:
        builds: Build service facade.
        project: Project the builds belong to.
        candidates: Ancestor revisions, most preferred first. Strings are
            branch names, mappings are ``{filename: content hash}``.

    Returns:
        A :class:`ParentBuilds` whose slots line up with *candidates*.

    Raises:
        GatewayError: Any lookup failure other than "not found".
    """
    revisions = [revision_from(candidate) for candidate in candidates]
    found = await gather_all(*(_find_one(builds, project, rev) for rev in revisions))
    parents = ParentBuilds(revisions=revisions, builds=list(found))

    logger.info(
        "parent_builds_resolved",
        candidates=len(revisions),
        found=len(parents.found),
    )
    if parents.primary is not None:
        logger.info("parent_build_selected", build_id=parents.primary.id)
    else:
        logger.info("parent_build_missing")
    return parents
