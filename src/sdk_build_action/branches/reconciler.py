"""Point a build branch at the chosen parent build before building.

A branch that has drifted from the parent build is force-reset to the
parent's config commit.  Because the reset also rewinds the branch's stored
configuration, the current configuration is snapshotted (or re-guessed from
the spec) first, so the next build carries it forward.
"""

from __future__ import annotations

import structlog

from sdk_build_action.branches.manager import BranchManager
from sdk_build_action.config.manager import ConfigManager
from sdk_build_action.core.exceptions import ConfigurationError, GatewayError, is_not_found
from sdk_build_action.core.types import Build

logger = structlog.get_logger(__name__)


def _config_commit(parent: Build) -> str:
    if not parent.config_commit:
        raise GatewayError(f"Parent build {parent.id} has no config commit to branch from")
    return parent.config_commit


async def should_reset_branch(
    branches: BranchManager,
    *,
    project: str,
    branch: str | None,
    parent: Build | None,
) -> bool:
    """Decide whether *branch* must be force-reset to *parent*.

    A missing branch is created from the parent's config commit on the spot
    and needs no reset.  An existing branch needs one only when its latest
    build is not the parent build.
    """
    if parent is None or not branch:
        return False

    try:
        current = await branches.retrieve(project, branch)
    except Exception as exc:
        if not is_not_found(exc):
            raise
        logger.info(
            "branch_create",
            branch=branch,
            branch_from=parent.config_commit,
        )
        await branches.create(project, branch, branch_from=_config_commit(parent))
        return False

    latest = current.latest_build
    if latest is None or not latest.id:
        return False

    logger.info("branch_latest_build", branch=branch, build_id=latest.id)
    if latest.id == parent.id:
        logger.info("branch_up_to_date", branch=branch, build_id=latest.id)
        return False
    return True


async def reconcile_branch(
    branches: BranchManager,
    configs: ConfigManager,
    *,
    project: str,
    branch: str | None,
    parent: Build | None,
    config_content: str | None = None,
    spec_content: str | None = None,
    guess_config: bool = False,
) -> str | None:
    """Reset *branch* onto *parent* when it has drifted.

    Args:
        branches: Branch service facade.
        configs: Config service facade.
        project: Project name.
        branch: Branch the next build will target.
        parent: Primary parent build, if any.
        config_content: Config supplied by the caller; when set, nothing is
            preserved from the branch.
        spec_content: OpenAPI spec content, required for ``guess_config``.
        guess_config: Re-derive the config from the spec instead of
            snapshotting the branch's current config.

    Returns:
        The config content to submit with the next build (the caller's,
        the preserved one, or ``None``).

    Raises:
        ConfigurationError: ``guess_config`` without spec content.
    """
    if guess_config and spec_content is None:
        raise ConfigurationError("guess_config requires the OpenAPI spec content")

    if not await should_reset_branch(branches, project=project, branch=branch, parent=parent):
        return config_content
    assert branch is not None and parent is not None  # noqa: S101

    if config_content is None:
        if guess_config:
            logger.info("config_guess_before_reset", branch=branch)
            config_content = await configs.guess(project, branch=branch, spec=spec_content or "")
        else:
            logger.info("config_snapshot_before_reset", branch=branch)
            config_content = await configs.retrieve(project, branch=branch)

    logger.info(
        "branch_reset",
        branch=branch,
        parent_build_id=parent.id,
        config_commit=parent.config_commit,
    )
    await branches.create(project, branch, branch_from=_config_commit(parent), force=True)
    return config_content
