"""End-to-end build orchestration.

``run_builds`` chains the stages of one action run::

    resolve parent builds → reconcile branch → submit build → poll head + parents

Inputs are validated up front, so a bad combination fails before the build
service is contacted.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Sequence
from pathlib import Path

import structlog
from pydantic import BaseModel, Field

from sdk_build_action.branches.reconciler import reconcile_branch
from sdk_build_action.builds.poller import Clock, Sleep, poll_builds, write_documented_spec
from sdk_build_action.builds.resolver import RevisionLike, find_parent_builds
from sdk_build_action.builds.submitter import (
    build_revision,
    is_valid_conventional_commit,
    submit_build,
)
from sdk_build_action.core.client import BuildClient
from sdk_build_action.core.config import PollingConfig
from sdk_build_action.core.exceptions import ConfigurationError
from sdk_build_action.core.types import Outcomes

logger = structlog.get_logger(__name__)


class BuildResults(BaseModel):
    build_id: str | None = None
    """``None`` when the service declined to create a build."""
    outcomes: Outcomes = Field(default_factory=dict)
    base_outcomes: Outcomes | None = None
    """Outcomes of the primary parent build, when one was found."""
    parent_outcomes: list[Outcomes | None] = Field(default_factory=list)
    """Outcomes per candidate parent revision, in candidate order."""
    documented_spec_path: Path | None = None

    @property
    def skipped(self) -> bool:
        return self.build_id is None


def validate_inputs(
    *,
    merge_branch: str | None = None,
    oas_path: str | None = None,
    config_path: str | None = None,
    guess_config: bool = False,
    commit_message: str | None = None,
) -> None:
    """Reject inconsistent inputs.

    Raises:
        ConfigurationError: On any mutually exclusive or missing input.
    """
    if merge_branch and (oas_path or config_path):
        raise ConfigurationError("Cannot specify both merge_branch and oas_path or config_path")
    if guess_config and (config_path or not oas_path):
        raise ConfigurationError("If guess_config is true, must have oas_path and no config_path")
    if commit_message and not is_valid_conventional_commit(commit_message):
        raise ConfigurationError(
            f"Invalid commit message: {commit_message}. Please follow the Conventional "
            "Commits format: https://www.conventionalcommits.org/en/v1.0.0/"
        )


def _read(path: str | None, what: str) -> str | None:
    if not path:
        return None
    try:
        return Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigurationError(f"Cannot read {what} at {path}: {exc}") from exc


async def run_builds(
    client: BuildClient,
    *,
    project: str,
    parent_revisions: Sequence[RevisionLike] = (),
    branch: str | None = None,
    merge_branch: str | None = None,
    oas_path: str | None = None,
    config_path: str | None = None,
    guess_config: bool = False,
    commit_message: str | None = None,
    polling: PollingConfig | None = None,
    clock: Clock = time.monotonic,
    sleep: Sleep = asyncio.sleep,
) -> BuildResults:
    """Build *project* and wait for the outcome of every target language.

    Args:
        client: Connected build service client.
        project: Project to build.
        parent_revisions: Candidate ancestors, most preferred first; branch
            names or ``{filename: content hash}`` mappings.
        branch: Branch the new build targets.
        merge_branch: Build ``branch..merge_branch`` instead of file contents.
        oas_path: Local OpenAPI spec to upload.
        config_path: Local SDK config to upload.
        guess_config: Derive the config from the spec on branch resets.
        commit_message: Conventional-commit message for generated SDK commits.
        polling: Deadline, interval and documented spec location.

    Returns:
        The head outcomes plus the outcomes of each parent build.

    Raises:
        ConfigurationError: Invalid inputs (no remote call made).
        GatewayError: Any build service failure other than "not found".
    """
    validate_inputs(
        merge_branch=merge_branch,
        oas_path=oas_path,
        config_path=config_path,
        guess_config=guess_config,
        commit_message=commit_message,
    )
    polling = polling or PollingConfig()
    spec_content = _read(oas_path, "OpenAPI spec")
    config_content = _read(config_path, "SDK config")

    parents = await find_parent_builds(client.builds, project, parent_revisions)

    config_content = await reconcile_branch(
        client.branches,
        client.configs,
        project=project,
        branch=branch,
        parent=parents.primary,
        config_content=config_content,
        spec_content=spec_content,
        guess_config=guess_config,
    )

    if merge_branch:
        revision = build_revision(branch=branch, merge_branch=merge_branch)
    else:
        revision = build_revision(spec_content=spec_content, config_content=config_content)

    build = await submit_build(
        client.builds,
        project=project,
        revision=revision,
        branch=branch,
        commit_message=commit_message,
    )
    if build is None:
        logger.info("no_build_created")
        return BuildResults()

    head, parent_results = await poll_builds(
        client.builds,
        build,
        parents.builds,
        polling=polling,
        clock=clock,
        sleep=sleep,
    )

    documented_spec_path = None
    if head.documented_spec is not None:
        documented_spec_path = write_documented_spec(
            head.documented_spec, polling.documented_spec_path
        )

    parent_outcomes = [r.outcomes if r is not None else None for r in parent_results]
    base_outcomes = next((o for o in parent_outcomes if o is not None), None)
    return BuildResults(
        build_id=build.id,
        outcomes=head.outcomes,
        base_outcomes=base_outcomes,
        parent_outcomes=parent_outcomes,
        documented_spec_path=documented_spec_path,
    )
