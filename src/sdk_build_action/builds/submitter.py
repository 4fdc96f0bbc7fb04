"""Build submission: turn the action inputs into exactly one ``builds.create``."""

from __future__ import annotations

import re

import structlog

from sdk_build_action.builds.manager import BuildManager
from sdk_build_action.core.constants import CONFIG_FILENAME, SPEC_FILENAME
from sdk_build_action.core.exceptions import ConfigurationError
from sdk_build_action.core.types import Build, ContentRevision

logger = structlog.get_logger(__name__)

# https://www.conventionalcommits.org/en/v1.0.0/
CONVENTIONAL_COMMIT_RE = re.compile(
    r"^(build|chore|ci|docs|feat|fix|perf|refactor|revert|style|test)(\(.*\))?(!?): .*$"
)


def is_valid_conventional_commit(message: str) -> bool:
    return CONVENTIONAL_COMMIT_RE.match(message) is not None


def build_revision(
    *,
    branch: str | None = None,
    merge_branch: str | None = None,
    spec_content: str | None = None,
    config_content: str | None = None,
) -> ContentRevision | str:
    """Choose what to build: literal file contents or a branch merge.

    Raises:
        ConfigurationError: *merge_branch* combined with file contents, or
            without a target *branch*.
    """
    if merge_branch:
        if spec_content is not None or config_content is not None:
            raise ConfigurationError(
                "Cannot specify both merge_branch and oas_path or config_path"
            )
        if not branch:
            raise ConfigurationError("merge_branch requires a target branch")
        return f"{branch}..{merge_branch}"

    files: dict[str, str] = {}
    if spec_content:
        files[SPEC_FILENAME] = spec_content
    if config_content:
        files[CONFIG_FILENAME] = config_content
    return ContentRevision(files=files)


async def submit_build(
    builds: BuildManager,
    *,
    project: str,
    revision: ContentRevision | str,
    branch: str | None = None,
    commit_message: str | None = None,
) -> Build | None:
    """Create one build and return its descriptor.

    Returns ``None`` when the service declined to create a build; the
    caller treats that as nothing to do.
    """
    build = await builds.create(
        project,
        revision,
        branch=branch,
        commit_message=commit_message,
        allow_empty=True,
    )
    if build is None:
        logger.info("build_not_created", project=project, branch=branch)
        return None

    logger.info(
        "build_created",
        build_id=build.id,
        branch=build.branch or branch,
        languages=build.languages,
    )
    return build
