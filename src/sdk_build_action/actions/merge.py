"""Merge flow: fold a merged PR's preview branch into the default branch."""

from __future__ import annotations

import structlog

from sdk_build_action.actions.common import ActionInputs, post_comment, write_outputs
from sdk_build_action.builds.evaluator import check_results
from sdk_build_action.builds.orchestrator import run_builds
from sdk_build_action.core.client import BuildClient
from sdk_build_action.core.constants import PREVIEW_BRANCH_PREFIX
from sdk_build_action.core.exceptions import ConfigurationError
from sdk_build_action.git.repo import GitRepo
from sdk_build_action.github.comments import MERGE_TITLE, render_summary
from sdk_build_action.github.context import GitHubContext
from sdk_build_action.github.outputs import group

logger = structlog.get_logger(__name__)


class MergeInputs(ActionInputs):
    default_branch: str = "main"


async def run_merge_action(
    client: BuildClient,
    inputs: MergeInputs,
    *,
    git: GitRepo | None = None,
    context: GitHubContext | None = None,
) -> int:
    """Build ``<default>..preview/<head_ref>`` and return the process exit code.

    The file paths are only used to detect whether the merge touched the
    spec or config; the build itself merges branches on the service.
    """
    inputs.check_comment_inputs()
    git = git or GitRepo()
    context = context or GitHubContext.from_env()

    pr = context.pull_request
    if pr is None or not pr.head_ref:
        raise ConfigurationError("The merge flow must run on a pull_request event")
    sha = context.sha or pr.head_sha
    if not sha:
        raise ConfigurationError("Cannot determine the merged commit SHA")

    if not git.is_config_changed(
        f"{sha}^1", sha, oas_path=inputs.oas_path, config_path=inputs.config_path
    ):
        logger.info("merge_skipped", reason="no config files changed")
        return 0

    with group("Running builds"):
        results = await run_builds(
            client,
            project=inputs.project,
            branch=inputs.default_branch,
            merge_branch=f"{PREVIEW_BRANCH_PREFIX}{pr.head_ref}",
            commit_message=inputs.commit_message or pr.title,
            polling=inputs.polling,
        )
        write_outputs(results)

    if results.skipped:
        return 0

    if inputs.make_comment:
        with group("Creating comment"):
            body = render_summary(MERGE_TITLE, results.outcomes, run_url=context.run_url)
            await post_comment(inputs, context, body)

    return 0 if check_results(results.outcomes, inputs.fail_on) else 1
