"""Pull request preview flow.

Builds the PR head on ``preview/<head_ref>`` and compares it against the
closest existing build of its base: the build of the merge-base file
contents, then the base branch's own preview branch, then the default
branch.
"""

from __future__ import annotations

import structlog

from sdk_build_action.actions.common import ActionInputs, post_comment, write_outputs
from sdk_build_action.builds.evaluator import check_results
from sdk_build_action.builds.orchestrator import run_builds
from sdk_build_action.builds.resolver import RevisionLike
from sdk_build_action.core.client import BuildClient
from sdk_build_action.core.constants import CONFIG_FILENAME, PREVIEW_BRANCH_PREFIX, SPEC_FILENAME
from sdk_build_action.git.repo import GitRepo
from sdk_build_action.github.comments import PREVIEW_TITLE, render_summary
from sdk_build_action.github.context import GitHubContext
from sdk_build_action.github.outputs import group

logger = structlog.get_logger(__name__)


class PreviewInputs(ActionInputs):
    base_sha: str
    base_ref: str
    head_sha: str
    head_ref: str | None = None
    default_branch: str = "main"
    branch: str | None = None
    """Build branch; defaults to ``preview/<head_ref>``."""

    @property
    def preview_branch(self) -> str | None:
        if self.branch:
            return self.branch
        if self.head_ref:
            return f"{PREVIEW_BRANCH_PREFIX}{self.head_ref}"
        return None


def parent_candidates(
    git: GitRepo,
    inputs: PreviewInputs,
    merge_base_sha: str,
) -> list[RevisionLike]:
    """Ancestor revisions for a preview, most specific first."""
    candidates: list[RevisionLike] = []

    hashes: dict[str, str] = {}
    for path, filename in ((inputs.oas_path, SPEC_FILENAME), (inputs.config_path, CONFIG_FILENAME)):
        if not path:
            continue
        digest = git.file_hash(merge_base_sha, path)
        if digest is not None:
            hashes[filename] = digest
    if hashes:
        candidates.append(hashes)

    if inputs.base_ref != inputs.default_branch:
        candidates.append(f"{PREVIEW_BRANCH_PREFIX}{inputs.base_ref}")

    candidates.append(inputs.default_branch)
    return candidates


async def run_preview_action(
    client: BuildClient,
    inputs: PreviewInputs,
    *,
    git: GitRepo | None = None,
    context: GitHubContext | None = None,
) -> int:
    """Build a PR preview and return the process exit code."""
    inputs.check_comment_inputs()
    git = git or GitRepo()
    context = context or GitHubContext.from_env()

    with group("Getting parent revision"):
        merge_base_sha = git.find_merge_base(inputs.base_sha, inputs.head_sha)
        if not git.is_config_changed(
            merge_base_sha,
            inputs.head_sha,
            oas_path=inputs.oas_path,
            config_path=inputs.config_path,
        ):
            logger.info("preview_skipped", reason="no config files changed")
            return 0
        candidates = parent_candidates(git, inputs, merge_base_sha)

    with group("Running builds"):
        git.checkout(inputs.head_sha)
        results = await run_builds(
            client,
            project=inputs.project,
            parent_revisions=candidates,
            branch=inputs.preview_branch,
            oas_path=inputs.oas_path,
            config_path=inputs.config_path,
            guess_config=not inputs.config_path,
            commit_message=inputs.commit_message,
            polling=inputs.polling,
        )
        write_outputs(results)

    if results.skipped:
        return 0

    if inputs.make_comment:
        with group("Creating comment"):
            body = render_summary(
                PREVIEW_TITLE,
                results.outcomes,
                results.base_outcomes,
                run_url=context.run_url,
            )
            await post_comment(inputs, context, body)

    return 0 if check_results(results.outcomes, inputs.fail_on) else 1
