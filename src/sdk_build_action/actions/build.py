"""Plain build flow: build explicit inputs against explicit parent revisions."""

from __future__ import annotations

from pydantic import Field

from sdk_build_action.actions.common import ActionInputs, write_outputs
from sdk_build_action.builds.evaluator import check_results
from sdk_build_action.builds.orchestrator import run_builds
from sdk_build_action.builds.resolver import RevisionLike
from sdk_build_action.core.client import BuildClient
from sdk_build_action.github.outputs import group


class BuildInputs(ActionInputs):
    branch: str | None = None
    merge_branch: str | None = None
    parent_revisions: list[RevisionLike] = Field(default_factory=list)
    guess_config: bool = False


async def run_build_action(client: BuildClient, inputs: BuildInputs) -> int:
    """Run one build and return the process exit code."""
    with group("Running builds"):
        results = await run_builds(
            client,
            project=inputs.project,
            parent_revisions=inputs.parent_revisions,
            branch=inputs.branch,
            merge_branch=inputs.merge_branch,
            oas_path=inputs.oas_path,
            config_path=inputs.config_path,
            guess_config=inputs.guess_config,
            commit_message=inputs.commit_message,
            polling=inputs.polling,
        )
        write_outputs(results)

    if results.skipped:
        return 0
    return 0 if check_results(results.outcomes, inputs.fail_on) else 1
