"""Pieces shared by the build, preview and merge flows."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from sdk_build_action.builds.orchestrator import BuildResults
from sdk_build_action.core.config import PollingConfig
from sdk_build_action.core.constants import FailRunOn
from sdk_build_action.core.exceptions import ConfigurationError
from sdk_build_action.core.types import Outcomes
from sdk_build_action.github.comments import CommentManager
from sdk_build_action.github.context import GitHubContext
from sdk_build_action.github.outputs import set_output


class ActionInputs(BaseModel):
    project: str
    oas_path: str | None = None
    config_path: str | None = None
    commit_message: str | None = None
    fail_on: FailRunOn = FailRunOn.ERROR
    make_comment: bool = False
    github_token: str | None = None
    polling: PollingConfig = Field(default_factory=PollingConfig)

    def check_comment_inputs(self) -> None:
        if self.make_comment and not self.github_token:
            raise ConfigurationError("github_token is required to make a comment")


def dump_outcomes(outcomes: Outcomes | None) -> dict[str, Any] | None:
    if outcomes is None:
        return None
    return {language: outcome.model_dump(mode="json") for language, outcome in outcomes.items()}


def write_outputs(results: BuildResults) -> None:
    set_output("outcomes", dump_outcomes(results.outcomes))
    set_output("base_outcomes", dump_outcomes(results.base_outcomes))
    set_output("parent_outcomes", [dump_outcomes(o) for o in results.parent_outcomes])
    if results.documented_spec_path is not None:
        set_output("documented_spec_path", str(results.documented_spec_path))


async def post_comment(inputs: ActionInputs, context: GitHubContext, body: str) -> None:
    pr = context.pull_request
    if pr is None:
        raise ConfigurationError("make_comment requires a pull_request event")
    assert inputs.github_token is not None  # noqa: S101
    async with CommentManager(
        inputs.github_token,
        context.owner,
        context.repo,
        issue_number=pr.number,
        api_url=context.api_url,
    ) as comments:
        await comments.upsert(body)
