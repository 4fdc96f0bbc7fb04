"""sdk-build CLI, the entry point invoked by the GitHub Action.

Every option also reads the ``INPUT_<NAME>`` variable GitHub Actions sets for
an action input, so the action metadata only has to pick the subcommand.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any, TypeVar

import click
from pydantic import BaseModel, ValidationError

from sdk_build_action.actions.build import BuildInputs, run_build_action
from sdk_build_action.actions.merge import MergeInputs, run_merge_action
from sdk_build_action.actions.preview import PreviewInputs, run_preview_action
from sdk_build_action.core.client import BuildClient
from sdk_build_action.core.config import ClientConfig, PollingConfig
from sdk_build_action.core.constants import (
    DEFAULT_POLL_INTERVAL_SECONDS,
    DEFAULT_POLL_TIMEOUT_SECONDS,
    FailRunOn,
)
from sdk_build_action.core.exceptions import BuildActionError
from sdk_build_action.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)

_M = TypeVar("_M", bound=BaseModel)


def _input(name: str) -> str:
    return f"INPUT_{name.upper()}"


def common_options(fn: Callable[..., Any]) -> Callable[..., Any]:
    options = [
        click.option("--api-key", envvar=_input("stainless_api_key"), help="Build service API key."),
        click.option("--project", required=True, envvar=_input("project"), help="Project name."),
        click.option("--oas-path", envvar=_input("oas_path"), help="Path to the OpenAPI spec."),
        click.option("--config-path", envvar=_input("config_path"), help="Path to the SDK config."),
        click.option("--commit-message", envvar=_input("commit_message"), help="Conventional commit message."),
        click.option(
            "--fail-on",
            type=click.Choice([t.value for t in FailRunOn]),
            default=FailRunOn.ERROR.value,
            envvar=_input("fail_on"),
            show_default=True,
            help="Lowest conclusion that fails the run.",
        ),
        click.option("--make-comment/--no-make-comment", default=False, envvar=_input("make_comment")),
        click.option("--github-token", envvar=_input("github_token")),
        click.option(
            "--timeout-seconds",
            type=float,
            default=DEFAULT_POLL_TIMEOUT_SECONDS,
            envvar=_input("timeout_seconds"),
            show_default=True,
            help="Polling deadline for all languages.",
        ),
        click.option(
            "--interval-seconds",
            type=float,
            default=DEFAULT_POLL_INTERVAL_SECONDS,
            envvar=_input("interval_seconds"),
            show_default=True,
        ),
        click.option(
            "--documented-spec-path",
            type=click.Path(dir_okay=False, path_type=Path),
            default=PollingConfig().documented_spec_path,
            envvar=_input("documented_spec_path"),
        ),
    ]
    for option in reversed(options):
        fn = option(fn)
    return fn


def _split_common(kwargs: dict[str, Any]) -> tuple[str | None, dict[str, Any]]:
    api_key = kwargs.pop("api_key")
    kwargs["polling"] = PollingConfig(
        timeout_seconds=kwargs.pop("timeout_seconds"),
        interval_seconds=kwargs.pop("interval_seconds"),
        documented_spec_path=kwargs.pop("documented_spec_path"),
    )
    return api_key, kwargs


def _inputs(model: type[_M], kwargs: dict[str, Any]) -> _M:
    try:
        return model(**kwargs)
    except ValidationError as exc:
        raise click.ClickException(str(exc)) from None


def parse_parent_revision(value: str) -> str | dict[str, str]:
    """``{"openapi.yml": "<hash>"}`` JSON selects by content hash; anything else is a branch."""
    if value.lstrip().startswith("{"):
        try:
            parsed = json.loads(value)
        except json.JSONDecodeError as exc:
            raise click.BadParameter(f"invalid JSON revision: {exc}") from exc
        return {str(k): str(v) for k, v in parsed.items()}
    return value


def _execute(api_key: str | None, flow: Callable[[BuildClient], Awaitable[int]]) -> None:
    config = ClientConfig.from_env()
    configure_logging(config.log_level, json=config.log_json)

    async def main() -> int:
        async with await BuildClient.connect(**({"api_key": api_key} if api_key else {})) as client:
            return await flow(client)

    try:
        exit_code = asyncio.run(main())
    except BuildActionError as exc:
        logger.error("action_failed", error=str(exc), error_type=type(exc).__name__, details=exc.details)
        raise SystemExit(1) from None
    raise SystemExit(exit_code)


@click.group()
def cli() -> None:
    """Drive SDK builds from CI."""


@cli.command()
@common_options
@click.option("--branch", envvar=_input("branch"), help="Branch to build on.")
@click.option("--merge-branch", envvar=_input("merge_branch"), help="Build <branch>..<merge-branch>.")
@click.option(
    "--parent-revision",
    "parent_revisions",
    multiple=True,
    help="Ancestor to compare against: a branch or a JSON {filename: hash} map. Repeatable.",
)
@click.option("--guess-config/--no-guess-config", default=False, envvar=_input("guess_config"))
def build(**kwargs: Any) -> None:
    """Build explicit inputs and wait for every language."""
    api_key, kwargs = _split_common(kwargs)
    kwargs["parent_revisions"] = [parse_parent_revision(v) for v in kwargs["parent_revisions"]]
    inputs = _inputs(BuildInputs, kwargs)
    _execute(api_key, lambda client: run_build_action(client, inputs))


@cli.command()
@common_options
@click.option("--base-sha", required=True, envvar=_input("base_sha"))
@click.option("--base-ref", required=True, envvar=_input("base_ref"))
@click.option("--head-sha", required=True, envvar=_input("head_sha"))
@click.option("--head-ref", envvar=_input("head_ref"))
@click.option("--default-branch", default="main", envvar=_input("default_branch"), show_default=True)
@click.option("--branch", envvar=_input("branch"), help="Defaults to preview/<head-ref>.")
def preview(**kwargs: Any) -> None:
    """Build a pull request preview against its base."""
    api_key, kwargs = _split_common(kwargs)
    inputs = _inputs(PreviewInputs, kwargs)
    _execute(api_key, lambda client: run_preview_action(client, inputs))


@cli.command()
@common_options
@click.option("--default-branch", default="main", envvar=_input("default_branch"), show_default=True)
def merge(**kwargs: Any) -> None:
    """Merge a PR's preview branch into the default branch."""
    api_key, kwargs = _split_common(kwargs)
    inputs = _inputs(MergeInputs, kwargs)
    _execute(api_key, lambda client: run_merge_action(client, inputs))


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
