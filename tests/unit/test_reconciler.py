"""Tests for branches/reconciler.py — should_reset_branch and reconcile_branch."""
from __future__ import annotations

from typing import Any

import pytest

from helpers import build_payload, outcome_payload
from sdk_build_action.branches.manager import BranchManager
from sdk_build_action.branches.reconciler import reconcile_branch, should_reset_branch
from sdk_build_action.config.manager import ConfigManager
from sdk_build_action.core.exceptions import (
    APIStatusError,
    ConfigurationError,
    GatewayError,
    NotFoundError,
)
from sdk_build_action.core.types import Build
from sdk_build_action.gateway.mock import MockGateway

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _parent(build_id: str = "parent", config_commit: str | None = "cfg_parent") -> Build:
    return Build.model_validate(
        build_payload(build_id, {"python": outcome_payload()}, config_commit=config_commit)
    )


def _branch_with_latest(build_id: str) -> dict[str, Any]:
    return {"branch": "preview/x", "config_commit": "cfg_other", "latest_build": {"id": build_id}}


def _missing(_: object) -> dict[str, Any]:
    raise NotFoundError("no such branch", status_code=404)


# ---------------------------------------------------------------------------
# should_reset_branch
# ---------------------------------------------------------------------------


async def test_no_parent_means_no_reset(connected_mock_gateway: MockGateway) -> None:
    branches = BranchManager(connected_mock_gateway)
    assert not await should_reset_branch(branches, project="acme", branch="x", parent=None)
    assert connected_mock_gateway.calls == []


async def test_no_branch_means_no_reset(connected_mock_gateway: MockGateway) -> None:
    branches = BranchManager(connected_mock_gateway)
    assert not await should_reset_branch(branches, project="acme", branch=None, parent=_parent())
    assert connected_mock_gateway.calls == []


async def test_latest_build_equal_to_parent_needs_no_reset(
    connected_mock_gateway: MockGateway,
) -> None:
    connected_mock_gateway.register("branches.retrieve", _branch_with_latest("parent"))
    branches = BranchManager(connected_mock_gateway)
    assert not await should_reset_branch(
        branches, project="acme", branch="preview/x", parent=_parent("parent")
    )
    connected_mock_gateway.assert_not_called("branches.create")


async def test_latest_build_different_from_parent_needs_reset(
    connected_mock_gateway: MockGateway,
) -> None:
    connected_mock_gateway.register("branches.retrieve", _branch_with_latest("stale"))
    branches = BranchManager(connected_mock_gateway)
    assert await should_reset_branch(
        branches, project="acme", branch="preview/x", parent=_parent("parent")
    )


async def test_branch_without_builds_needs_no_reset(
    connected_mock_gateway: MockGateway,
) -> None:
    connected_mock_gateway.register("branches.retrieve", {"branch": "preview/x"})
    branches = BranchManager(connected_mock_gateway)
    assert not await should_reset_branch(
        branches, project="acme", branch="preview/x", parent=_parent()
    )


async def test_missing_branch_is_created_from_parent(
    connected_mock_gateway: MockGateway,
) -> None:
    connected_mock_gateway.register("branches.retrieve", _missing)
    connected_mock_gateway.register("branches.create", {"branch": "preview/x"})
    branches = BranchManager(connected_mock_gateway)
    assert not await should_reset_branch(
        branches, project="acme", branch="preview/x", parent=_parent()
    )
    connected_mock_gateway.assert_called_with(
        "branches.create",
        {"project": "acme", "branch": "preview/x", "branch_from": "cfg_parent"},
    )


async def test_retrieve_errors_other_than_not_found_propagate(
    connected_mock_gateway: MockGateway,
) -> None:
    def broken(_: object) -> dict[str, Any]:
        raise APIStatusError("boom", status_code=500)

    connected_mock_gateway.register("branches.retrieve", broken)
    with pytest.raises(APIStatusError):
        await should_reset_branch(
            BranchManager(connected_mock_gateway),
            project="acme",
            branch="preview/x",
            parent=_parent(),
        )
    connected_mock_gateway.assert_not_called("branches.create")


async def test_parent_without_config_commit_cannot_seed_branch(
    connected_mock_gateway: MockGateway,
) -> None:
    connected_mock_gateway.register("branches.retrieve", _missing)
    with pytest.raises(GatewayError, match="config commit"):
        await should_reset_branch(
            BranchManager(connected_mock_gateway),
            project="acme",
            branch="preview/x",
            parent=_parent(config_commit=None),
        )


# ---------------------------------------------------------------------------
# reconcile_branch
# ---------------------------------------------------------------------------


async def _reconcile(gw: MockGateway, **kwargs: Any) -> str | None:
    return await reconcile_branch(
        BranchManager(gw),
        ConfigManager(gw),
        project="acme",
        branch="preview/x",
        parent=_parent("parent"),
        **kwargs,
    )


async def test_up_to_date_branch_is_left_alone(connected_mock_gateway: MockGateway) -> None:
    connected_mock_gateway.register("branches.retrieve", _branch_with_latest("parent"))
    assert await _reconcile(connected_mock_gateway) is None
    connected_mock_gateway.assert_not_called("branches.create")
    connected_mock_gateway.assert_not_called("configs.retrieve")


async def test_reset_snapshots_config_before_force_create(
    connected_mock_gateway: MockGateway,
) -> None:
    connected_mock_gateway.register("branches.retrieve", _branch_with_latest("stale"))
    connected_mock_gateway.register(
        "configs.retrieve", {"openapi.stainless.yml": {"content": "current-config"}}
    )
    connected_mock_gateway.register("branches.create", {"branch": "preview/x"})

    config = await _reconcile(connected_mock_gateway)

    assert config == "current-config"
    methods = [m for m, _ in connected_mock_gateway.calls]
    assert methods == ["branches.retrieve", "configs.retrieve", "branches.create"]
    connected_mock_gateway.assert_called_with(
        "branches.create",
        {"project": "acme", "branch": "preview/x", "branch_from": "cfg_parent", "force": True},
    )


async def test_reset_with_guess_config_guesses_from_spec(
    connected_mock_gateway: MockGateway,
) -> None:
    connected_mock_gateway.register("branches.retrieve", _branch_with_latest("stale"))
    connected_mock_gateway.register(
        "configs.guess", {"openapi.stainless.yml": {"content": "guessed-config"}}
    )
    connected_mock_gateway.register("branches.create", {"branch": "preview/x"})

    config = await _reconcile(connected_mock_gateway, spec_content="openapi", guess_config=True)

    assert config == "guessed-config"
    connected_mock_gateway.assert_not_called("configs.retrieve")
    connected_mock_gateway.assert_called_with(
        "configs.guess", {"project": "acme", "branch": "preview/x", "spec": "openapi"}
    )


async def test_explicit_config_is_not_replaced(connected_mock_gateway: MockGateway) -> None:
    connected_mock_gateway.register("branches.retrieve", _branch_with_latest("stale"))
    connected_mock_gateway.register("branches.create", {"branch": "preview/x"})

    config = await _reconcile(connected_mock_gateway, config_content="mine")

    assert config == "mine"
    connected_mock_gateway.assert_not_called("configs.retrieve")
    connected_mock_gateway.assert_called("branches.create")


async def test_guess_config_without_spec_fails_before_any_call(
    connected_mock_gateway: MockGateway,
) -> None:
    with pytest.raises(ConfigurationError):
        await _reconcile(connected_mock_gateway, guess_config=True)
    assert connected_mock_gateway.calls == []


async def test_no_parent_returns_given_config(connected_mock_gateway: MockGateway) -> None:
    config = await reconcile_branch(
        BranchManager(connected_mock_gateway),
        ConfigManager(connected_mock_gateway),
        project="acme",
        branch="preview/x",
        parent=None,
        config_content="mine",
    )
    assert config == "mine"
    assert connected_mock_gateway.calls == []
