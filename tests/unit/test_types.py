"""Tests for core/types.py — revisions, outcomes and build descriptors."""
from __future__ import annotations

import pytest
from pydantic import TypeAdapter, ValidationError

from helpers import build_payload, outcome_payload
from sdk_build_action.core.constants import Conclusion, StepStatus
from sdk_build_action.core.types import (
    Branch,
    BranchRevision,
    Build,
    BuildStep,
    ContentRevision,
    DocumentedSpec,
    HashRevision,
    Outcome,
    Revision,
    revision_from,
)

# ---------------------------------------------------------------------------
# Revisions
# ---------------------------------------------------------------------------


def test_revision_from_string_is_branch() -> None:
    rev = revision_from("main")
    assert rev == BranchRevision(branch="main")
    assert str(rev) == "main"


def test_revision_from_mapping_is_hashes() -> None:
    rev = revision_from({"openapi.yml": "abc", "openapi.stainless.yml": "def"})
    assert isinstance(rev, HashRevision)
    assert rev.hashes == {"openapi.yml": "abc", "openapi.stainless.yml": "def"}
    assert str(rev) == "openapi.stainless.yml@def, openapi.yml@abc"


def test_revision_from_passes_models_through() -> None:
    rev = HashRevision(hashes={"openapi.yml": "abc"})
    assert revision_from(rev) is rev


def test_revision_union_discriminates_on_kind() -> None:
    adapter = TypeAdapter(Revision)
    assert isinstance(adapter.validate_python({"kind": "branch", "branch": "x"}), BranchRevision)
    assert isinstance(adapter.validate_python({"kind": "hashes", "hashes": {}}), HashRevision)
    assert isinstance(adapter.validate_python({"kind": "content", "files": {}}), ContentRevision)
    with pytest.raises(ValidationError):
        adapter.validate_python({"kind": "tag", "tag": "v1"})


def test_revisions_are_frozen() -> None:
    rev = BranchRevision(branch="main")
    with pytest.raises(ValidationError):
        rev.branch = "other"  # type: ignore[misc]


# ---------------------------------------------------------------------------
# Outcomes
# ---------------------------------------------------------------------------


def test_timed_out_outcome_has_no_commit_or_pr() -> None:
    outcome = Outcome.timed_out()
    assert outcome.conclusion == Conclusion.TIMED_OUT
    assert outcome.commit is None
    assert outcome.merge_conflict_pr is None
    assert not outcome.is_resolved


def test_outcome_with_commit_is_resolved() -> None:
    outcome = Outcome.model_validate(outcome_payload("warning"))
    assert outcome.is_resolved
    assert outcome.commit is not None
    assert outcome.commit.repo.name == "acme-python"


def test_outcome_with_merge_conflict_pr_is_resolved() -> None:
    outcome = Outcome.model_validate(
        outcome_payload("merge_conflict", commit=False, merge_conflict_pr=True)
    )
    assert outcome.is_resolved
    assert outcome.merge_conflict_pr is not None
    assert outcome.merge_conflict_pr.number == 7


def test_outcome_accepts_unknown_conclusion() -> None:
    outcome = Outcome(conclusion="something_new")
    assert outcome.conclusion == "something_new"


# ---------------------------------------------------------------------------
# Builds
# ---------------------------------------------------------------------------


def test_build_languages_and_steps() -> None:
    build = Build.model_validate(
        build_payload("b1", {"python": outcome_payload(), "node": "in_progress"})
    )
    assert build.languages == ["python", "node"]
    python = build.step("python")
    node = build.step("node")
    assert python is not None and python.is_completed
    assert node is not None and not node.is_completed
    assert node.status == StepStatus.IN_PROGRESS
    assert build.step("go") is None


def test_completed_status_without_outcome_is_not_completed() -> None:
    step = BuildStep(status=StepStatus.COMPLETED)
    assert not step.is_completed


def test_target_without_commit_step_defaults_to_not_started() -> None:
    build = Build.model_validate({"id": "b1", "targets": {"go": {}}})
    step = build.step("go")
    assert step is not None
    assert step.status == StepStatus.NOT_STARTED


def test_documented_spec_content_form_is_usable() -> None:
    spec = DocumentedSpec(type="content", content="openapi: 3.1.0")
    assert spec.usable_content == "openapi: 3.1.0"


def test_documented_spec_url_form_is_ignored() -> None:
    spec = DocumentedSpec(type="url", url="https://example.com/spec.yml")
    assert spec.usable_content is None


# ---------------------------------------------------------------------------
# Branches
# ---------------------------------------------------------------------------


def test_branch_from_service_with_latest_build() -> None:
    branch = Branch.from_service(
        {"branch": "main", "config_commit": "cfg", "latest_build": {"id": "b9"}}
    )
    assert branch.latest_build is not None
    assert branch.latest_build.id == "b9"


def test_branch_from_service_with_latest_build_id() -> None:
    branch = Branch.from_service({"branch": "main", "latest_build_id": "b9"})
    assert branch.latest_build is not None
    assert branch.latest_build.id == "b9"


def test_branch_from_service_without_build() -> None:
    branch = Branch.from_service({"branch": "main"})
    assert branch.latest_build is None
