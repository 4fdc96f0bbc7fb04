from __future__ import annotations

from collections.abc import Mapping
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field

from sdk_build_action.core.constants import Conclusion, StepStatus

# ---------------------------------------------------------------------------
# Revisions
# ---------------------------------------------------------------------------


class BranchRevision(BaseModel):
    """The latest state of a branch on the build service."""

    kind: Literal["branch"] = "branch"
    branch: str

    model_config = {"frozen": True}

    def __str__(self) -> str:
        return self.branch


class HashRevision(BaseModel):
    """A revision identified by the content hash of each input file.

    ``hashes`` maps the logical filename (``openapi.yml``,
    ``openapi.stainless.yml``) to the hash of its content.
    """

    kind: Literal["hashes"] = "hashes"
    hashes: dict[str, str]

    model_config = {"frozen": True}

    def __str__(self) -> str:
        return ", ".join(f"{name}@{digest}" for name, digest in sorted(self.hashes.items()))


class ContentRevision(BaseModel):
    """Literal file contents to build, keyed by logical filename."""

    kind: Literal["content"] = "content"
    files: dict[str, str]

    model_config = {"frozen": True}

    def __str__(self) -> str:
        return f"content({', '.join(sorted(self.files))})"


Revision = Annotated[
    Union[BranchRevision, HashRevision, ContentRevision],
    Field(discriminator="kind"),
]
ParentRevision = Union[BranchRevision, HashRevision]


def revision_from(value: str | Mapping[str, str] | BranchRevision | HashRevision) -> ParentRevision:
    """Coerce a loose candidate into a lookup revision.

    A string names a branch; a mapping is read as ``{filename: hash}``.
    """
    if isinstance(value, (BranchRevision, HashRevision)):
        return value
    if isinstance(value, str):
        return BranchRevision(branch=value)
    return HashRevision(hashes=dict(value))


# ---------------------------------------------------------------------------
# Outcomes
# ---------------------------------------------------------------------------


class RepoRef(BaseModel):
    owner: str
    name: str
    branch: str | None = None

    model_config = {"frozen": True}


class Commit(BaseModel):
    repo: RepoRef
    sha: str

    model_config = {"frozen": True}


class MergeConflictPR(BaseModel):
    number: int
    repo: RepoRef

    model_config = {"frozen": True}


class Outcome(BaseModel):
    """Terminal result of one target language's commit step."""

    conclusion: str
    commit: Commit | None = None
    merge_conflict_pr: MergeConflictPR | None = None

    model_config = {"frozen": True}

    @classmethod
    def timed_out(cls) -> Outcome:
        """The outcome recorded for a language that never completed."""
        return cls(conclusion=Conclusion.TIMED_OUT, commit=None, merge_conflict_pr=None)

    @property
    def is_resolved(self) -> bool:
        """``True`` when the build produced either a commit or a conflict PR."""
        return self.commit is not None or self.merge_conflict_pr is not None


Outcomes = dict[str, Outcome]


# ---------------------------------------------------------------------------
# Builds
# ---------------------------------------------------------------------------


class BuildStep(BaseModel):
    status: str = StepStatus.NOT_STARTED
    completed: Outcome | None = None

    @property
    def is_completed(self) -> bool:
        return self.status == StepStatus.COMPLETED and self.completed is not None


class BuildTarget(BaseModel):
    commit: BuildStep = Field(default_factory=BuildStep)
    lint: BuildStep | None = None
    test: BuildStep | None = None
    build: BuildStep | None = None
    upload: BuildStep | None = None


class DocumentedSpec(BaseModel):
    """A spec artifact derived by the service from a completed build.

    Only the ``content`` form carries the document; the ``url`` form is
    treated as absent.
    """

    type: Literal["content", "url"]
    content: str | None = None
    url: str | None = None

    @property
    def usable_content(self) -> str | None:
        if self.type == "content":
            return self.content
        return None


class Build(BaseModel):
    id: str
    project: str | None = None
    branch: str | None = None
    config_commit: str | None = None
    targets: dict[str, BuildTarget] = Field(default_factory=dict)
    documented_spec: DocumentedSpec | None = None

    @property
    def languages(self) -> list[str]:
        return list(self.targets)

    def step(self, language: str) -> BuildStep | None:
        """Return the commit step for *language*, or ``None`` if not targeted."""
        target = self.targets.get(language)
        return target.commit if target is not None else None


class Branch(BaseModel):
    branch: str
    project: str | None = None
    config_commit: str | None = None
    latest_build: Build | None = None

    @classmethod
    def from_service(cls, data: dict[str, Any]) -> Branch:
        """Parse a branch response, tolerating an inline ``latest_build_id``."""
        payload = dict(data)
        if payload.get("latest_build") is None and payload.get("latest_build_id"):
            payload["latest_build"] = {"id": payload["latest_build_id"]}
        return cls.model_validate(payload)
