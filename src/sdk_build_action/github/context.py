"""The slice of the GitHub Actions runtime environment the flows read."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field


class PullRequestInfo(BaseModel):
    number: int
    title: str = ""
    head_ref: str | None = None
    base_ref: str | None = None
    head_sha: str | None = None
    base_sha: str | None = None

    @classmethod
    def from_event(cls, payload: dict[str, Any]) -> PullRequestInfo | None:
        pr = payload.get("pull_request")
        if not isinstance(pr, dict):
            return None
        head = pr.get("head") or {}
        base = pr.get("base") or {}
        return cls(
            number=pr["number"],
            title=pr.get("title") or "",
            head_ref=head.get("ref"),
            base_ref=base.get("ref"),
            head_sha=head.get("sha"),
            base_sha=base.get("sha"),
        )


class GitHubContext(BaseModel):
    repository: str = ""
    """``owner/name`` of the repository running the workflow."""
    sha: str | None = None
    run_id: str | None = None
    server_url: str = "https://github.com"
    api_url: str = "https://api.github.com"
    event: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_env(cls) -> GitHubContext:
        """Read ``GITHUB_*`` variables and the event payload file."""
        event: dict[str, Any] = {}
        event_path = os.environ.get("GITHUB_EVENT_PATH")
        if event_path and Path(event_path).is_file():
            event = json.loads(Path(event_path).read_text(encoding="utf-8"))
        return cls(
            repository=os.environ.get("GITHUB_REPOSITORY", ""),
            sha=os.environ.get("GITHUB_SHA") or None,
            run_id=os.environ.get("GITHUB_RUN_ID") or None,
            server_url=os.environ.get("GITHUB_SERVER_URL") or "https://github.com",
            api_url=os.environ.get("GITHUB_API_URL") or "https://api.github.com",
            event=event,
        )

    @property
    def owner(self) -> str:
        return self.repository.partition("/")[0]

    @property
    def repo(self) -> str:
        return self.repository.partition("/")[2]

    @property
    def pull_request(self) -> PullRequestInfo | None:
        return PullRequestInfo.from_event(self.event)

    @property
    def run_url(self) -> str | None:
        if not (self.repository and self.run_id):
            return None
        return f"{self.server_url}/{self.repository}/actions/runs/{self.run_id}"
