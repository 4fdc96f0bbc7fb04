"""Payload builders and fake time shared by the test modules."""
from __future__ import annotations

from typing import Any

# ---------------------------------------------------------------------------
# Payload builders
# ---------------------------------------------------------------------------


def outcome_payload(
    conclusion: str = "success",
    *,
    commit: bool = True,
    merge_conflict_pr: bool = False,
    language: str = "python",
) -> dict[str, Any]:
    repo = {"owner": "acme", "name": f"acme-{language}", "branch": "main"}
    return {
        "conclusion": conclusion,
        "commit": {"repo": repo, "sha": "c0ffee"} if commit else None,
        "merge_conflict_pr": {"number": 7, "repo": repo} if merge_conflict_pr else None,
    }


def build_payload(
    build_id: str,
    targets: dict[str, Any],
    *,
    config_commit: str | None = "cfg_1",
    branch: str | None = "main",
    documented_spec: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Build descriptor in service form.

    Each target value is either a status string (step still running) or an
    outcome payload (step completed with that outcome).
    """
    encoded: dict[str, Any] = {}
    for language, state in targets.items():
        if isinstance(state, str):
            encoded[language] = {"commit": {"status": state}}
        else:
            encoded[language] = {"commit": {"status": "completed", "completed": state}}
    payload: dict[str, Any] = {
        "id": build_id,
        "project": "acme",
        "branch": branch,
        "config_commit": config_commit,
        "targets": encoded,
    }
    if documented_spec is not None:
        payload["documented_spec"] = documented_spec
    return payload


# ---------------------------------------------------------------------------
# Fake time
# ---------------------------------------------------------------------------


class FakeClock:
    """Monotonic clock whose ``sleep`` advances time instantly."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds

