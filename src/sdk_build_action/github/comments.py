"""Pull request status comment: one marker comment per PR, updated in place.

The comment is identified by its first line: any existing comment whose body
contains the first line of the new body is the one to update or delete.
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from sdk_build_action.core.exceptions import CommentError
from sdk_build_action.core.types import Outcome, Outcomes

logger = structlog.get_logger(__name__)

PREVIEW_TITLE = "SDK previews"
MERGE_TITLE = "SDK build status"


def _describe(outcome: Outcome) -> str:
    if outcome.commit is not None:
        repo = outcome.commit.repo
        return f"{outcome.conclusion}: {repo.owner}/{repo.name}@{repo.branch or outcome.commit.sha}"
    if outcome.merge_conflict_pr is not None:
        pr = outcome.merge_conflict_pr
        return f"{outcome.conclusion}: resolve {pr.repo.owner}/{pr.repo.name}#{pr.number}"
    return outcome.conclusion


def render_summary(
    title: str,
    outcomes: Outcomes,
    base_outcomes: Outcomes | None = None,
    *,
    run_url: str | None = None,
) -> str:
    """Plain per-language summary; the first line is the comment marker.

    When a language ended in a merge conflict and *run_url* is known, a note
    asks for the conflict to be resolved and the workflow re-run.
    """
    lines = [title, ""]
    for language, outcome in outcomes.items():
        line = f"- {language}: {_describe(outcome)}"
        base = (base_outcomes or {}).get(language)
        if base is not None:
            line += f" (base: {base.conclusion})"
        lines.append(line)
    conflicted = any(o.merge_conflict_pr is not None for o in outcomes.values())
    if conflicted and run_url is not None:
        lines += ["", f"Resolve the merge conflict, then re-run the workflow: {run_url}"]
    return "\n".join(lines) + "\n"


def _marker(body: str) -> str:
    return body.strip().split("\n")[0]


class CommentManager:
    """List, create, update and delete the action's PR comment.

    Usage::

        async with CommentManager(token, "acme", "api", issue_number=42) as comments:
            await comments.upsert(render_summary(PREVIEW_TITLE, outcomes))
    """

    def __init__(
        self,
        token: str,
        owner: str,
        repo: str,
        *,
        issue_number: int,
        api_url: str = "https://api.github.com",
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._owner = owner
        self._repo = repo
        self._issue_number = issue_number
        self._should_close = http_client is None
        self._client = http_client or httpx.AsyncClient(
            base_url=api_url.rstrip("/"),
            headers={
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
            },
            timeout=30.0,
        )

    async def __aenter__(self) -> CommentManager:
        return self

    async def __aexit__(self, *_: object) -> None:
        await self.close()

    async def close(self) -> None:
        if self._should_close:
            await self._client.aclose()

    async def _request(self, verb: str, path: str, **kwargs: Any) -> Any:
        try:
            resp = await self._client.request(verb, path, **kwargs)
        except httpx.RequestError as exc:
            raise CommentError(f"GitHub request failed: {exc}") from exc
        if resp.status_code >= 400:
            raise CommentError(
                f"GitHub returned HTTP {resp.status_code} for {verb} {path}",
                code=str(resp.status_code),
                details={"raw": resp.text[:500]},
                status_code=resp.status_code,
            )
        return resp.json() if resp.content else None

    @property
    def _issue_path(self) -> str:
        return f"/repos/{self._owner}/{self._repo}/issues"

    async def list(self) -> list[dict[str, Any]]:
        comments: list[dict[str, Any]] = []
        page = 1
        while True:
            batch = await self._request(
                "GET",
                f"{self._issue_path}/{self._issue_number}/comments",
                params={"per_page": 100, "page": page},
            )
            comments.extend(batch or [])
            if not batch or len(batch) < 100:
                return comments
            page += 1

    async def find(self, body: str) -> dict[str, Any] | None:
        """Return the existing comment carrying *body*'s marker line, if any."""
        marker = _marker(body)
        for comment in await self.list():
            if marker in (comment.get("body") or ""):
                return comment
        return None

    async def upsert(self, body: str) -> dict[str, Any]:
        existing = await self.find(body)
        if existing is not None:
            logger.info("comment_update", comment_id=existing["id"], issue=self._issue_number)
            return await self._request(
                "PATCH", f"{self._issue_path}/comments/{existing['id']}", json={"body": body}
            )
        logger.info("comment_create", issue=self._issue_number)
        return await self._request(
            "POST", f"{self._issue_path}/{self._issue_number}/comments", json={"body": body}
        )

    async def delete(self, body: str) -> bool:
        """Delete the marker comment matching *body*; ``False`` if there was none."""
        existing = await self.find(body)
        if existing is None:
            return False
        logger.info("comment_delete", comment_id=existing["id"], issue=self._issue_number)
        await self._request("DELETE", f"{self._issue_path}/comments/{existing['id']}")
        return True
