"""GitRepo — the handful of git plumbing calls the CI flows need.

Everything goes through the ``git`` executable of the checkout the action
runs in; failures surface as :class:`GitError`.
"""

from __future__ import annotations

import hashlib
import subprocess
from pathlib import Path

import structlog

from sdk_build_action.core.exceptions import GitError

logger = structlog.get_logger(__name__)

MERGE_BASE_ATTEMPTS = 10
DEEPEN_BY = 10


class GitRepo:
    def __init__(self, cwd: str | Path = ".", git_bin: str = "git") -> None:
        self._cwd = Path(cwd)
        self._bin = git_bin

    def _exec(self, *args: str) -> bytes:
        logger.debug("git", args=list(args))
        result = subprocess.run(
            [self._bin, *args],
            cwd=self._cwd,
            capture_output=True,
            check=False,
        )
        if result.returncode != 0:
            stderr = result.stderr.decode("utf-8", errors="replace").strip()
            raise GitError(
                f"git {args[0]} failed: {stderr}",
                details={"args": list(args), "returncode": result.returncode},
            )
        return result.stdout

    def _run(self, *args: str) -> str:
        return self._exec(*args).decode("utf-8")

    # ------------------------------------------------------------------ #
    # Plumbing
    # ------------------------------------------------------------------ #

    def fetch(
        self,
        *refs: str,
        remote: str = "origin",
        depth: int | None = None,
        deepen: int | None = None,
    ) -> None:
        args = ["fetch", "--quiet"]
        if depth is not None:
            args.append(f"--depth={depth}")
        if deepen is not None:
            args.append(f"--deepen={deepen}")
        self._run(*args, remote, *refs)

    def checkout(self, ref: str) -> None:
        self._run("checkout", "--quiet", ref)

    def merge_base(self, a: str, b: str) -> str | None:
        """Return the merge base of *a* and *b*, or ``None`` if history is too shallow."""
        try:
            sha = self._run("merge-base", a, b).strip()
        except GitError:
            return None
        return sha or None

    def diff_name_only(self, before: str, after: str) -> list[str]:
        output = self._run("diff", "--name-only", before, after)
        return [line for line in output.strip().splitlines() if line]

    def file_hash(self, rev: str, path: str) -> str | None:
        """MD5 of *path* as it exists at *rev*; ``None`` if it does not exist there."""
        try:
            content = self._exec("show", f"{rev}:{path}")
        except GitError:
            logger.info("git_file_missing", rev=rev, path=path)
            return None
        return hashlib.md5(content).hexdigest()  # noqa: S324

    # ------------------------------------------------------------------ #
    # Composite helpers
    # ------------------------------------------------------------------ #

    def find_merge_base(self, base_sha: str, head_sha: str) -> str:
        """Locate the merge base, deepening a shallow clone as needed.

        Raises:
            GitError: No merge base after :data:`MERGE_BASE_ATTEMPTS` deepenings.
        """
        self.fetch(base_sha, depth=1)
        for _ in range(MERGE_BASE_ATTEMPTS):
            sha = self.merge_base(head_sha, base_sha)
            if sha:
                logger.info("merge_base_found", sha=sha)
                return sha
            self.fetch(base_sha, head_sha, deepen=DEEPEN_BY)
        raise GitError("Could not determine merge base SHA")

    def is_config_changed(
        self,
        before: str,
        after: str,
        *,
        oas_path: str | None = None,
        config_path: str | None = None,
    ) -> bool:
        """Whether the spec or config file changed between two revisions."""
        changed_files = self.diff_name_only(before, after)
        changed = False
        if oas_path and Path(oas_path).as_posix() in changed_files:
            logger.info("oas_changed", path=oas_path)
            changed = True
        if config_path and Path(config_path).as_posix() in changed_files:
            logger.info("config_changed", path=config_path)
            changed = True
        return changed
