"""Wait for every target language of a build to finish.

Each language of a build is tracked independently: a language is pending
until its ``commit`` step reports ``completed``, at which point the embedded
outcome is recorded.  Recording is insert-if-absent, so the first completed
outcome observed for a language is final.  Languages still pending when the
deadline passes get a synthetic ``timed_out`` outcome, which keeps the key
set of the result equal to the languages the build started with.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable, Sequence
from pathlib import Path

import structlog
from pydantic import BaseModel, Field

from sdk_build_action.builds.manager import BuildManager
from sdk_build_action.core.config import PollingConfig
from sdk_build_action.core.constants import (
    DEFAULT_POLL_INTERVAL_SECONDS,
    DEFAULT_POLL_TIMEOUT_SECONDS,
)
from sdk_build_action.core.types import Build, Outcome, Outcomes
from sdk_build_action.utils.async_helpers import gather_all

logger = structlog.get_logger(__name__)

Clock = Callable[[], float]
Sleep = Callable[[float], Awaitable[None]]


class PollResult(BaseModel):
    build_id: str
    outcomes: Outcomes = Field(default_factory=dict)
    timed_out: list[str] = Field(default_factory=list)
    documented_spec: str | None = None
    """Content of the first documented spec seen while polling."""


class BuildPoller:
    """Poll one build until all its languages complete or time runs out.

    Example::

        poller = BuildPoller(client.builds, build, timeout_seconds=600)
        result = await poller.run()
        result.outcomes["python"].conclusion
    """

    def __init__(
        self,
        builds: BuildManager,
        build: Build,
        *,
        languages: Sequence[str] | None = None,
        timeout_seconds: float = DEFAULT_POLL_TIMEOUT_SECONDS,
        interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS,
        capture_documented_spec: bool = False,
        label: str = "head",
        clock: Clock = time.monotonic,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._builds = builds
        self._build = build
        self._languages = list(languages if languages is not None else build.languages)
        self._timeout = timeout_seconds
        self._interval = interval_seconds
        self._capture = capture_documented_spec
        self._clock = clock
        self._sleep = sleep
        self._outcomes: Outcomes = {}
        self._documented_spec: str | None = None
        self._log = logger.bind(build_id=build.id, role=label)

    @property
    def languages(self) -> list[str]:
        return list(self._languages)

    @property
    def outcomes(self) -> Outcomes:
        return dict(self._outcomes)

    @property
    def pending(self) -> list[str]:
        return [lang for lang in self._languages if lang not in self._outcomes]

    def record(self, language: str, outcome: Outcome) -> bool:
        """Store *outcome* unless *language* already has one.

        Returns:
            ``True`` if the outcome was stored.
        """
        if language in self._outcomes:
            return False
        self._outcomes[language] = outcome
        return True

    def _observe(self, build: Build) -> None:
        if not self._capture or self._documented_spec is not None:
            return
        if build.documented_spec is None:
            return
        content = build.documented_spec.usable_content
        if content is None:
            self._log.info("documented_spec_ignored", type=build.documented_spec.type)
            return
        self._documented_spec = content
        self._log.info("documented_spec_captured", size=len(content))

    async def _check(self, language: str) -> None:
        build = await self._builds.retrieve(self._build.id)
        self._observe(build)
        step = build.step(language)
        if step is not None and step.is_completed:
            assert step.completed is not None  # noqa: S101
            if self.record(language, step.completed):
                self._log.info(
                    "language_completed",
                    language=language,
                    conclusion=step.completed.conclusion,
                    outcome=step.completed.model_dump(mode="json"),
                )
            return
        self._log.info(
            "language_status",
            language=language,
            status=step.status if step is not None else None,
        )

    async def run(self) -> PollResult:
        """Poll until every language has an outcome or the deadline passes."""
        self._log.info("polling_started", languages=self._languages, timeout=self._timeout)
        deadline = self._clock() + self._timeout

        while self.pending and self._clock() < deadline:
            await gather_all(*(self._check(language) for language in self.pending))
            if not self.pending:
                break
            await self._sleep(self._interval)

        timed_out = self.pending
        for language in timed_out:
            self.record(language, Outcome.timed_out())
        if timed_out:
            self._log.warning("polling_timed_out", languages=timed_out)
        self._log.info("polling_finished", outcomes=len(self._outcomes))

        return PollResult(
            build_id=self._build.id,
            outcomes=self.outcomes,
            timed_out=timed_out,
            documented_spec=self._documented_spec,
        )


async def poll_builds(
    builds: BuildManager,
    head: Build,
    parents: Sequence[Build | None] = (),
    *,
    polling: PollingConfig | None = None,
    clock: Clock = time.monotonic,
    sleep: Sleep = asyncio.sleep,
) -> tuple[PollResult, list[PollResult | None]]:
    """Poll the head build and every parent build concurrently.

    Parents are only waited on for the head's languages they also target.
    A failure in any poller cancels the others before it propagates.

    Returns:
        The head result and one result per parent slot (``None`` where the
        slot had no build).
    """
    polling = polling or PollingConfig()

    def make(build: Build, languages: Sequence[str], label: str, capture: bool) -> BuildPoller:
        return BuildPoller(
            builds,
            build,
            languages=languages,
            timeout_seconds=polling.timeout_seconds,
            interval_seconds=polling.interval_seconds,
            capture_documented_spec=capture,
            label=label,
            clock=clock,
            sleep=sleep,
        )

    pollers: list[BuildPoller] = [make(head, head.languages, "head", True)]
    slots: list[int | None] = []
    for index, parent in enumerate(parents):
        if parent is None:
            slots.append(None)
            continue
        languages = [lang for lang in head.languages if lang in parent.targets]
        slots.append(len(pollers))
        pollers.append(make(parent, languages, f"parent-{index + 1}", False))

    results = await gather_all(*(poller.run() for poller in pollers))
    parent_results = [results[slot] if slot is not None else None for slot in slots]
    return results[0], parent_results


def write_documented_spec(content: str, path: Path) -> Path:
    """Persist a captured documented spec and return where it went."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    logger.info("documented_spec_written", path=str(path))
    return path
