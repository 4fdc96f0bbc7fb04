"""Pass/fail verdict for a set of build outcomes."""

from __future__ import annotations

import structlog

from sdk_build_action.core.constants import Conclusion, FailRunOn
from sdk_build_action.core.types import Outcome, Outcomes

logger = structlog.get_logger(__name__)

# Conclusions that fail the run at each threshold.
_FAILING_CONCLUSIONS: dict[FailRunOn, frozenset[str]] = {
    FailRunOn.NEVER: frozenset(),
    FailRunOn.ERROR: frozenset({Conclusion.ERROR}),
    FailRunOn.WARNING: frozenset({Conclusion.ERROR, Conclusion.WARNING}),
    FailRunOn.NOTE: frozenset({Conclusion.ERROR, Conclusion.WARNING, Conclusion.NOTE}),
}


def is_failing(outcome: Outcome, fail_on: FailRunOn | str) -> bool:
    """Whether one language outcome fails the run at threshold *fail_on*.

    An outcome with neither a commit nor a merge-conflict PR (a timeout or
    any other unresolved state) fails at every threshold but ``never``.
    """
    threshold = FailRunOn(fail_on)
    if threshold is FailRunOn.NEVER:
        return False
    if not outcome.is_resolved:
        return True
    return outcome.conclusion in _FAILING_CONCLUSIONS[threshold]


def check_results(outcomes: Outcomes, fail_on: FailRunOn | str = FailRunOn.ERROR) -> bool:
    """Return ``True`` when the run should pass.

    Raises:
        ValueError: *fail_on* is not a known threshold.
    """
    threshold = FailRunOn(fail_on)
    failed = [
        language for language, outcome in outcomes.items() if is_failing(outcome, threshold)
    ]
    if failed:
        logger.warning("languages_failed", languages=failed, fail_on=str(threshold))
        return False
    return True
