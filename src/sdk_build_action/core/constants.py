from __future__ import annotations

from enum import StrEnum

SPEC_FILENAME = "openapi.yml"
CONFIG_FILENAME = "openapi.stainless.yml"

DEFAULT_BASE_URL = "https://api.stainless.com"
DEFAULT_POLL_TIMEOUT_SECONDS = 10 * 60
DEFAULT_POLL_INTERVAL_SECONDS = 5.0

PREVIEW_BRANCH_PREFIX = "preview/"


class StepStatus(StrEnum):
    NOT_STARTED = "not_started"
    QUEUED = "queued"
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    RUNNING = "running"
    COMPLETED = "completed"


class Conclusion(StrEnum):
    SUCCESS = "success"
    NOTE = "note"
    WARNING = "warning"
    ERROR = "error"
    FATAL = "fatal"
    NOOP = "noop"
    CANCELLED = "cancelled"
    MERGE_CONFLICT = "merge_conflict"
    UPSTREAM_MERGE_CONFLICT = "upstream_merge_conflict"
    TIMED_OUT = "timed_out"


class FailRunOn(StrEnum):
    """Failure threshold, from most to least permissive."""

    NEVER = "never"
    ERROR = "error"
    WARNING = "warning"
    NOTE = "note"
