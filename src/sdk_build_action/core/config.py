from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field

from sdk_build_action.core.constants import (
    DEFAULT_BASE_URL,
    DEFAULT_POLL_INTERVAL_SECONDS,
    DEFAULT_POLL_TIMEOUT_SECONDS,
)


class ClientConfig(BaseModel):
    api_key: str | None = None
    base_url: str = DEFAULT_BASE_URL
    timeout: float = Field(default=60.0, gt=0, le=600)
    """Per-request HTTP timeout in seconds."""
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_json: bool = False

    @classmethod
    def from_env(cls) -> ClientConfig:
        """Create a :class:`ClientConfig` from environment variables.

        Reads the following env vars (all optional):

        * ``SDK_BUILD_API_KEY``, ``STAINLESS_API_KEY`` or the action input
          ``INPUT_STAINLESS_API_KEY`` → ``api_key``
        * ``SDK_BUILD_BASE_URL`` → ``base_url``
        * ``SDK_BUILD_TIMEOUT`` → ``timeout`` (seconds)
        * ``SDK_BUILD_LOG_LEVEL`` → ``log_level``
        * ``SDK_BUILD_LOG_JSON`` → ``log_json`` (``1``/``true``/``yes``)

        Any variable that is not set or is empty is left at its default value.
        """
        kwargs: dict[str, Any] = {}

        api_key = (
            os.environ.get("SDK_BUILD_API_KEY")
            or os.environ.get("STAINLESS_API_KEY")
            or os.environ.get("INPUT_STAINLESS_API_KEY")
        )
        if api_key:
            kwargs["api_key"] = api_key

        base_url = os.environ.get("SDK_BUILD_BASE_URL")
        if base_url:
            kwargs["base_url"] = base_url

        timeout_str = os.environ.get("SDK_BUILD_TIMEOUT")
        if timeout_str:
            kwargs["timeout"] = float(timeout_str)

        log_level = os.environ.get("SDK_BUILD_LOG_LEVEL")
        if log_level:
            kwargs["log_level"] = log_level.upper()

        log_json = os.environ.get("SDK_BUILD_LOG_JSON")
        if log_json:
            kwargs["log_json"] = log_json.lower() in ("1", "true", "yes")

        return cls(**kwargs)


class PollingConfig(BaseModel):
    timeout_seconds: float = Field(default=DEFAULT_POLL_TIMEOUT_SECONDS, ge=0)
    """Wall-clock limit for a whole polling run."""
    interval_seconds: float = Field(default=DEFAULT_POLL_INTERVAL_SECONDS, ge=0)
    """Sleep between two polling passes."""
    documented_spec_path: Path = Path("./.sdk-build/documented-openapi.yml")
    """Where a captured documented spec is written once polling ends."""
