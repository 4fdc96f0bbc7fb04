"""Step outputs and log groups for GitHub Actions."""

from __future__ import annotations

import json
import os
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

import structlog

logger = structlog.get_logger(__name__)


def _serialize(value: Any) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value, default=str)


def set_output(name: str, value: Any, *, path: str | Path | None = None) -> None:
    """Append a step output to ``$GITHUB_OUTPUT``.

    Non-string values are JSON-encoded.  Values always use the heredoc form
    so multi-line content survives.  Without an output file the value is only
    logged.
    """
    target = path or os.environ.get("GITHUB_OUTPUT")
    text = _serialize(value)
    if not target:
        logger.info("output", name=name, value=text)
        return
    delimiter = f"ghadelimiter_{uuid.uuid4()}"
    with open(target, "a", encoding="utf-8") as fh:
        fh.write(f"{name}<<{delimiter}\n{text}\n{delimiter}\n")


@contextmanager
def group(title: str) -> Iterator[None]:
    """Fold the enclosed log lines under *title* in the Actions log viewer."""
    print(f"::group::{title}", flush=True)
    try:
        yield
    finally:
        print("::endgroup::", flush=True)
