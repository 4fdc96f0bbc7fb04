from __future__ import annotations

from typing import Any


class BuildActionError(Exception):
    """Base exception for all sdk-build-action errors.

    Attributes:
        code: Optional machine-readable error code (e.g. ``"404"``).
        details: Arbitrary key/value context about the error.
        status_code: HTTP status code when the error originates from
            a build service response (``None`` when not applicable).
    """

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
        *,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.details = details or {}
        self.status_code = status_code


class ConfigurationError(BuildActionError):
    """Invalid or mutually exclusive inputs. Raised before any remote call."""


class GatewayError(BuildActionError): ...


class GitError(BuildActionError): ...


class CommentError(BuildActionError): ...


# ---------------------------------------------------------------------------
# Build service response errors
# ---------------------------------------------------------------------------


class APIStatusError(GatewayError):
    """The build service answered with an HTTP error status."""


class NotFoundError(APIStatusError):
    """HTTP 404: the requested build, branch or config does not exist.

    The only error class that orchestration recovers from locally.
    """


class AuthenticationError(APIStatusError):
    """Authentication / authorisation failure (HTTP 401/403)."""


class RateLimitError(APIStatusError):
    """The build service returned a rate-limit (HTTP 429) response."""


class APIConnectionError(GatewayError):
    """A transport-level connection failure (DNS, TCP, TLS)."""


class APITimeoutError(GatewayError):
    """The build service did not respond within the request timeout."""


def is_not_found(exc: BaseException) -> bool:
    """Return ``True`` when *exc* means "the remote entity does not exist".

    Lookups that fail this way fall through to a creation or fallback path;
    every other error propagates.
    """
    return isinstance(exc, NotFoundError)
