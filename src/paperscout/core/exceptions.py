"""Error taxonomy and boundary serialization.

Every error that crosses the external boundary is converted to an
``ErrorPayload`` via :func:`serialize_error` — callers never see a raw,
backend-specific exception object.
"""

from __future__ import annotations

import traceback
from typing import Any

from paperscout.models.response import ErrorPayload


class PaperScoutError(Exception):
    """Base exception for PaperScout errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self._details = dict(details or {})

    @property
    def details(self) -> dict[str, Any]:
        """Structured details attached to the error (may be empty)."""
        return dict(self._details)


class ConfigurationError(PaperScoutError):
    """Raised when startup settings are invalid. Fatal at startup."""


class PlatformError(PaperScoutError):
    """Raised for platform-level failures that are never retried."""

    def __init__(self, message: str, platform: str | None = None, details: dict[str, Any] | None = None) -> None:
        merged = dict(details or {})
        if platform is not None:
            merged.setdefault("platform", platform)
        super().__init__(message, merged)
        self.platform = platform


class AdapterNotRegisteredError(PlatformError):
    """Raised when no adapter is registered under the requested source id."""

    def __init__(self, platform: str, available: list[str] | None = None) -> None:
        super().__init__(
            f"Platform '{platform}' is not registered",
            platform,
            {"available": sorted(available or [])},
        )


class UnsupportedOperationError(PlatformError):
    """Raised when a backend deliberately does not support an operation."""

    def __init__(self, platform: str, operation: str, reason: str | None = None) -> None:
        message = f"Platform '{platform}' does not support '{operation}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, platform, {"operation": operation})
        self.operation = operation


class PluginDisabledError(PlatformError):
    """Raised when a known plugin platform is referenced while its flag is off."""

    def __init__(self, platform: str, flag: str) -> None:
        super().__init__(
            f"Plugin platform '{platform}' is not enabled. "
            f"Set PAPERSCOUT_PLUGINS__{flag.upper()}=true to enable it.",
            platform,
            {"flag": flag},
        )
        self.flag = flag


class TransientNetworkError(PaperScoutError):
    """Raised for timeouts and retryable status codes.

    The scheduler retries these; callers only see one once retries are
    exhausted.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        attempts: int | None = None,
        url: str | None = None,
    ) -> None:
        details: dict[str, Any] = {}
        if status_code is not None:
            details["status_code"] = status_code
        if attempts is not None:
            details["attempts"] = attempts
        if url is not None:
            details["url"] = url
        super().__init__(message, details)
        self.status_code = status_code
        self.attempts = attempts
        self.url = url


class DownloadError(PaperScoutError):
    """Raised when a required artifact is missing or could not be persisted."""

    def __init__(self, message: str, platform: str | None = None) -> None:
        super().__init__(message, {"platform": platform} if platform else None)
        self.platform = platform


class ValidationError(PaperScoutError):
    """Raised for malformed backend responses or invalid caller input."""


def serialize_error(error: BaseException, include_stack: bool = False) -> ErrorPayload:
    """Convert any exception to the uniform boundary shape.

    Args:
        error: The exception to serialize.
        include_stack: Whether to include the formatted traceback.

    Returns:
        An ``ErrorPayload`` with name, message and optional stack/details.
    """
    details = error.details if isinstance(error, PaperScoutError) else None
    stack = None
    if include_stack:
        stack = "".join(traceback.format_exception(type(error), error, error.__traceback__))
    return ErrorPayload(
        name=type(error).__name__,
        message=str(error) or type(error).__name__,
        stack=stack,
        details=details or None,
    )
