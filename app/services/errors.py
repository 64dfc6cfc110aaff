"""Exception hierarchy for motivational message generation."""
from __future__ import annotations


class MotivationError(Exception):
    """Base error for the motivation subsystem."""


class ValidationError(MotivationError):
    """Malformed caller input, or model output that fails schema re-validation.

    Never retried.
    """


class RequestTimeoutError(MotivationError, TimeoutError):
    """A single attempt exceeded its deadline."""

    def __init__(self, message: str = "Request timeout") -> None:
        super().__init__(message)


class ApiError(MotivationError):
    """HTTP-level failure from the generation API.

    ``status_code`` is ``None`` when the request never got a response
    (connection refused, DNS failure, dropped socket).
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code

    @property
    def retryable(self) -> bool:
        return self.status_code is None or self.status_code == 429 or self.status_code >= 500

    def __str__(self) -> str:
        base = super().__str__()
        if self.status_code is None:
            return base
        return f"HTTP {self.status_code}: {base}"


class DataAccessError(MotivationError):
    """The activity data store could not be read."""
