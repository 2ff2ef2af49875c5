"""
Application-level exceptions.

Every failure a user-triggered operation can report derives from RiskGridError
so the task pane and the CLI can recover at the top level and show
`str(error)` as the user-facing message.
"""

from __future__ import annotations

# Shown instead of the raw transport error when the scoring host cannot be reached
CONNECTIVITY_CHECKLIST = (
    "Possible causes:\n"
    "1. CORS restriction: the scoring API does not allow requests from this origin "
    "(configure a proxy URL)\n"
    "2. Incorrect API URL or environment name\n"
    "3. Network connectivity issue\n"
    "4. The scoring server is down or unreachable"
)


class RiskGridError(Exception):
    """Base class for errors reported to the user."""


class UserInputError(RiskGridError):
    """A required field is missing or invalid (sheet name, range, credential, payload)."""


class FormatError(RiskGridError):
    """The insert payload is not valid structured text or not a non-empty list."""


class NetworkError(RiskGridError):
    """Transport failure or non-2xx response from the scoring service."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        detail: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail

    @classmethod
    def from_status(cls, status_code: int, detail: str) -> "NetworkError":
        return cls(
            f"API request failed ({status_code}): {detail}",
            status_code=status_code,
            detail=detail,
        )

    @classmethod
    def connectivity(cls, url: str, cause: str) -> "NetworkError":
        return cls(
            f"Network error: could not reach {url}\n\n{CONNECTIVITY_CHECKLIST}",
            detail=cause,
        )


class ScoringTimeoutError(RiskGridError):
    """The scoring request exceeded its deadline and was cancelled."""

    def __init__(self, timeout_sec: float) -> None:
        super().__init__(
            f"Request timed out after {timeout_sec:g} seconds. "
            "The scoring service may be overloaded; try again with fewer rows."
        )
        self.timeout_sec = timeout_sec


class ResponseShapeError(RiskGridError):
    """The normalized scoring response is not a non-empty list of records."""


class OperationInProgressError(RiskGridError):
    """Another user-triggered operation is still running."""
