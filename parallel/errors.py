"""
Error taxonomy for parallel-self generation and the client session.

Upstream errors carry the HTTP status the inbound boundary answers with and
the notice shown to the user when the session falls back to locally
simulated selves.
"""

from typing import Optional


GENERIC_NOTICE = "Couldn't reach the generation service. Showing locally simulated selves."
RATE_LIMIT_NOTICE = "Rate limit exceeded. Please try again in a moment."
QUOTA_NOTICE = "AI usage limit reached. Add credits to keep generating."


class ParallelError(Exception):
    """Base class for all Parallel errors"""


class InvalidInputError(ParallelError, ValueError):
    """Raised when the dilemma text is missing or blank"""

    status_code = 400

    def __init__(self, message: str = "userInput is required"):
        super().__init__(message)


class InvalidTransitionError(ParallelError):
    """Raised when a session trigger is not valid in the current phase"""


class UpstreamError(ParallelError):
    """The generation service failed; callers fall back instead of surfacing it"""

    status_code = 500
    notice = GENERIC_NOTICE

    def __init__(self, message: str = "Generation service error", status_code: Optional[int] = None):
        super().__init__(message)
        if status_code is not None:
            self.status_code = status_code


class RateLimitedError(UpstreamError):
    status_code = 429
    notice = RATE_LIMIT_NOTICE

    def __init__(self, message: str = "Rate limit exceeded."):
        super().__init__(message)


class QuotaExhaustedError(UpstreamError):
    status_code = 402
    notice = QUOTA_NOTICE

    def __init__(self, message: str = "AI usage limit reached."):
        super().__init__(message)


class UpstreamMalformedError(UpstreamError):
    """The service answered, but not with the expected structured output"""


class PersonaValidationError(UpstreamMalformedError):
    """A persona candidate violates the persona schema"""


class GenerationTimeoutError(UpstreamError):
    def __init__(self, timeout_seconds: float):
        super().__init__(f"Generation timed out after {timeout_seconds}s")
        self.timeout_seconds = timeout_seconds


def error_from_status(status_code: int, message: str = "") -> UpstreamError:
    """Map an upstream HTTP status to the matching error type."""
    if status_code == 429:
        return RateLimitedError(message or "Rate limit exceeded.")
    if status_code == 402:
        return QuotaExhaustedError(message or "AI usage limit reached.")
    return UpstreamError(message or f"Generation service error: {status_code}")
