"""Exception taxonomy for the enhancement pipeline."""

from __future__ import annotations


class EnhancerError(Exception):
    """Base class for all prompt-enhancer errors."""


class InvalidRequestError(EnhancerError, ValueError):
    """The request itself is unusable (e.g. empty prompt)."""


class GenerationError(EnhancerError):
    """The generation provider could not produce text."""

    retryable: bool = False

    def __init__(self, message: str, *, cause: Exception | None = None):
        super().__init__(message)
        self.cause = cause


class TransportError(GenerationError):
    """Network failure or timeout talking to the provider."""

    retryable = True


class AuthenticationError(GenerationError):
    """Missing or rejected credential. Never retried."""

    retryable = False


class RateLimitError(GenerationError):
    """The provider asked us to slow down."""

    retryable = True

    def __init__(
        self,
        message: str,
        *,
        retry_after: float | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message, cause=cause)
        self.retry_after = retry_after


class MalformedResponseError(GenerationError):
    """The provider answered, but with nothing usable. Retried once."""

    retryable = True


class RetryBudgetExhausted(EnhancerError):
    """Every allowed attempt failed."""

    def __init__(self, attempts: int, last_error: Exception | None = None):
        detail = f": {last_error}" if last_error else ""
        super().__init__(f"gave up after {attempts} attempt(s){detail}")
        self.attempts = attempts
        self.last_error = last_error


class DeadlineExceeded(EnhancerError):
    """The request-level time budget ran out."""
