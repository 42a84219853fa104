"""Request-scoped retry policy and deadline for provider calls."""

from __future__ import annotations

import logging
import time
from typing import Callable

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_base,
    stop_after_attempt,
    wait_exponential,
)
from tenacity.stop import stop_base
from tenacity.wait import wait_base

from prompt_enhancer.clients.provider import GenerationCall, GenerationProvider, GenerationResult
from prompt_enhancer.config import RetryConfig
from prompt_enhancer.errors import (
    DeadlineExceeded,
    GenerationError,
    MalformedResponseError,
    RateLimitError,
    RetryBudgetExhausted,
)

logger = logging.getLogger(__name__)


class Deadline:
    """Wall-clock budget shared by every call made for one request."""

    def __init__(self, seconds: float, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self.expires_at = clock() + seconds

    @property
    def remaining(self) -> float:
        return max(0.0, self.expires_at - self._clock())

    @property
    def expired(self) -> bool:
        return self.remaining <= 0.0

    def clamp(self, timeout: float) -> float:
        return min(timeout, self.remaining)

    def check(self) -> None:
        if self.expired:
            raise DeadlineExceeded("request deadline exceeded")


class retry_generation_error(retry_base):
    """Retry retryable provider failures; malformed responses only ``malformed_limit`` times."""

    def __init__(self, malformed_limit: int = 1):
        self.malformed_limit = malformed_limit
        self.malformed_seen = 0

    def __call__(self, retry_state: RetryCallState) -> bool:
        outcome = retry_state.outcome
        if outcome is None or not outcome.failed:
            return False
        exc = outcome.exception()
        if isinstance(exc, MalformedResponseError):
            self.malformed_seen += 1
            return self.malformed_seen <= self.malformed_limit
        return isinstance(exc, GenerationError) and exc.retryable


class stop_at_deadline(stop_base):
    def __init__(self, deadline: Deadline):
        self.deadline = deadline

    def __call__(self, retry_state: RetryCallState) -> bool:
        return self.deadline.expired


class wait_backoff(wait_base):
    """Exponential backoff that honours a rate limit's retry-after hint."""

    def __init__(self, base: float, maximum: float, deadline: Deadline | None = None):
        self._exponential = wait_exponential(multiplier=base, min=0, max=maximum)
        self.maximum = maximum
        self.deadline = deadline

    def __call__(self, retry_state: RetryCallState) -> float:
        delay = self._exponential(retry_state)
        outcome = retry_state.outcome
        exc = outcome.exception() if outcome is not None and outcome.failed else None
        if isinstance(exc, RateLimitError) and exc.retry_after is not None:
            delay = max(delay, min(exc.retry_after, self.maximum))
        if self.deadline is not None:
            delay = min(delay, self.deadline.remaining)
        return delay


class GenerationRunner:
    """Calls the provider for one request under its retry policy and deadline.

    Counters are per instance, so one runner is created per request and
    shared by every stage that talks to the provider on its behalf.
    """

    def __init__(
        self,
        provider: GenerationProvider,
        retry_config: RetryConfig,
        deadline: Deadline,
        timeout: float,
    ):
        self.provider = provider
        self.retry_config = retry_config
        self.deadline = deadline
        self.timeout = timeout
        self.calls = 0
        self.usage: list[tuple[str, int, int]] = []  # (model, input_tokens, output_tokens)
        self.errors: list[str] = []

    @property
    def input_tokens(self) -> int:
        return sum(u[1] for u in self.usage)

    @property
    def output_tokens(self) -> int:
        return sum(u[2] for u in self.usage)

    def _before_sleep(self, retry_state: RetryCallState) -> None:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        delay = retry_state.next_action.sleep if retry_state.next_action else 0.0
        logger.warning(
            "Provider call failed (attempt %d: %s), retrying in %.2fs",
            retry_state.attempt_number, exc, delay,
        )

    async def generate(self, call: GenerationCall, max_attempts: int | None = None) -> GenerationResult:
        """Return the first successful result.

        Raises AuthenticationError (or another non-retryable GenerationError)
        immediately, RetryBudgetExhausted once the retryable failures use up
        ``max_attempts``, and DeadlineExceeded when the request runs out of time.
        """
        budget = max_attempts or self.retry_config.max_attempts
        self.deadline.check()
        retrying = AsyncRetrying(
            stop=stop_after_attempt(budget) | stop_at_deadline(self.deadline),
            wait=wait_backoff(self.retry_config.backoff_base, self.retry_config.backoff_max, self.deadline),
            retry=retry_generation_error(),
            before_sleep=self._before_sleep,
            reraise=True,
        )
        attempts = 0
        try:
            async for attempt in retrying:
                with attempt:
                    attempts += 1
                    self.deadline.check()
                    self.calls += 1
                    try:
                        result = await self.provider.generate(call, self.deadline.clamp(self.timeout))
                    except GenerationError as exc:
                        self.errors.append(f"{type(exc).__name__}: {exc}")
                        raise
        except GenerationError as exc:
            if not exc.retryable:
                raise
            raise RetryBudgetExhausted(attempts, exc) from exc

        self.usage.append((result.model, result.input_tokens, result.output_tokens))
        return result
