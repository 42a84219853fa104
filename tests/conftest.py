"""Shared test fixtures."""

from __future__ import annotations

import pytest

from prompt_enhancer.clients.provider import GenerationCall, GenerationResult
from prompt_enhancer.config import AppConfig, RetryConfig
from prompt_enhancer.models.examples import FewShotExample
from prompt_enhancer.models.request import EnhancementRequest

GOOD_ENHANCEMENT = (
    "Write a Python function `fibonacci(n: int) -> int` that returns the n-th Fibonacci number. "
    "Use an iterative approach, raise ValueError for negative input, and include a docstring "
    "with three example calls and their expected results."
)


class StubProvider:
    """Scripted provider: each call consumes the next item of ``script``.

    Items may be strings (returned as text), exceptions (raised) or callables
    taking the GenerationCall. The last item repeats once the script runs out.
    """

    def __init__(self, *script, model: str = "stub-model"):
        self.script = list(script) or [GOOD_ENHANCEMENT]
        self.model = model
        self.calls: list[GenerationCall] = []
        self.timeouts: list[float] = []

    @property
    def call_count(self) -> int:
        return len(self.calls)

    async def generate(self, call: GenerationCall, timeout: float) -> GenerationResult:
        self.calls.append(call)
        self.timeouts.append(timeout)
        index = min(len(self.calls) - 1, len(self.script) - 1)
        item = self.script[index]
        if callable(item) and not isinstance(item, type):
            item = item(call)
        if isinstance(item, BaseException):
            raise item
        return GenerationResult(text=item, model=self.model, input_tokens=10, output_tokens=20)


@pytest.fixture
def fast_config() -> AppConfig:
    """Default config without backoff delays."""
    return AppConfig(retry=RetryConfig(backoff_base=0.0, backoff_max=0.0))


@pytest.fixture
def sample_examples() -> tuple[FewShotExample, ...]:
    return (
        FewShotExample(
            input="Write a function to calculate factorial",
            output="Write a Python function that computes n! iteratively and validates its input.",
            category="code",
            styles=("concise", "technical"),
            tones=("neutral",),
            goals=("code", "function"),
            quality_score=0.9,
        ),
        FewShotExample(
            input="Explain what a loop is",
            output="Explain loops to a beginner with one example for `for` and one for `while`.",
            category="explanation",
            styles=("simple", "step-by-step"),
            tones=("friendly",),
            goals=("simple", "beginner"),
            quality_score=0.8,
        ),
        FewShotExample(
            input="Compare SQL and NoSQL",
            output="Compare SQL and NoSQL databases in a table covering schema, scaling and consistency.",
            category="analysis",
            styles=("structured",),
            tones=("professional",),
            goals=("compare", "decide"),
            quality_score=0.85,
        ),
        FewShotExample(
            input="Write an email asking for an extension",
            output="Draft a polite, concise email requesting a three-day deadline extension.",
            category="writing",
            styles=("formal", "concise"),
            tones=("polite", "professional"),
            goals=("email", "request"),
            quality_score=0.7,
        ),
    )


@pytest.fixture
def fibonacci_request() -> EnhancementRequest:
    return EnhancementRequest(prompt="write code for fibonacci")
