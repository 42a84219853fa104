"""Main enhancement orchestrator - coordinates selection, generation, validation and fallback."""

from __future__ import annotations

import asyncio
import logging
import re
import time
from typing import Any

from pydantic import ValidationError

from prompt_enhancer.clients.provider import GenerationProvider
from prompt_enhancer.config import AppConfig
from prompt_enhancer.errors import (
    AuthenticationError,
    DeadlineExceeded,
    GenerationError,
    InvalidRequestError,
    RetryBudgetExhausted,
)
from prompt_enhancer.models.examples import FewShotExample
from prompt_enhancer.models.request import EnhancementRequest
from prompt_enhancer.models.result import (
    DiagnosticTrace,
    EnhancementMethod,
    EnhancementResult,
    Thought,
)
from prompt_enhancer.pipeline.fallback import fallback_enhance
from prompt_enhancer.pipeline.fewshot_selector import FewShotSelector, detect_category, load_examples
from prompt_enhancer.pipeline.prompt_builder import build_generation_call
from prompt_enhancer.pipeline.quality_validator import QualityValidator, compute_confidence
from prompt_enhancer.pipeline.retry import Deadline, GenerationRunner
from prompt_enhancer.pipeline.sequential_thinker import SequentialThinker
from prompt_enhancer.usage import calculate_cost
from prompt_enhancer.utils.text import word_count

logger = logging.getLogger(__name__)

FALLBACK_CONFIDENCE = 0.3


class EnhancementOrchestrator:
    """Turns an EnhancementRequest into an EnhancementResult.

    Provider and validation failures never reach the caller: they are retried
    within budget and otherwise resolved by the local fallback. Only malformed
    or over-long requests raise, and cancellation propagates as
    ``asyncio.CancelledError``.
    """

    def __init__(
        self,
        provider: GenerationProvider,
        config: AppConfig | None = None,
        *,
        selector: FewShotSelector | None = None,
        validator: QualityValidator | None = None,
        thinker: SequentialThinker | None = None,
    ):
        self.provider = provider
        self.config = config or AppConfig()
        if selector is None:
            path = self.config.fewshot.resolved_examples_path
            examples = load_examples(path) if path is not None else load_examples()
            selector = FewShotSelector(examples, limit=self.config.fewshot.limit)
        self.selector = selector
        self.validator = validator or QualityValidator(self.config.validation)
        self.thinker = thinker or SequentialThinker(provider, self.config)

    # --- routing -----------------------------------------------------------

    def is_complex(self, request: EnhancementRequest) -> bool:
        """Heuristic: long prompts, planning/analysis keywords, or an explicit thought count."""
        thinking = self.config.thinking
        if request.thought_count is not None:
            return True
        if word_count(request.prompt) >= thinking.complexity_min_words:
            return True
        lowered = request.prompt.lower()
        return any(re.search(rf"\b{re.escape(k)}\b", lowered) for k in thinking.complexity_keywords)

    def wants_sequential(self, request: EnhancementRequest) -> bool:
        if request.enable_sequential_thinking is not None:
            return request.enable_sequential_thinking
        return self.config.thinking.default_enabled and self.is_complex(request)

    # --- main entry --------------------------------------------------------

    async def enhance(self, request: EnhancementRequest | dict[str, Any]) -> EnhancementResult:
        """Run the full enhancement pipeline for one request."""
        if not isinstance(request, EnhancementRequest):
            try:
                request = EnhancementRequest.model_validate(request)
            except ValidationError as exc:
                raise InvalidRequestError(f"invalid enhancement request: {exc}") from exc
        limit = self.config.validation.max_prompt_chars
        if len(request.prompt) > limit:
            raise InvalidRequestError(f"prompt is {len(request.prompt)} characters, the limit is {limit}")

        start = time.monotonic()
        cfg = self.config
        runner = GenerationRunner(
            self.provider,
            cfg.retry,
            Deadline(cfg.retry.request_deadline),
            cfg.llm.timeout,
        )
        trace = DiagnosticTrace(sequential_requested=self.wants_sequential(request))

        category = detect_category(request.prompt)
        examples = self.selector.select(
            style=request.style,
            tone=request.tone,
            goal=request.goal,
            category=category,
        )
        trace.examples_used = [e.input for e in examples]
        logger.info(
            "Enhancing prompt (%d chars, category=%s, sequential=%s)",
            len(request.prompt), category, trace.sequential_requested,
        )

        try:
            draft = await self._generate_validated(request, examples, runner, trace)
            if draft is None:
                return self._finish_fallback(request, category, runner, trace, start)

            if not trace.sequential_requested:
                return self._finish(draft, EnhancementMethod.DIRECT, [], runner, trace, start)

            thoughts = await self._think(request, draft, runner, trace)
            total = self.thinker.clamp(request.thought_count)
            if not thoughts or thoughts[-1].index != total:
                # Without a synthesis pass the last thought is reasoning, not a prompt.
                trace.thinking_aborted = True
                logger.warning(
                    "Thinking stopped after %d/%d pass(es); keeping direct result", len(thoughts), total
                )
            else:
                outcome = self.validator.validate(request.prompt, thoughts[-1].content)
                if outcome.passed:
                    return self._finish(
                        outcome.normalized, EnhancementMethod.SEQUENTIAL_THINKING, thoughts, runner, trace, start
                    )
                trace.validation_failures += 1
                trace.validation_reasons.extend(outcome.reasons)
                logger.warning("Synthesis rejected (%s); keeping direct result", ", ".join(outcome.reasons))
            return self._finish(draft, EnhancementMethod.DIRECT, thoughts, runner, trace, start)
        except asyncio.CancelledError:
            logger.info("Enhancement cancelled after %d provider call(s)", runner.calls)
            raise

    # --- stages ------------------------------------------------------------

    async def _generate_validated(
        self,
        request: EnhancementRequest,
        examples: list[FewShotExample],
        runner: GenerationRunner,
        trace: DiagnosticTrace,
    ) -> str | None:
        """Generate until a candidate passes validation. None means fall back."""
        cfg = self.config
        violations = None
        for round_number in range(1, cfg.retry.validation_attempts + 1):
            call = build_generation_call(
                request,
                examples,
                temperature=cfg.llm.temperature,
                max_tokens=cfg.llm.max_tokens,
                violations=violations,
            )
            calls_before = runner.calls
            try:
                result = await runner.generate(call)
            except AuthenticationError as exc:
                logger.warning("Provider rejected credentials, falling back: %s", exc)
                trace.fallback_reason = f"authentication failed: {exc}"
                return None
            except (RetryBudgetExhausted, DeadlineExceeded, GenerationError) as exc:
                logger.warning("Generation failed, falling back: %s", exc)
                trace.fallback_reason = str(exc)
                return None
            finally:
                trace.attempts += runner.calls - calls_before
                trace.errors = list(runner.errors)

            outcome = self.validator.validate(request.prompt, result.text)
            if outcome.passed:
                logger.debug("Candidate accepted on round %d", round_number)
                return outcome.normalized

            trace.validation_failures += 1
            trace.validation_reasons.extend(outcome.reasons)
            violations = outcome.violations
            logger.warning(
                "Candidate rejected (round %d/%d): %s",
                round_number, cfg.retry.validation_attempts, ", ".join(outcome.reasons),
            )

        trace.fallback_reason = "validation budget exhausted"
        return None

    async def _think(
        self,
        request: EnhancementRequest,
        draft: str,
        runner: GenerationRunner,
        trace: DiagnosticTrace,
    ) -> list[Thought]:
        trace.sequential_used = True
        thoughts = await self.thinker.run(request, request.thought_count, draft=draft, runner=runner)
        trace.thought_passes = len(thoughts)
        trace.errors = list(runner.errors)
        return thoughts

    # --- results -----------------------------------------------------------

    def _finish(
        self,
        text: str,
        method: EnhancementMethod,
        thoughts: list[Thought],
        runner: GenerationRunner,
        trace: DiagnosticTrace,
        start: float,
        confidence: float | None = None,
    ) -> EnhancementResult:
        trace.input_tokens = runner.input_tokens
        trace.output_tokens = runner.output_tokens
        trace.estimated_cost_usd = calculate_cost(runner.usage)
        trace.elapsed_seconds = time.monotonic() - start
        logger.info(
            "Enhancement done: method=%s attempts=%d thoughts=%d %.2fs",
            method.value, trace.attempts, len(thoughts), trace.elapsed_seconds,
        )
        return EnhancementResult(
            text=text,
            method=method,
            confidence=compute_confidence(text) if confidence is None else confidence,
            thoughts=thoughts,
            trace=trace,
        )

    def _finish_fallback(
        self,
        request: EnhancementRequest,
        category: str,
        runner: GenerationRunner,
        trace: DiagnosticTrace,
        start: float,
    ) -> EnhancementResult:
        text = fallback_enhance(request, category)
        confidence = min(compute_confidence(text), FALLBACK_CONFIDENCE)
        return self._finish(text, EnhancementMethod.FALLBACK, [], runner, trace, start, confidence)
