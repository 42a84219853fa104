"""Sequential Thinking Engine - multi-pass reasoning before final synthesis."""

from __future__ import annotations

import logging

from prompt_enhancer.clients.provider import GenerationProvider
from prompt_enhancer.config import AppConfig
from prompt_enhancer.errors import DeadlineExceeded, GenerationError, RetryBudgetExhausted
from prompt_enhancer.models.request import EnhancementRequest
from prompt_enhancer.models.result import Thought
from prompt_enhancer.pipeline.prompt_builder import build_thought_call
from prompt_enhancer.pipeline.retry import Deadline, GenerationRunner
from prompt_enhancer.utils.text import clean_output

logger = logging.getLogger(__name__)


def format_thought(thought: Thought, total: int) -> str:
    prefix = "Synthesis" if thought.is_final else "Thought"
    return f"{prefix} {thought.index}/{total}\n{thought.content}"


class SequentialThinker:
    """Runs ``thought_count`` dependent provider passes, the last one a synthesis.

    Passes are strictly sequential since each one reads every earlier thought.
    A pass that exhausts its (smaller) retry budget ends the run early and the
    last thought obtained becomes the final one.
    """

    def __init__(self, provider: GenerationProvider, config: AppConfig):
        self.provider = provider
        self.config = config

    def clamp(self, thought_count: int | None) -> int:
        count = self.config.thinking.default_thoughts if thought_count is None else thought_count
        return max(1, min(self.config.thinking.max_thoughts, count))

    async def run(
        self,
        prompt: str | EnhancementRequest,
        thought_count: int | None = None,
        *,
        draft: str | None = None,
        runner: GenerationRunner | None = None,
    ) -> list[Thought]:
        """Return the ordered thoughts; only the last one is flagged final.

        ``runner`` carries the caller's deadline and usage counters; a fresh one
        is created when the engine is used on its own.
        """
        request = prompt if isinstance(prompt, EnhancementRequest) else EnhancementRequest(prompt=prompt)
        if runner is None:
            runner = GenerationRunner(
                self.provider,
                self.config.retry,
                Deadline(self.config.retry.request_deadline),
                self.config.llm.timeout,
            )
        total = self.clamp(thought_count)
        thoughts: list[Thought] = []
        logger.info("Sequential thinking: %d pass(es)", total)

        for index in range(1, total + 1):
            call = build_thought_call(
                request,
                thoughts,
                index,
                total,
                draft=draft,
                temperature=self.config.llm.temperature,
                max_tokens=self.config.llm.max_tokens,
            )
            try:
                result = await runner.generate(call, max_attempts=self.config.retry.thought_attempts)
            except (RetryBudgetExhausted, DeadlineExceeded, GenerationError) as exc:
                logger.warning("Thinking pass %d/%d failed (%s); stopping early", index, total, exc)
                break

            content = clean_output(result.text) if index == total else result.text.strip()
            thought = Thought(index=index, content=content, is_final=index == total)
            thoughts.append(thought)
            logger.debug("%s", format_thought(thought, total))

        if thoughts and not thoughts[-1].is_final:
            thoughts[-1] = thoughts[-1].model_copy(update={"is_final": True})
            logger.warning(
                "Thinking run degraded: using thought %d/%d as the synthesis",
                thoughts[-1].index, total,
            )
        return thoughts
