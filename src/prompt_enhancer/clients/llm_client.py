"""Claude API adapter for the generation provider protocol."""

from __future__ import annotations

import asyncio
import logging

import anthropic

from prompt_enhancer.clients.provider import GenerationCall, GenerationResult
from prompt_enhancer.errors import (
    AuthenticationError,
    GenerationError,
    MalformedResponseError,
    RateLimitError,
    TransportError,
)

logger = logging.getLogger(__name__)


def _retry_after(exc: anthropic.APIStatusError) -> float | None:
    response = getattr(exc, "response", None)
    if response is None:
        return None
    value = response.headers.get("retry-after")
    try:
        return float(value) if value is not None else None
    except ValueError:
        return None


class LLMClient:
    """Async Claude API client.

    Retries are owned by the pipeline, so the SDK's own retry loop is disabled
    and every failure is translated into the pipeline's error taxonomy.
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str = "claude-haiku-4-5-20251001",
        base_url: str | None = None,
    ):
        self.model = model
        self.has_credential = bool(api_key)
        kwargs: dict = {"max_retries": 0}
        if api_key is not None:
            kwargs["api_key"] = api_key
        if base_url is not None:
            kwargs["base_url"] = base_url
        self.client = anthropic.AsyncAnthropic(**kwargs)

    @classmethod
    def from_config(cls, llm_config) -> LLMClient:
        return cls(
            api_key=llm_config.api_key,
            model=llm_config.model,
            base_url=llm_config.base_url,
        )

    async def _call_api(self, call: GenerationCall) -> anthropic.types.Message:
        kwargs: dict = {
            "model": self.model,
            "max_tokens": call.max_tokens,
            "temperature": call.temperature,
            "messages": call.messages,
        }
        if call.system:
            kwargs["system"] = call.system
        return await self.client.messages.create(**kwargs)

    async def generate(self, call: GenerationCall, timeout: float) -> GenerationResult:
        """Send one call to Claude, bounded by ``timeout`` seconds."""
        if not self.has_credential:
            raise AuthenticationError("no API credential configured")

        logger.debug("LLM call: model=%s purpose=%s timeout=%.1fs", self.model, call.purpose, timeout)
        try:
            message = await asyncio.wait_for(self._call_api(call), timeout=timeout)
        except asyncio.TimeoutError as exc:
            raise TransportError(f"provider timed out after {timeout:.1f}s", cause=exc) from exc
        except anthropic.APITimeoutError as exc:
            raise TransportError("provider request timed out", cause=exc) from exc
        except anthropic.APIConnectionError as exc:
            raise TransportError(f"connection failed: {exc}", cause=exc) from exc
        except (anthropic.AuthenticationError, anthropic.PermissionDeniedError) as exc:
            raise AuthenticationError(f"credential rejected: {exc}", cause=exc) from exc
        except anthropic.RateLimitError as exc:
            raise RateLimitError("rate limited", retry_after=_retry_after(exc), cause=exc) from exc
        except anthropic.InternalServerError as exc:
            raise TransportError(f"provider error {exc.status_code}", cause=exc) from exc
        except anthropic.APIStatusError as exc:
            if exc.status_code in (408, 409, 529):
                raise TransportError(f"provider busy ({exc.status_code})", cause=exc) from exc
            raise GenerationError(f"request rejected ({exc.status_code}): {exc}", cause=exc) from exc

        return self._parse(message)

    def _parse(self, message) -> GenerationResult:
        blocks = getattr(message, "content", None) or []
        parts = [
            block.text
            for block in blocks
            if getattr(block, "type", None) == "text" and isinstance(getattr(block, "text", None), str)
        ]
        text = "".join(parts).strip()
        if not text:
            raise MalformedResponseError("provider returned no text content")

        usage = getattr(message, "usage", None)
        input_tokens = getattr(usage, "input_tokens", 0) or 0
        output_tokens = getattr(usage, "output_tokens", 0) or 0
        logger.debug("LLM response: %d input, %d output tokens", input_tokens, output_tokens)
        return GenerationResult(
            text=text,
            model=self.model,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
        )
