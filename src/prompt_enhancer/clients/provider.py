"""Generation provider abstraction shared by the pipeline and its adapters."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable


@dataclass(frozen=True)
class GenerationCall:
    """Everything one provider request needs.

    ``messages`` alternate user/assistant turns and always end on a user turn;
    few-shot pairs come first.
    """

    system: str
    messages: list[dict[str, str]] = field(default_factory=list)
    temperature: float = 0.2
    max_tokens: int = 2048
    purpose: str = "direct"

    @property
    def user_prompt(self) -> str:
        """Content of the final user turn."""
        for message in reversed(self.messages):
            if message["role"] == "user":
                return message["content"]
        return ""


@dataclass
class GenerationResult:
    """Text produced by the provider including usage metadata."""

    text: str
    model: str = ""
    input_tokens: int = 0
    output_tokens: int = 0


@runtime_checkable
class GenerationProvider(Protocol):
    """Sends a GenerationCall and returns generated text.

    Implementations raise :class:`prompt_enhancer.errors.GenerationError`
    subclasses on failure and never judge the quality of the text.
    """

    async def generate(self, call: GenerationCall, timeout: float) -> GenerationResult: ...
