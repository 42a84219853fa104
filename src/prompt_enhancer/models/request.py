"""Pydantic model for an inbound enhancement request."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from prompt_enhancer.config import MAX_THOUGHTS


class EnhancementRequest(BaseModel):
    prompt: str
    goal: str | None = None
    style: str | None = None
    tone: str | None = None
    audience: str | None = None
    language: str | None = None
    level: int | None = Field(default=None, ge=1, le=5)  # 1 = light touch, 5 = full rewrite
    enable_sequential_thinking: bool | None = None  # None -> process-wide default
    thought_count: int | None = None

    model_config = {"frozen": True}

    @field_validator("prompt")
    @classmethod
    def _prompt_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("prompt must not be empty")
        return value

    @field_validator("goal", "style", "tone", "audience", "language")
    @classmethod
    def _blank_is_unset(cls, value: str | None) -> str | None:
        if value is None:
            return None
        value = value.strip()
        return value or None

    @field_validator("thought_count")
    @classmethod
    def _clamp_thoughts(cls, value: int | None) -> int | None:
        # The configured max_thoughts may lower this further.
        if value is None:
            return None
        return max(1, min(MAX_THOUGHTS, value))
