"""Pydantic model for few-shot examples."""

from __future__ import annotations

from pydantic import BaseModel, Field


class FewShotExample(BaseModel):
    """A worked (input, improved prompt) pair used to steer generation."""

    input: str
    output: str
    category: str = "general"
    styles: tuple[str, ...] = ()
    tones: tuple[str, ...] = ()
    goals: tuple[str, ...] = ()  # keywords matched against the request goal
    quality_score: float = Field(default=0.5, ge=0.0, le=1.0)

    model_config = {"frozen": True}
