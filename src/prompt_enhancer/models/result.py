"""Pydantic models for enhancement output."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class EnhancementMethod(str, Enum):
    DIRECT = "direct"
    SEQUENTIAL_THINKING = "sequential_thinking"
    FALLBACK = "fallback"


class Thought(BaseModel):
    """One step of a sequential thinking run."""

    index: int = Field(ge=1)
    content: str
    is_final: bool = False


class DiagnosticTrace(BaseModel):
    examples_used: list[str] = []
    attempts: int = 0
    validation_failures: int = 0
    validation_reasons: list[str] = []
    errors: list[str] = []
    sequential_requested: bool = False
    sequential_used: bool = False
    thought_passes: int = 0
    thinking_aborted: bool = False
    input_tokens: int = 0
    output_tokens: int = 0
    estimated_cost_usd: float = 0.0
    elapsed_seconds: float = 0.0
    fallback_reason: str | None = None


class EnhancementResult(BaseModel):
    text: str
    method: EnhancementMethod
    confidence: float = 0.0
    thoughts: list[Thought] = []
    trace: DiagnosticTrace = Field(default_factory=DiagnosticTrace)
