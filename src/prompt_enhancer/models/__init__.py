"""Data models for the prompt enhancement pipeline."""

from prompt_enhancer.models.examples import FewShotExample
from prompt_enhancer.models.request import EnhancementRequest
from prompt_enhancer.models.result import (
    DiagnosticTrace,
    EnhancementMethod,
    EnhancementResult,
    Thought,
)
from prompt_enhancer.models.validation import ValidationOutcome, ValidationRule

__all__ = [
    "DiagnosticTrace",
    "EnhancementMethod",
    "EnhancementRequest",
    "EnhancementResult",
    "FewShotExample",
    "Thought",
    "ValidationOutcome",
    "ValidationRule",
]
