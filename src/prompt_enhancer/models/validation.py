"""Quality validation outcome models."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel


class ValidationRule(str, Enum):
    EMPTY = "empty"
    UNCHANGED = "unchanged"
    TOO_SHORT = "too_short"
    TOO_FEW_WORDS = "too_few_words"
    TOO_LONG = "too_long"
    PLACEHOLDER = "placeholder"


RULE_DESCRIPTIONS: dict[ValidationRule, str] = {
    ValidationRule.EMPTY: "the answer was empty",
    ValidationRule.UNCHANGED: "the answer repeated the original prompt instead of improving it",
    ValidationRule.TOO_SHORT: "the answer was shorter than the original prompt",
    ValidationRule.TOO_FEW_WORDS: "the answer was too terse to be a usable prompt",
    ValidationRule.TOO_LONG: "the answer was far too long",
    ValidationRule.PLACEHOLDER: "the answer contained unresolved placeholders or template markers",
}


class ValidationOutcome(BaseModel):
    passed: bool
    violations: list[ValidationRule] = []
    normalized: str | None = None
    warnings: list[str] = []  # advisory only, never fail a candidate

    @property
    def reasons(self) -> list[str]:
        return [v.value for v in self.violations]
