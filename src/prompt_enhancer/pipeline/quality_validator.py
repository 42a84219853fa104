"""Quality Validator - rule-based checks on a candidate enhanced prompt."""

from __future__ import annotations

import re
from difflib import SequenceMatcher

from prompt_enhancer.config import ValidationConfig
from prompt_enhancer.models.validation import ValidationOutcome, ValidationRule
from prompt_enhancer.utils.text import clean_output, collapse, word_count

_SENTENCE_SPLIT_RE = re.compile(r"[.!?]+")


def compute_confidence(text: str) -> float:
    """Rough 0-1 confidence from length and word count."""
    len_score = min(len(text) / 1000.0, 1.0)
    word_score = min(word_count(text) / 50.0, 1.0)
    return round((len_score + word_score) / 2.0, 3)


def check_clarity(text: str) -> list[str]:
    issues = []
    if "  " in text:
        issues.append("Contains double spaces")
    if any(line != line.rstrip() for line in text.splitlines()):
        issues.append("Some lines end with whitespace")

    sentences = [s for s in _SENTENCE_SPLIT_RE.split(text) if s.strip()]
    if sentences:
        avg = sum(len(s) for s in sentences) / len(sentences)
        if avg > 200:
            issues.append("Average sentence length is too long (>200 chars), may affect clarity")
        elif avg < 10:
            issues.append("Average sentence length is too short (<10 chars), may be too choppy")
    return issues


def check_consistency(text: str) -> list[str]:
    seen: set[str] = set()
    for sentence in _SENTENCE_SPLIT_RE.split(text):
        key = sentence.strip().lower()
        if not key:
            continue
        if key in seen:
            return ["Duplicate sentence found"]
        seen.add(key)
    return []


def check_formatting(text: str) -> list[str]:
    issues = []
    if re.search(r" [,!?]|\w \.(?!\w)", text):
        issues.append("Inconsistent spacing around punctuation")
    if "!!" in text or "??" in text:
        issues.append("Repeated punctuation")
    return issues


def check_content(text: str, flagged_terms: tuple[str, ...]) -> list[str]:
    lowered = text.lower()
    return [f"Flagged term found: {term}" for term in flagged_terms if term in lowered]


class QualityValidator:
    """Pure, side-effect-free validation of candidate prompts."""

    def __init__(self, config: ValidationConfig | None = None):
        self.config = config or ValidationConfig()
        self._placeholders = [re.compile(p, re.IGNORECASE) for p in self.config.placeholder_patterns]

    def _is_echo(self, original: str, candidate: str) -> bool:
        a, b = collapse(original), collapse(candidate)
        if a == b:
            return True
        return SequenceMatcher(None, a, b).ratio() >= self.config.max_similarity

    def validate(self, original_prompt: str, candidate_text: str) -> ValidationOutcome:
        """Check ``candidate_text`` against every rule. All must pass."""
        cfg = self.config
        normalized = clean_output(candidate_text or "")
        if not normalized:
            return ValidationOutcome(passed=False, violations=[ValidationRule.EMPTY], normalized="")

        violations: list[ValidationRule] = []
        original = (original_prompt or "").strip()

        if self._is_echo(original, normalized):
            violations.append(ValidationRule.UNCHANGED)

        # Long originals only need a rewrite of max_prompt_chars, leaving room under max_chars.
        min_len = min(
            max(cfg.min_chars, int(len(original) * cfg.min_length_ratio)),
            cfg.max_prompt_chars,
            cfg.max_chars,
        )
        if len(normalized) < min_len:
            violations.append(ValidationRule.TOO_SHORT)
        if word_count(normalized) < cfg.min_words:
            violations.append(ValidationRule.TOO_FEW_WORDS)
        if len(normalized) > cfg.max_chars:
            violations.append(ValidationRule.TOO_LONG)

        # Placeholders the user wrote themselves are not artifacts.
        if any(p.search(normalized) and not p.search(original) for p in self._placeholders):
            violations.append(ValidationRule.PLACEHOLDER)

        warnings = (
            check_clarity(normalized)
            + check_consistency(normalized)
            + check_formatting(normalized)
            + check_content(normalized, cfg.flagged_terms)
        )
        return ValidationOutcome(
            passed=not violations,
            violations=violations,
            normalized=normalized,
            warnings=warnings,
        )
