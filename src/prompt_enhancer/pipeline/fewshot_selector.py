"""Few-shot example loading and selection."""

from __future__ import annotations

import logging
import re
from functools import lru_cache
from pathlib import Path

import yaml

from prompt_enhancer.models.examples import FewShotExample

logger = logging.getLogger(__name__)

DEFAULT_EXAMPLES_PATH = Path(__file__).resolve().parent.parent / "data" / "few_shot_examples.yaml"

# Checked in order; the first category with a hit wins.
CATEGORY_KEYWORDS: dict[str, tuple[str, ...]] = {
    "code": ("code", "function", "program", "script", "implement", "algorithm", "bug", "debug", "api", "sql query"),
    "analysis": ("compare", "analyze", "analyse", "evaluate", "summarize", "summary", "plan", "strategy", "pros and cons"),
    "explanation": ("explain", "how does", "how do", "why", "describe"),
    "definition": ("define", "definition", "what is", "what are", "meaning of"),
    "writing": ("write", "draft", "email", "essay", "blog", "post", "story", "letter"),
}

_WORD_RE = re.compile(r"[a-z][a-z\-]*")


def detect_category(prompt: str) -> str:
    """Classify a prompt into a coarse category by keyword."""
    lowered = prompt.lower()
    for category, keywords in CATEGORY_KEYWORDS.items():
        for keyword in keywords:
            if re.search(rf"\b{re.escape(keyword)}\b", lowered):
                return category
    return "general"


@lru_cache(maxsize=8)
def load_examples(path: str | Path | None = None) -> tuple[FewShotExample, ...]:
    """Load few-shot examples from YAML. Cached per path; the result is immutable."""
    p = Path(path) if path is not None else DEFAULT_EXAMPLES_PATH
    if not p.exists():
        raise FileNotFoundError(f"Few-shot examples not found: {p}")
    with open(p, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    examples = tuple(FewShotExample(**item) for item in data.get("examples", []))
    logger.debug("Loaded %d few-shot examples from %s", len(examples), p)
    return examples


def _words(value: str | None) -> set[str]:
    if not value:
        return set()
    return set(_WORD_RE.findall(value.lower()))


def _tag_match(value: str | None, tags: tuple[str, ...]) -> bool:
    if not value:
        return False
    return value.strip().lower() in tags or bool(_words(value) & set(tags))


class FewShotSelector:
    """Pick the examples most relevant to a request's style, tone and goal.

    Selection is deterministic: ties are broken by quality score, then by the
    order examples appear in the source file. When nothing matches, the same
    highest-quality default set is returned every time.
    """

    def __init__(self, examples: tuple[FewShotExample, ...] | list[FewShotExample] | None = None, limit: int = 3):
        self.examples: tuple[FewShotExample, ...] = tuple(examples) if examples is not None else load_examples()
        self.limit = limit

    def _score(
        self,
        example: FewShotExample,
        style: str | None,
        tone: str | None,
        goal_words: set[str],
        category: str | None,
    ) -> int:
        score = 0
        if _tag_match(style, example.styles):
            score += 3
        if _tag_match(tone, example.tones):
            score += 2
        score += 2 * len(goal_words & set(example.goals))
        if category and category != "general" and example.category == category:
            score += 2
        return score

    def select(
        self,
        style: str | None = None,
        tone: str | None = None,
        goal: str | None = None,
        category: str | None = None,
        limit: int | None = None,
    ) -> list[FewShotExample]:
        """Return up to ``limit`` examples, most relevant first."""
        k = self.limit if limit is None else limit
        if k <= 0 or not self.examples:
            return []

        goal_words = _words(goal)
        ranked = sorted(
            enumerate(self.examples),
            key=lambda pair: (
                -self._score(pair[1], style, tone, goal_words, category),
                -pair[1].quality_score,
                pair[0],
            ),
        )
        return [example for _, example in ranked[:k]]

    def defaults(self, limit: int | None = None) -> list[FewShotExample]:
        """The fixed set used when a request carries no usable hints."""
        return self.select(limit=limit)
