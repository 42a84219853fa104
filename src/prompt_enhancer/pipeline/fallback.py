"""Deterministic, provider-independent prompt restructuring."""

from __future__ import annotations

import re

from prompt_enhancer.models.request import EnhancementRequest
from prompt_enhancer.pipeline.fewshot_selector import detect_category
from prompt_enhancer.pipeline.prompt_builder import LEVEL_GUIDANCE

DEFAULT_GOAL = "Produce a complete, accurate and well-organized response"
DEFAULT_STYLE = "clear and structured"
DEFAULT_TONE = "neutral"

ROLE_BY_CATEGORY: dict[str, str] = {
    "code": "You are a senior software engineer who writes correct, readable code.",
    "analysis": "You are an experienced analyst who reasons carefully and states trade-offs.",
    "explanation": "You are a patient teacher who explains ideas clearly.",
    "definition": "You are a subject-matter expert writing for a general audience.",
    "writing": "You are a skilled professional writer.",
    "general": "You are a knowledgeable and helpful assistant.",
}

REQUIREMENTS_BY_CATEGORY: dict[str, tuple[str, ...]] = {
    "code": (
        "State the language and any assumptions before the code.",
        "Handle edge cases and invalid input explicitly.",
        "Include brief comments and a short usage example.",
    ),
    "analysis": (
        "Cover each option or factor separately before concluding.",
        "Support claims with concrete reasons or examples.",
        "End with a clear recommendation or summary.",
    ),
    "explanation": (
        "Start with a one-sentence overview.",
        "Build up from fundamentals to details.",
        "Use at least one concrete example or analogy.",
    ),
    "definition": (
        "Give a precise definition first.",
        "Follow with an everyday example.",
        "Mention common misconceptions, if any.",
    ),
    "writing": (
        "Keep a consistent voice throughout.",
        "Use a clear opening, body and closing.",
        "Avoid filler and generic phrasing.",
    ),
    "general": (
        "Address every part of the request.",
        "Be specific and avoid vague statements.",
        "Ask for missing information only if it is essential.",
    ),
}

OUTPUT_FORMAT_BY_CATEGORY: dict[str, str] = {
    "code": "A single code block followed by a short explanation.",
    "analysis": "Headed sections or a comparison table, then a conclusion.",
    "explanation": "Short paragraphs with a final summary.",
    "definition": "A definition paragraph followed by a bulleted example list.",
    "writing": "The finished text only, ready to use.",
    "general": "Well-organized paragraphs or bullet points.",
}


def tidy_task(prompt: str) -> str:
    """Collapse whitespace, capitalise, and terminate with punctuation."""
    task = re.sub(r"\s+", " ", prompt).strip()
    if not task:
        return task
    task = task[0].upper() + task[1:]
    if task[-1] not in ".!?:":
        task += "."
    return task


def fallback_enhance(request: EnhancementRequest, category: str | None = None) -> str:
    """Wrap the prompt in role, goal/style scaffolding, requirements and output format."""
    category = category or detect_category(request.prompt)
    if category not in ROLE_BY_CATEGORY:
        category = "general"

    lines = [
        ROLE_BY_CATEGORY[category],
        "",
        "Task:",
        tidy_task(request.prompt),
        "",
        f"Goal: {request.goal or DEFAULT_GOAL}",
        f"Style: {request.style or DEFAULT_STYLE}",
        f"Tone: {request.tone or DEFAULT_TONE}",
    ]
    if request.audience:
        lines.append(f"Audience: {request.audience}")
    if request.level:
        lines.append(f"Depth: {LEVEL_GUIDANCE[request.level]}")
    if request.language:
        lines.append(f"Respond in: {request.language}")

    lines += ["", "Requirements:"]
    lines += [f"- {item}" for item in REQUIREMENTS_BY_CATEGORY[category]]
    lines += ["", "Output format:", OUTPUT_FORMAT_BY_CATEGORY[category]]
    return "\n".join(lines)
