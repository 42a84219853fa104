"""Assembles provider calls for direct generation and sequential thinking passes."""

from __future__ import annotations

from prompt_enhancer.clients.provider import GenerationCall
from prompt_enhancer.models.examples import FewShotExample
from prompt_enhancer.models.request import EnhancementRequest
from prompt_enhancer.models.result import Thought
from prompt_enhancer.models.validation import RULE_DESCRIPTIONS, ValidationRule

SYSTEM_PROMPT = """\
You are an expert prompt engineer. Your only task is to rewrite the user's prompt so a \
large language model can answer it as well as possible.

Guidelines:
- Make the request clear and specific; state the goal and any constraints explicitly.
- Resolve ambiguity while staying faithful to the original intent. Do not invent facts.
- Structure the prompt (context, task, requirements, output format) when that helps.
- Honour the requested goal, style, tone, audience and language when they are given.
- If a language is requested, write the whole enhanced prompt in that language.
- Never leave template placeholders such as {{...}}, [INSERT ...] or TODO in the result.

Output ONLY the enhanced prompt. No introduction, no explanation, no labels such as \
"Enhanced prompt:", and no answer to the prompt itself."""

THINKING_SYSTEM_PROMPT = """\
You are an expert prompt engineer reasoning step by step about how to improve a prompt. \
Each step builds on the previous ones. Be concrete and brief; write plain prose or short \
bullet points. Do not answer the prompt itself."""

LEVEL_GUIDANCE: dict[int, str] = {
    1: "minimal edits: fix clarity and ambiguity only",
    2: "light edits: clarify and add the most important constraints",
    3: "moderate rewrite: clarify, add constraints and a clear structure",
    4: "substantial rewrite: full structure, explicit requirements and output format",
    5: "complete refactor: restructure freely while keeping the original intent",
}


def format_instructions(request: EnhancementRequest) -> str:
    """The shaping fields as "Label: value" lines; empty when none are set."""
    lines = []
    if request.goal:
        lines.append(f"Goal: {request.goal}")
    if request.style:
        lines.append(f"Style: {request.style}")
    if request.tone:
        lines.append(f"Tone: {request.tone}")
    if request.level:
        lines.append(f"Enhancement level: {request.level} ({LEVEL_GUIDANCE[request.level]})")
    if request.audience:
        lines.append(f"Audience: {request.audience}")
    if request.language:
        lines.append(f"Language: {request.language}")
    return "\n".join(lines)


def format_user_request(request: EnhancementRequest) -> str:
    instructions = format_instructions(request)
    if not instructions:
        return f"Enhance this prompt:\n\n{request.prompt}"
    return f"{instructions}\n\n---\nOriginal prompt:\n{request.prompt}"


def build_generation_call(
    request: EnhancementRequest,
    examples: list[FewShotExample],
    *,
    temperature: float = 0.2,
    max_tokens: int = 2048,
    violations: list[ValidationRule] | None = None,
) -> GenerationCall:
    """Build the direct-generation call: few-shot pairs, then the request.

    ``violations`` from a rejected attempt are appended as extra constraints.
    """
    messages: list[dict[str, str]] = []
    for example in examples:
        messages.append({"role": "user", "content": f"Enhance this prompt:\n\n{example.input}"})
        messages.append({"role": "assistant", "content": example.output})

    user = format_user_request(request)
    purpose = "direct"
    if violations:
        problems = "\n".join(f"- {RULE_DESCRIPTIONS[v]}" for v in violations)
        user += (
            "\n\nYour previous answer was rejected because:\n"
            f"{problems}\n"
            "Return a complete, improved prompt that is longer and more specific than the original."
        )
        purpose = "reinforced"
    messages.append({"role": "user", "content": user})

    return GenerationCall(
        system=SYSTEM_PROMPT,
        messages=messages,
        temperature=temperature,
        max_tokens=max_tokens,
        purpose=purpose,
    )


def _thought_step_instruction(index: int, total: int) -> str:
    if index == total:
        return (
            "This is the final synthesis step. Using the reasoning above, write the final "
            "enhanced prompt. Output ONLY the enhanced prompt text, with no labels or commentary."
        )
    if index == 1:
        return (
            f"Step {index} of {total}: identify the intent, the missing context and the "
            "ambiguities in the original prompt."
        )
    return (
        f"Step {index} of {total}: build on the previous steps. Decide which constraints, "
        "structure and output format the enhanced prompt needs and refine the plan."
    )


def build_thought_call(
    request: EnhancementRequest,
    thoughts: list[Thought],
    index: int,
    total: int,
    *,
    draft: str | None = None,
    temperature: float = 0.2,
    max_tokens: int = 2048,
) -> GenerationCall:
    """Build the call for thinking pass ``index`` (1-based) of ``total``."""
    sections = [format_user_request(request)]
    if draft:
        sections.append(f"Initial draft of the enhanced prompt:\n{draft}")
    if thoughts:
        history = "\n\n".join(f"Thought {t.index}/{total}:\n{t.content}" for t in thoughts)
        sections.append(f"Reasoning so far:\n{history}")
    sections.append(_thought_step_instruction(index, total))

    final = index == total
    return GenerationCall(
        system=SYSTEM_PROMPT if final else THINKING_SYSTEM_PROMPT,
        messages=[{"role": "user", "content": "\n\n".join(sections)}],
        temperature=temperature,
        max_tokens=max_tokens,
        purpose="synthesis" if final else f"thought-{index}",
    )
