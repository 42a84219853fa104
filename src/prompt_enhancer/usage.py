"""Estimated spend of one enhancement request, for the diagnostic trace."""

from __future__ import annotations

# USD per 1M tokens
MODEL_PRICING: dict[str, dict[str, float]] = {
    "claude-haiku-4-5-20251001": {"input": 1.00, "output": 5.00},
    "claude-sonnet-4-5-20250929": {"input": 3.00, "output": 15.00},
    "claude-opus-4-1-20250805": {"input": 15.00, "output": 75.00},
}


def calculate_cost(calls: list[tuple[str, int, int]]) -> float:
    """Sum the cost of the provider calls a request made.

    ``calls`` holds one ``(model, input_tokens, output_tokens)`` entry per
    successful call, as recorded by the request's GenerationRunner. Models
    without a price (custom endpoints, test stubs) count as free.
    """
    total = 0.0
    for model, input_tokens, output_tokens in calls:
        pricing = MODEL_PRICING.get(model)
        if pricing is None:
            continue
        total += input_tokens * pricing["input"] / 1_000_000
        total += output_tokens * pricing["output"] / 1_000_000
    return total
