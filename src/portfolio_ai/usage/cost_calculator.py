"""Token usage totals and cost estimates for provider responses."""

from __future__ import annotations

from collections.abc import Iterable

from portfolio_ai.models.generation import GenerationResponse, GenerationResult

UsageRecord = GenerationResponse | GenerationResult

# Pricing per 1M tokens (USD)
MODEL_PRICING: dict[str, dict[str, float]] = {
    "gpt-4o-mini": {"input": 0.15, "output": 0.60},
    "gpt-4o": {"input": 2.50, "output": 10.00},
    "claude-3-haiku-20240307": {"input": 0.25, "output": 1.25},
    "claude-haiku-4-5-20251001": {"input": 1.00, "output": 5.00},
    "gemini-1.5-flash": {"input": 0.075, "output": 0.30},
}


def summarize_usage(responses: Iterable[UsageRecord]) -> dict:
    """Total prompt/completion tokens, with a per-model breakdown.

    Responses without usage (some providers do not report it) count as calls
    but add no tokens.
    """
    summary: dict = {"calls": 0, "prompt_tokens": 0, "completion_tokens": 0, "by_model": {}}
    for response in responses:
        summary["calls"] += 1
        entry = summary["by_model"].setdefault(
            response.model, {"calls": 0, "prompt_tokens": 0, "completion_tokens": 0}
        )
        entry["calls"] += 1
        if response.usage is None:
            continue
        for key in ("prompt_tokens", "completion_tokens"):
            value = getattr(response.usage, key)
            summary[key] += value
            entry[key] += value
    summary["total_tokens"] = summary["prompt_tokens"] + summary["completion_tokens"]
    return summary


def calculate_cost(responses: Iterable[UsageRecord]) -> float:
    """Estimated total cost in USD. Unknown models and missing usage add zero."""
    total = 0.0
    for response in responses:
        pricing = MODEL_PRICING.get(response.model)
        if pricing is None or response.usage is None:
            continue
        total += (response.usage.prompt_tokens / 1_000_000) * pricing["input"]
        total += (response.usage.completion_tokens / 1_000_000) * pricing["output"]
    return total
