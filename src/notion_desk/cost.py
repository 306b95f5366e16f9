"""Gemini token accounting for transcription and chat calls.

Pricing constants live here. Every LLM operation (transcribe, chat,
voice_note) reports its usage through log_usage, which emits one structured
log line and adds the cost to a per-operation running total for the
lifetime of the process.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass

logger = logging.getLogger(__name__)

# Gemini 3 Flash pricing
INPUT_PRICE_PER_TOKEN = 0.50 / 1_000_000  # $0.50 per 1M input tokens
OUTPUT_PRICE_PER_TOKEN = 3.00 / 1_000_000  # $3.00 per 1M output tokens

# operation -> accumulated USD since process start
_operation_costs: defaultdict[str, float] = defaultdict(float)


@dataclass
class TokenUsage:
    """Token counts and cost of one Gemini call (or one whole stream)."""

    prompt_tokens: int
    completion_tokens: int
    total_tokens: int
    cost_usd: float


def extract_usage(response: object) -> TokenUsage:
    """Read usage_metadata from a response or from the final chunk of a stream.

    Counts that are missing or None are treated as 0.
    """
    metadata = getattr(response, "usage_metadata", None)
    prompt_tokens = getattr(metadata, "prompt_token_count", 0) or 0
    completion_tokens = getattr(metadata, "candidates_token_count", 0) or 0
    return TokenUsage(
        prompt_tokens=prompt_tokens,
        completion_tokens=completion_tokens,
        total_tokens=prompt_tokens + completion_tokens,
        cost_usd=prompt_tokens * INPUT_PRICE_PER_TOKEN
        + completion_tokens * OUTPUT_PRICE_PER_TOKEN,
    )


def get_operation_costs() -> dict[str, float]:
    """Return accumulated cost per operation."""
    return dict(_operation_costs)


def reset_operation_costs() -> None:
    """Clear the running totals. Used for testing."""
    _operation_costs.clear()


def log_usage(operation: str, usage: TokenUsage) -> None:
    """Record usage of one LLM operation and log it as structured data.

    Args:
        operation: What the call did, e.g. "transcribe" or "chat".
        usage: Token usage data from extract_usage.
    """
    _operation_costs[operation] += usage.cost_usd

    # Lazy import: llm.prompts -> llm package -> chat -> cost
    from notion_desk.llm.prompts import GEMINI_MODEL

    logger.info(
        "Gemini call complete",
        extra={
            "operation": operation,
            "model": GEMINI_MODEL,
            "prompt_tokens": usage.prompt_tokens,
            "completion_tokens": usage.completion_tokens,
            "total_tokens": usage.total_tokens,
            "cost_usd": round(usage.cost_usd, 6),
            "operation_total_usd": round(_operation_costs[operation], 6),
        },
    )
