"""Tests for Gemini usage extraction and per-operation cost accounting."""

from unittest.mock import MagicMock, patch

import pytest

from notion_desk.cost import (
    INPUT_PRICE_PER_TOKEN,
    OUTPUT_PRICE_PER_TOKEN,
    TokenUsage,
    extract_usage,
    get_operation_costs,
    log_usage,
    reset_operation_costs,
)


@pytest.fixture(autouse=True)
def _fresh_totals():
    """Start every test with empty running totals."""
    reset_operation_costs()
    yield
    reset_operation_costs()


def _chunk_with_usage(prompt_tokens: int | None, completion_tokens: int | None) -> MagicMock:
    """Build a mock final stream chunk carrying usage_metadata."""
    chunk = MagicMock()
    chunk.usage_metadata.prompt_token_count = prompt_tokens
    chunk.usage_metadata.candidates_token_count = completion_tokens
    return chunk


def test_extract_usage_prices_input_and_output():
    """Input and output tokens are priced separately."""
    usage = extract_usage(_chunk_with_usage(2_000, 400))

    assert usage.total_tokens == 2_400
    expected = 2_000 * INPUT_PRICE_PER_TOKEN + 400 * OUTPUT_PRICE_PER_TOKEN
    assert usage.cost_usd == pytest.approx(expected)
    assert usage.cost_usd == pytest.approx(0.0022)


def test_extract_usage_missing_counts():
    """Chunks without counts, or without metadata at all, cost nothing."""
    assert extract_usage(_chunk_with_usage(None, None)).total_tokens == 0
    assert extract_usage(MagicMock(spec=[])).cost_usd == 0.0


def test_log_usage_accumulates_per_operation():
    """Costs are summed per operation."""
    usage = TokenUsage(prompt_tokens=10, completion_tokens=5, total_tokens=15, cost_usd=0.25)

    log_usage("chat", usage)
    log_usage("chat", usage)
    log_usage("transcribe", usage)

    assert get_operation_costs() == {"chat": 0.5, "transcribe": 0.25}


def test_log_usage_structured_output():
    """log_usage emits one INFO line with usage and the running total as extra fields."""
    usage = TokenUsage(prompt_tokens=300, completion_tokens=20, total_tokens=320, cost_usd=0.00021)

    with patch("notion_desk.cost.logger") as mock_logger:
        log_usage("voice_note", usage)

    mock_logger.info.assert_called_once()
    message, = mock_logger.info.call_args[0]
    extra = mock_logger.info.call_args[1]["extra"]
    assert message == "Gemini call complete"
    assert extra["operation"] == "voice_note"
    assert extra["model"] == "gemini-3-flash-preview"
    assert extra["total_tokens"] == 320
    assert extra["cost_usd"] == 0.00021
    assert extra["operation_total_usd"] == 0.00021
