"""Tests for the token budget policy."""

import pytest

from aisql.domain.policies.token_budget import (
    exceeds_budget,
    estimate_cost,
    validate_prompt_tokens,
)
from aisql.domain.value_objects.enums import PromptValidation


@pytest.mark.parametrize("tokens,expected", [
    (0, PromptValidation.TOO_SHORT),
    (99, PromptValidation.TOO_SHORT),
    (100, PromptValidation.VALID),
    (3000, PromptValidation.VALID),
    (3001, PromptValidation.TOO_LONG),
])
def test_validate_prompt_tokens(tokens, expected):
    assert validate_prompt_tokens(tokens) == expected


def test_validate_custom_limits():
    assert validate_prompt_tokens(50, min_tokens=10, max_tokens=40) == PromptValidation.TOO_LONG


def test_exceeds_budget_is_strict():
    assert not exceeds_budget(4000, 4000)
    assert exceeds_budget(4001, 4000)


def test_estimate_cost_arithmetic():
    estimate = estimate_cost(10_000)
    assert estimate.estimated_output_tokens == pytest.approx(3000)
    assert estimate.input_cost_usd == pytest.approx(0.03)
    assert estimate.output_cost_usd == pytest.approx(0.045)
    assert estimate.total_cost_usd == pytest.approx(0.075)
    assert estimate.total_tokens == pytest.approx(13_000)
    assert estimate.guard_overhead_tokens == pytest.approx(2000)


def test_estimate_cost_zero():
    estimate = estimate_cost(0)
    assert estimate.total_cost_usd == 0


def test_estimate_cost_negative_rejected():
    with pytest.raises(ValueError):
        estimate_cost(-1)
