"""TokenBudgetPolicy — prompt validation, skip limits and cost estimates from token counts."""

from __future__ import annotations

from dataclasses import dataclass

from aisql.domain.value_objects.enums import PromptValidation

MIN_PROMPT_TOKENS = 100
MAX_PROMPT_TOKENS = 3000

# Example pricing, USD per 1K tokens. Adjust to the account's actual rates.
INPUT_PRICE_PER_1K = 0.003
OUTPUT_PRICE_PER_1K = 0.015
OUTPUT_RATIO = 0.3
GUARD_OVERHEAD_FACTOR = 1.2


@dataclass(frozen=True)
class CostEstimate:
    input_tokens: int
    estimated_output_tokens: float
    input_cost_usd: float
    output_cost_usd: float
    guard_overhead_tokens: float

    @property
    def total_tokens(self) -> float:
        return self.input_tokens + self.estimated_output_tokens

    @property
    def total_cost_usd(self) -> float:
        return round(self.input_cost_usd + self.output_cost_usd, 6)


def validate_prompt_tokens(
    tokens: int,
    min_tokens: int = MIN_PROMPT_TOKENS,
    max_tokens: int = MAX_PROMPT_TOKENS,
) -> PromptValidation:
    """Classify a prompt by size: Too Short / Too Long / Valid."""
    if tokens < min_tokens:
        return PromptValidation.TOO_SHORT
    if tokens > max_tokens:
        return PromptValidation.TOO_LONG
    return PromptValidation.VALID


def exceeds_budget(tokens: int, max_input_tokens: int) -> bool:
    return tokens > max_input_tokens


def estimate_cost(input_tokens: int, output_ratio: float = OUTPUT_RATIO) -> CostEstimate:
    """Estimate the cost of sending *input_tokens* to a completion model.

    Output is assumed to be ``output_ratio`` of the input. Guard overhead is
    reported separately and not included in the cost.
    """
    if input_tokens < 0:
        raise ValueError("input_tokens must be non-negative")

    output_tokens = input_tokens * output_ratio
    return CostEstimate(
        input_tokens=input_tokens,
        estimated_output_tokens=output_tokens,
        input_cost_usd=round(input_tokens / 1000.0 * INPUT_PRICE_PER_1K, 6),
        output_cost_usd=round(output_tokens / 1000.0 * OUTPUT_PRICE_PER_1K, 6),
        guard_overhead_tokens=round(input_tokens * GUARD_OVERHEAD_FACTOR - input_tokens, 2),
    )
