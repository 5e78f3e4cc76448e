"""EstimateCostUseCase — token budget for a batch of texts before running it."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from aisql.application.use_cases.invoke_function import InvokeAIFunctionUseCase
from aisql.domain.policies.token_budget import (
    CostEstimate,
    estimate_cost,
    validate_prompt_tokens,
)
from aisql.domain.value_objects.enums import AIFunction, PromptValidation

logger = logging.getLogger(__name__)


@dataclass
class BudgetReport:
    model: str | None
    token_counts: dict[str, int] = field(default_factory=dict)
    validation: dict[str, PromptValidation] = field(default_factory=dict)
    uncounted: list[str] = field(default_factory=list)
    estimate: CostEstimate | None = None


class EstimateCostUseCase:
    def __init__(self, invoker: InvokeAIFunctionUseCase):
        self._invoker = invoker

    async def execute(
        self,
        texts: dict[str, str],
        model: str | None = None,
        function_name: str = "ai_complete",
    ) -> BudgetReport:
        """Count tokens per text, validate each prompt size and price the total.

        Args:
            texts: record key → text.
            model: model the tokens are counted for.
            function_name: AI function the text will be sent to.
        """
        report = BudgetReport(model=model)
        for key, text in texts.items():
            result = await self._invoker.invoke(
                AIFunction.COUNT_TOKENS, text, model=model, function_name=function_name
            )
            if not result.ok:
                logger.warning("Could not count tokens for %s: %s", key, result.status.value)
                report.uncounted.append(key)
                continue
            report.token_counts[key] = result.value
            report.validation[key] = validate_prompt_tokens(result.value)

        report.estimate = estimate_cost(sum(report.token_counts.values()))
        return report
