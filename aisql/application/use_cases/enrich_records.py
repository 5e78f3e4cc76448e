"""EnrichRecordsUseCase — run one AI function over a batch of records."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping

from aisql.application.ports.result_repo import ResultRepository
from aisql.application.use_cases.invoke_function import InvokeAIFunctionUseCase
from aisql.domain.entities.ai_call import AICall, validate_params
from aisql.domain.entities.ai_result import AIResult
from aisql.domain.entities.record import Record
from aisql.domain.errors import InvalidCallError
from aisql.domain.policies.decisions import SKIP_EMPTY_INPUT, SKIP_TOO_LONG, status_label
from aisql.domain.policies.token_budget import exceeds_budget
from aisql.domain.value_objects.call_options import CallOptions
from aisql.domain.value_objects.enums import AIFunction, CallStatus

logger = logging.getLogger(__name__)


@dataclass
class EnrichmentOutcome:
    """Summary of one record's enrichment."""

    record_key: str
    status: CallStatus
    label: str
    value: Any = None
    token_count: int | None = None
    error: str | None = None


@dataclass
class EnrichmentReport:
    outcomes: list[EnrichmentOutcome] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.outcomes)

    def status_distribution(self) -> dict[str, dict[str, float]]:
        """Count and percentage per status, like a GROUP BY status query."""
        return status_distribution(_count(self.outcomes))


def _count(outcomes: list[EnrichmentOutcome]) -> dict[CallStatus, int]:
    counts: dict[CallStatus, int] = {}
    for outcome in outcomes:
        counts[outcome.status] = counts.get(outcome.status, 0) + 1
    return counts


def status_distribution(counts: Mapping[CallStatus, int]) -> dict[str, dict[str, float]]:
    total = sum(counts.values())
    return {
        status.value: {
            "count": count,
            "percentage": round(count * 100.0 / total, 2) if total else 0.0,
        }
        for status, count in sorted(counts.items(), key=lambda kv: -kv[1])
    }


class EnrichRecordsUseCase:
    """Sequentially enrich records: optional token pre-check → invoke → persist."""

    def __init__(
        self,
        invoker: InvokeAIFunctionUseCase,
        result_repo: ResultRepository | None = None,
        max_input_tokens: int | None = None,
        token_model: str | None = None,
        label_kind: str = "completion",
    ):
        self._invoker = invoker
        self._results = result_repo
        self._max_input_tokens = max_input_tokens
        self._token_model = token_model
        self.label_kind = label_kind

    async def execute(
        self,
        records: list[Record],
        function: AIFunction | str,
        model: str | None = None,
        options: Mapping[str, Any] | None = None,
        **params: Any,
    ) -> EnrichmentReport:
        """Enrich *records* with *function*.

        Raises:
            InvalidCallError: duplicate record keys, or a call that is
                malformed regardless of the record (bad options or arguments,
                no model).
                A single record whose input does not fit the function is
                reported as Invalid and the batch continues.
        """
        try:
            function = AIFunction(function)
        except ValueError:
            raise InvalidCallError(f"Unknown AI function: {function!r}") from None
        CallOptions.from_mapping(function, options)
        validate_params(function, params)
        if function.requires_model and not model:
            raise InvalidCallError(f"{function.value} requires a model")

        keys = [r.key for r in records]
        if len(keys) != len(set(keys)):
            raise InvalidCallError("Record keys must be unique within a batch")

        report = EnrichmentReport()
        for record in records:
            outcome = await self._enrich_one(record, function, model, options, params)
            report.outcomes.append(outcome)

        logger.info(
            "Enriched %d records with %s: %s",
            report.total, function.value,
            {k: v["count"] for k, v in report.status_distribution().items()},
        )
        return report

    async def _enrich_one(
        self,
        record: Record,
        function: AIFunction,
        model: str | None,
        options: Mapping[str, Any] | None,
        params: Mapping[str, Any],
    ) -> EnrichmentOutcome:
        if not record.has_input():
            logger.warning("Record %s has no input, skipping", record.key)
            result = AIResult.skipped(function, reason=SKIP_EMPTY_INPUT, model=model)
            return await self._finish(record, result, None)

        token_count = None
        if self._max_input_tokens is not None and isinstance(record.payload, str):
            count = await self._invoker.invoke(
                AIFunction.COUNT_TOKENS, record.payload,
                model=(model or self._token_model) if function.requires_model else None,
                function_name=function.token_function_name,
            )
            if count.ok:
                token_count = count.value
                if exceeds_budget(token_count, self._max_input_tokens):
                    logger.info(
                        "Record %s: %d tokens exceeds budget %d, skipping",
                        record.key, token_count, self._max_input_tokens,
                    )
                    result = AIResult.skipped(function, reason=SKIP_TOO_LONG, model=model)
                    return await self._finish(record, result, token_count)

        try:
            call = AICall.build(function, record.payload, model=model, options=options, **params)
            result = await self._invoker.execute(call)
        except InvalidCallError as e:
            logger.warning("Record %s does not fit %s: %s", record.key, function.value, e)
            result = AIResult.invalid(function, error=e, raw=None, model=model)
        return await self._finish(record, result, token_count)

    async def _finish(self, record: Record, result: AIResult, token_count: int | None) -> EnrichmentOutcome:
        result.record_key = record.key
        if self._results is not None:
            await self._results.save(result)

        return EnrichmentOutcome(
            record_key=record.key,
            status=result.status,
            label=status_label(result, self.label_kind),
            value=result.value,
            token_count=token_count,
            error=str(result.error) if result.error else None,
        )
