"""SummarizeGroupsUseCase — one AI_SUMMARIZE_AGG per user, day or week of records."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta

from aisql.application.ports.result_repo import ResultRepository
from aisql.application.use_cases.invoke_function import InvokeAIFunctionUseCase
from aisql.domain.entities.ai_result import AIResult
from aisql.domain.entities.record import Record
from aisql.domain.errors import InvalidCallError
from aisql.domain.value_objects.enums import AIFunction, SummaryGrouping

logger = logging.getLogger(__name__)


@dataclass
class GroupSummary:
    group: str
    record_count: int
    unique_users: int
    result: AIResult


def group_key(record: Record, grouping: SummaryGrouping) -> str | None:
    """The group a record falls into, or None when it lacks the field."""
    if grouping == SummaryGrouping.USER:
        return str(record.user_id) if record.user_id is not None else None
    if record.created_at is None:
        return None
    day = record.created_at.date()
    if grouping == SummaryGrouping.WEEK:
        # Weeks start on Monday, like DATE_TRUNC('week', ...)
        day -= timedelta(days=day.weekday())
    return day.isoformat()


class SummarizeGroupsUseCase:
    def __init__(self, invoker: InvokeAIFunctionUseCase, result_repo: ResultRepository | None = None):
        self._invoker = invoker
        self._results = result_repo

    async def execute(
        self,
        records: list[Record],
        group_by: SummaryGrouping | str,
        min_records: int = 1,
        limit: int | None = None,
    ) -> list[GroupSummary]:
        """Summarize the text of each group.

        User groups come back largest first, day and week groups newest
        first. Groups with fewer than *min_records* texts are left out.
        Persisted results use ``<grouping>:<group>`` as record key.

        Raises:
            InvalidCallError: unknown grouping or min_records below 1.
        """
        try:
            grouping = SummaryGrouping(group_by)
        except ValueError:
            raise InvalidCallError(f"Unknown grouping: {group_by!r}") from None
        if min_records < 1:
            raise InvalidCallError("min_records must be at least 1")

        groups: dict[str, list[Record]] = {}
        ungrouped = 0
        for record in records:
            key = group_key(record, grouping)
            if key is None or not (record.content and record.content.strip()):
                ungrouped += 1
                continue
            groups.setdefault(key, []).append(record)
        if ungrouped:
            logger.warning("%d records have no text or no %s, left out", ungrouped, grouping.value)

        if grouping == SummaryGrouping.USER:
            ordered = sorted(groups.items(), key=lambda kv: (-len(kv[1]), kv[0]))
        else:
            ordered = sorted(groups.items(), key=lambda kv: kv[0], reverse=True)
        ordered = [(k, members) for k, members in ordered if len(members) >= min_records]
        if limit is not None:
            ordered = ordered[:limit]

        summaries = []
        for key, members in ordered:
            result = await self._invoker.invoke(
                AIFunction.SUMMARIZE_AGG, [r.content for r in members]
            )
            result.record_key = f"{grouping.value}:{key}"
            if self._results is not None:
                await self._results.save(result)
            summaries.append(
                GroupSummary(
                    group=key,
                    record_count=len(members),
                    unique_users=len({r.user_id for r in members if r.user_id is not None}),
                    result=result,
                )
            )

        logger.info("Summarized %d %s groups", len(summaries), grouping.value)
        return summaries
