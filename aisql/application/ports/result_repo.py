"""Port interface for classified AI result persistence."""

from abc import ABC, abstractmethod

from aisql.domain.entities.ai_result import AIResult
from aisql.domain.value_objects.enums import AIFunction, CallStatus


class ResultRepository(ABC):
    @abstractmethod
    async def save(self, result: AIResult) -> AIResult:
        ...

    @abstractmethod
    async def get_by_record(self, function: AIFunction, record_key: str) -> AIResult | None:
        ...

    @abstractmethod
    async def find(
        self,
        function: AIFunction | None = None,
        status: CallStatus | None = None,
        limit: int = 100,
        contract: str | None = None,
    ) -> list[AIResult]:
        """Most recent first. *contract* selects results classified under one response contract."""
        ...

    @abstractmethod
    async def count_by_status(self, function: AIFunction | None = None) -> dict[CallStatus, int]:
        """Number of stored results per status."""
        ...
