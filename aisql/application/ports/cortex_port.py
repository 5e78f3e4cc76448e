"""Port interface for the hosted AI SQL functions."""

from abc import ABC, abstractmethod
from typing import Any

from aisql.domain.entities.ai_call import AICall


class CortexPort(ABC):
    @abstractmethod
    async def execute(self, call: AICall) -> Any:
        """Run one AI function call and return its raw result.

        The raw result is whatever the service produced: text, a decoded
        JSON object, a number, a vector, or None. Implementations raise
        ExternalServiceError (or let the driver's exception propagate) when
        the call itself fails, and InvalidCallError before any request is sent
        when the call cannot be expressed. They never classify the result.
        """
        ...

    async def ping(self) -> bool:
        """Return True if the service is reachable."""
        return True

    def close(self) -> None:
        """Release any open connection."""
