"""InvokeAIFunctionUseCase — call one AI function once and classify the result."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Mapping

from cachetools import TTLCache

from aisql.application.ports.cortex_port import CortexPort
from aisql.domain.entities.ai_call import AICall
from aisql.domain.entities.ai_result import AIResult
from aisql.domain.errors import ExternalServiceError, InvalidCallError
from aisql.domain.policies.response_classifier import classify_response
from aisql.domain.value_objects.enums import AIFunction, CallStatus, SentimentContract

logger = logging.getLogger(__name__)


class InvokeAIFunctionUseCase:
    """Call-and-classify: one remote invocation feeds both value and status.

    Identical calls are served from a bounded in-memory cache when
    ``use_cache`` is on, so a caller that needs the value and the status of
    the same call never pays for two invocations. Errors and ambiguous
    (null) Filtered results are never cached.
    """

    def __init__(
        self,
        cortex: CortexPort,
        sentiment_contract: SentimentContract | str = SentimentContract.CATEGORICAL,
        use_cache: bool = True,
        cache_max_entries: int = 1024,
        cache_ttl_seconds: float = 3600,
    ):
        self._cortex = cortex
        self._contract = SentimentContract(sentiment_contract)
        self._use_cache = use_cache
        self._cache: TTLCache = TTLCache(maxsize=cache_max_entries, ttl=cache_ttl_seconds)

    async def invoke(
        self,
        function: AIFunction | str,
        payload: Any,
        model: str | None = None,
        options: Mapping[str, Any] | None = None,
        **params: Any,
    ) -> AIResult:
        """Build and execute a call. Raises InvalidCallError for malformed calls."""
        call = AICall.build(function, payload, model=model, options=options, **params)
        return await self.execute(call)

    async def execute(self, call: AICall) -> AIResult:
        """Execute *call* and classify its outcome.

        Returns:
            AIResult with status Success, Filtered, Invalid or Error. An Error
            result carries an ExternalServiceError whose ``original`` is the
            exception that was raised.

        Raises:
            InvalidCallError: if the port cannot turn the call into a request.
        """
        key = call.cache_key() if self._use_cache else None
        if key is not None and key in self._cache:
            logger.debug("Cache hit for %s call", call.function.value)
            return replace(self._cache[key])

        try:
            raw = await self._cortex.execute(call)
        except InvalidCallError:
            raise
        except ExternalServiceError as e:
            logger.error("%s call failed: %s", call.function.value, e)
            return AIResult.failed(call.function, error=e, model=call.model)
        except Exception as e:
            logger.exception("%s call failed with unexpected error", call.function.value)
            error = ExternalServiceError(f"{call.function.value} call failed: {e!r}", original=e)
            return AIResult.failed(call.function, error=error, model=call.model)

        result = classify_response(call, raw, sentiment_contract=self._contract)
        if result.status == CallStatus.FILTERED:
            logger.warning(
                "%s result filtered%s",
                call.function.value,
                " (null result, filter or failure indistinguishable)" if result.ambiguous else "",
            )
        elif result.status == CallStatus.INVALID:
            logger.warning("%s result has unexpected shape: %s", call.function.value, result.error)

        if key is not None and not result.ambiguous:
            self._cache[key] = result
        return replace(result)

    def clear_cache(self) -> None:
        self._cache.clear()

    @property
    def cache_size(self) -> int:
        return len(self._cache)
