"""DraftReplyUseCase — guarded reply generation with a send/review decision."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from aisql.application.use_cases.invoke_function import InvokeAIFunctionUseCase
from aisql.domain.entities.record import Record
from aisql.domain.errors import InvalidCallError
from aisql.domain.policies.decisions import (
    decide_response_action,
    overall_sentiment,
    response_with_fallback,
    status_label,
)
from aisql.domain.policies.prompt_template import render_prompt
from aisql.domain.value_objects.enums import AIFunction, ResponseAction, SentimentLabel

logger = logging.getLogger(__name__)

DEFAULT_REPLY_TEMPLATE = (
    "You are a customer support agent. Write a short, helpful and polite reply "
    "to the following customer email. Do not promise refunds or make commitments.\n\n"
    "Customer email: {0}"
)


@dataclass
class DraftReply:
    record_key: str
    response: str
    response_status: str
    guard_status: str
    sentiment: SentimentLabel
    action: ResponseAction


class DraftReplyUseCase:
    """Generate a reply with Cortex Guard on, then decide whether it can be sent.

    The completion and the sentiment are each requested once; the reply text,
    its status labels and the action are all derived from those two results.
    """

    def __init__(self, invoker: InvokeAIFunctionUseCase, template: str = DEFAULT_REPLY_TEMPLATE):
        self._invoker = invoker
        self._template = template

    async def execute(self, record: Record, model: str, temperature: float = 0.3) -> DraftReply:
        if not record.content:
            raise InvalidCallError(f"Record {record.key} has no text to reply to")

        prompt = render_prompt(self._template, record.content)
        response = await self._invoker.invoke(
            AIFunction.COMPLETE,
            prompt,
            model=model,
            options={"temperature": temperature, "guard_enable": True},
        )
        sentiment = await self._invoker.invoke(AIFunction.SENTIMENT, record.content)

        action = decide_response_action(response, sentiment)
        logger.info("Record %s: reply %s, action %s", record.key, response.status.value, action.value)
        return DraftReply(
            record_key=record.key,
            response=response_with_fallback(response),
            response_status=status_label(response, "response"),
            guard_status=status_label(response, "guard"),
            sentiment=overall_sentiment(sentiment),
            action=action,
        )
