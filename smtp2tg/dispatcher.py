"""Deliver one composed message to every resolved chat."""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Iterable

from .attachments import Attachment
from .errors import classify_error

logger = logging.getLogger("smtp2tg.dispatcher")


@dataclass
class DeliveryResult:
    """Per-chat outcome of one dispatch."""

    delivered: set[int] = field(default_factory=set)
    failed: dict[int, BaseException] = field(default_factory=dict)

    @property
    def all_failed(self) -> bool:
        return bool(self.failed) and not self.delivered


async def send_to_chat(transport, chat_id: int, text: str, attachments: list[Attachment]) -> None:
    """Text only, a single captioned document, or one captioned document batch."""
    if not attachments:
        await transport.send_text(chat_id, text)
    elif len(attachments) == 1:
        await transport.send_document(chat_id, attachments[0], text)
    else:
        await transport.send_document_batch(chat_id, attachments, text)


async def dispatch(
    transport,
    chats: Iterable[int],
    text: str,
    attachments: list[Attachment],
    reporter,
) -> DeliveryResult:
    """Send to all chats concurrently; one chat failing never stops the others.

    Failures are reported to the default chat once, after every send settled.
    """
    chats = list(chats)
    outcomes = await asyncio.gather(
        *(send_to_chat(transport, chat, text, attachments) for chat in chats),
        return_exceptions=True,
    )

    result = DeliveryResult()
    for chat, outcome in zip(chats, outcomes):
        if isinstance(outcome, BaseException):
            logger.error(f"Delivery to {chat} failed: {type(outcome).__name__}: {outcome}")
            result.failed[chat] = outcome
        else:
            result.delivered.add(chat)

    if result.failed:
        lines = [f"Delivery failed for {len(result.failed)} of {len(chats)} chat(s):"]
        lines.extend(f"{chat}: {classify_error(e)}" for chat, e in result.failed.items())
        await reporter.report("\n".join(lines))
    logger.info(f"Delivered to {len(result.delivered)}/{len(chats)} chat(s)")
    return result
