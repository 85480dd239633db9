"""Compose the Telegram text for one mail message.

Layout (each header line optional, controlled by ``fields``):

    <b>Subject:</b> <code>…</code>     (or Thread: when there is no subject)
    <b>From:</b> <code>…</code>
    <b>Date:</b> <code>…</code>
    <pre>first text body, verbatim</pre>

The first text body is used only when it fits below the message limit
together with the headers; otherwise the message carries headers only and
the body travels as an attachment. When files go out anyway the text becomes
a document caption, so the shorter caption limit applies.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from .config import BridgeSettings
from .errors import ValidationError
from .formatting import escape, field, pre
from .message import ParsedMessage

logger = logging.getLogger("smtp2tg.composer")

EMPTY_PLACEHOLDER = "(empty message)"


@dataclass(frozen=True)
class Composition:
    """Rendered text and the index of the first text body not yet used."""

    text: str
    next_text_part: int


def build_headers(message: ParsedMessage, mail_from: str, fields: frozenset[str]) -> list[str]:
    headers: list[str] = []
    if "subject" in fields:
        if subject := message.subject():
            headers.append(field("Subject", subject))
        elif thread := message.thread_name():
            headers.append(field("Thread", thread))
    if "from" in fields:
        sender = mail_from or ", ".join(message.from_addresses())
        if sender:
            headers.append(field("From", sender))
    if "date" in fields:
        if date := message.date():
            headers.append(field("Date", date))
    return headers


def body_fits(body_length: int, header_size: int, limit: int) -> bool:
    """Body is shown only when strictly shorter than the room left by the headers."""
    return body_length < limit - header_size


def text_limit(message: ParsedMessage, settings: BridgeSettings) -> int:
    """Caption limit when files are certain to be sent, else the message limit."""
    if message.attachment_count() > 0 or message.text_body_count() > 1:
        return min(settings.message_limit, settings.caption_limit)
    return settings.message_limit


def normalize_newlines(body: str) -> str:
    """Turn CRLF and bare CR into LF and drop one final newline; nothing else changes."""
    return body.replace("\r\n", "\n").replace("\r", "\n").removesuffix("\n")


async def compose(
    message: ParsedMessage,
    mail_from: str,
    settings: BridgeSettings,
    reporter,
) -> Composition:
    """Render headers plus (when it fits and validates) the first text body."""
    headers = build_headers(message, mail_from, settings.fields)
    header_size = len("\n".join(headers)) + 1

    html_parts = message.html_body_count()
    text_parts = message.text_body_count()
    if html_parts != text_parts:
        await reporter.report(f"Hm, we have {html_parts} HTML parts and {text_parts} text parts.")

    body_block: Optional[str] = None
    next_text_part = 0
    if text_parts > 0:
        body = message.body_text(0)
        limit = text_limit(message, settings)
        if body_fits(len(body), header_size, limit):
            try:
                body_block = pre(normalize_newlines(body))
                next_text_part = 1
            except ValidationError as e:
                logger.warning(f"Dropping message body: {e}")
                await reporter.report(f"Message body was not shown: {e}. Sending it as a file.")
        else:
            logger.debug(
                f"Body of {len(body)} chars does not fit next to "
                f"{header_size} chars of headers (limit {limit})"
            )

    lines = list(headers)
    if body_block is not None:
        lines.append(body_block)
    text = "\n".join(lines) or f"<i>{escape(EMPTY_PLACEHOLDER)}</i>"
    return Composition(text=text, next_text_part=next_text_part)
