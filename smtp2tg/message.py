"""Parsed view of an inbound mail message.

Wraps the stdlib ``email`` package (``policy.default``) and sorts leaf parts
into three ordered lists:

- text bodies: inline ``text/plain`` parts
- HTML bodies: inline ``text/html`` parts (counted, never rendered)
- attachments: everything else, including forwarded ``message/rfc822`` parts
"""

import email
import email.policy
import logging
from dataclasses import dataclass, field
from email.message import EmailMessage
from typing import Any, Optional

from .errors import MessageParseError

logger = logging.getLogger("smtp2tg.message")


@dataclass(frozen=True)
class MessagePart:
    """One leaf part: raw (transfer-decoded) bytes and its header list."""

    content: bytes
    headers: list[tuple[str, Any]] = field(default_factory=list)

    def header(self, name: str) -> Optional[Any]:
        """First header with the given name (case-insensitive), or None."""
        name = name.lower()
        for key, value in self.headers:
            if key.lower() == name:
                return value
        return None


def _leaf(part: EmailMessage) -> MessagePart:
    if part.get_content_type() == "message/rfc822":
        inner = part.get_payload(0)
        content = inner.as_bytes() if inner is not None else b""
    else:
        content = part.get_payload(decode=True) or b""
    return MessagePart(content=content, headers=list(part.items()))


class ParsedMessage:
    """Read-only accessors over a parsed message."""

    def __init__(self, msg: EmailMessage):
        self._msg = msg
        self._text: list[EmailMessage] = []
        self._html: list[EmailMessage] = []
        self._attachments: list[EmailMessage] = []
        self._classify(msg)

    def _classify(self, part: EmailMessage) -> None:
        content_type = part.get_content_type()
        if content_type == "message/rfc822":
            self._attachments.append(part)
            return
        if part.is_multipart():
            for sub in part.iter_parts():
                self._classify(sub)
            return
        if part.get_content_disposition() == "attachment":
            self._attachments.append(part)
        elif content_type == "text/plain":
            self._text.append(part)
        elif content_type == "text/html":
            self._html.append(part)
        else:
            self._attachments.append(part)

    # ── headers ──

    def header(self, name: str) -> Optional[str]:
        value = self._msg.get(name)
        return str(value) if value is not None else None

    def subject(self) -> Optional[str]:
        return self.header("Subject") or None

    def thread_name(self) -> Optional[str]:
        """Conversation topic (``Thread-Topic``), used when there is no subject."""
        return self.header("Thread-Topic") or None

    def date(self) -> Optional[str]:
        return self.header("Date") or None

    def from_addresses(self) -> list[str]:
        value = self._msg.get("From")
        if value is None:
            return []
        addresses = getattr(value, "addresses", ())
        return [a.addr_spec for a in addresses if a.addr_spec] or [str(value)]

    # ── counts ──

    def html_body_count(self) -> int:
        return len(self._html)

    def text_body_count(self) -> int:
        return len(self._text)

    def attachment_count(self) -> int:
        return len(self._attachments)

    # ── indexed parts ──

    def body_text(self, index: int) -> str:
        """Decoded text of the index-th text body."""
        part = self._text[index]
        try:
            return part.get_content()
        except (LookupError, UnicodeDecodeError) as e:
            # Unknown or lying charset
            logger.debug(f"Falling back to lenient decode for text part {index}: {e}")
            payload = part.get_payload(decode=True) or b""
            return payload.decode("utf-8", errors="replace")

    def text_part(self, index: int) -> MessagePart:
        return _leaf(self._text[index])

    def attachment(self, index: int) -> MessagePart:
        return _leaf(self._attachments[index])


def parse_message(raw: bytes) -> ParsedMessage:
    """Parse raw message bytes.

    Raises:
        MessageParseError: empty input, no headers, or the parser gave up.
    """
    if not raw or not raw.strip():
        raise MessageParseError("Failed to parse mail: empty message")
    try:
        msg = email.message_from_bytes(raw, policy=email.policy.default)
        parsed = ParsedMessage(msg)
    except Exception as e:
        raise MessageParseError(f"Failed to parse mail: {e}") from e
    if not msg.keys():
        raise MessageParseError("Failed to parse mail: no headers found")
    return parsed
