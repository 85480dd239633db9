"""Diagnostic reporting to the default chat.

Diagnostics are best-effort: if the default chat cannot be reached the notice
goes to the local log and the error is dropped, so a broken Telegram link can
never change the SMTP reply.
"""

import logging

from .errors import ValidationError
from .formatting import escape, pre

logger = logging.getLogger("smtp2tg.diagnostics")

WITHHELD_NOTICE = "Diagnostic withheld: text contained a preformatted block terminator."


class DiagnosticReporter:
    """Sends notices to the default chat, wrapped in a <pre> block."""

    def __init__(self, transport, default_chat: int):
        self.transport = transport
        self.default_chat = default_chat

    async def report(self, message: str) -> bool:
        """Send a diagnostic. Returns True if it reached the default chat."""
        logger.info(f"Diagnostic: {message}")
        try:
            text = pre(message)
        except ValidationError:
            logger.error(f"Diagnostic text rejected by validator: {message!r}")
            text = f"<i>{escape(WITHHELD_NOTICE)}</i>"
        try:
            await self.transport.send_text(self.default_chat, text)
            return True
        except Exception as e:
            logger.error(f"Failed to deliver diagnostic to default chat: {type(e).__name__}: {e}")
            logger.error(f"Undelivered diagnostic: {message}")
            return False
