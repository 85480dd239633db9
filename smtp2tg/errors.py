"""Error taxonomy for the mail → Telegram pipeline.

Every stage maps its failures into one of these kinds:

  MessageParseError  raw mail could not be parsed (temporary failure)
  ValidationError    text carries a preformatted-block terminator (body dropped)
  DeliveryError      one or more per-chat sends failed
  ConfigError        configuration could not be loaded (startup only)

Unresolved recipients are not errors: they are logged and routed to the
default chat.
"""

import asyncio

from telegram.error import (
    BadRequest,
    ChatMigrated,
    Forbidden,
    InvalidToken,
    NetworkError,
    RetryAfter,
    TelegramError,
    TimedOut,
)


class BridgeError(Exception):
    """Base class for all gateway errors."""


class ConfigError(BridgeError):
    """Configuration file missing, unsafe or invalid."""


class MessageParseError(BridgeError):
    """Raw message bytes could not be turned into a message structure."""


class ValidationError(BridgeError):
    """Text would terminate the preformatted block it is embedded in."""


class DeliveryError(BridgeError):
    """Delivery to one or more chats failed.

    ``failures`` maps chat id → the exception raised for that chat.
    """

    def __init__(self, failures: dict[int, BaseException]):
        self.failures = failures
        chats = ", ".join(str(chat) for chat in sorted(failures))
        super().__init__(f"Delivery failed for chat(s): {chats}")


def classify_error(e: BaseException) -> str:
    """Classify a send failure into a short notice for the default chat."""
    if isinstance(e, RetryAfter):
        return f"Flood control: retry after {e.retry_after}s."
    if isinstance(e, ChatMigrated):
        return f"Chat migrated to supergroup {e.new_chat_id}, update recipients."
    if isinstance(e, Forbidden):
        return "Bot is not allowed to post in this chat (blocked or removed)."
    if isinstance(e, InvalidToken):
        return "Telegram rejected the bot token."
    if isinstance(e, BadRequest):
        return f"Telegram rejected the request: {e.message}"
    if isinstance(e, TimedOut):
        return "Request to Telegram timed out."
    if isinstance(e, NetworkError):
        return f"Network error talking to Telegram: {e.message}"
    if isinstance(e, TelegramError):
        return f"Telegram error: {e.message}"
    if isinstance(e, asyncio.TimeoutError):
        return "Request timed out."

    # Fallback: include type name for debugging
    return f"Unexpected error ({type(e).__name__}): {e}"
