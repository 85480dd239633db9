"""Per-message pipeline: resolve → compose → collect → dispatch.

Any stage may emit diagnostics to the default chat and carry on. Only a parse
failure, delivery failing for every chat, or an unexpected error turns into a
temporary failure for the SMTP client; nothing here rejects mail permanently.
"""

import enum
import logging

from .attachments import collect_attachments
from .composer import compose
from .config import BridgeSettings
from .dispatcher import dispatch
from .errors import DeliveryError, MessageParseError
from .message import parse_message
from .recipients import RecipientResolver
from .reporter import DiagnosticReporter

logger = logging.getLogger("smtp2tg.bridge")


class Disposition(enum.Enum):
    ACCEPTED = "accepted"
    TEMPFAIL = "temporarily-failed"


class MailBridge:
    """Turns one received mail into Telegram messages.

    Holds only immutable settings and the shared transport, so concurrent
    SMTP sessions can use a single instance.
    """

    def __init__(self, settings: BridgeSettings, transport):
        self.settings = settings
        self.transport = transport
        self.reporter = DiagnosticReporter(transport, settings.default)
        self.resolver = RecipientResolver(settings, reporter=self.reporter)

    async def relay_mail(self, mail_from: str, rcpt_tos: list[str], raw: bytes) -> None:
        """Deliver one message.

        Raises:
            MessageParseError: raw bytes could not be parsed.
            DeliveryError: no chat received the message.
        """
        message = parse_message(raw)
        chats = await self.resolver.resolve_all(rcpt_tos)
        composition = await compose(message, mail_from, self.settings, self.reporter)
        attachments = await collect_attachments(
            message, composition.next_text_part, self.reporter
        )
        result = await dispatch(
            self.transport, chats, composition.text, attachments, self.reporter
        )
        if result.all_failed:
            raise DeliveryError(result.failed)

    async def handle_message(self, mail_from: str, rcpt_tos: list[str], raw: bytes) -> Disposition:
        """Run the pipeline and map its outcome to an SMTP disposition."""
        logger.info(f"Relaying mail from={mail_from} to={rcpt_tos} size={len(raw)} bytes")
        try:
            await self.relay_mail(mail_from, rcpt_tos, raw)
        except DeliveryError as e:
            # Already reported per chat by the dispatcher
            logger.error(str(e))
            return Disposition.TEMPFAIL
        except MessageParseError as e:
            logger.error(str(e))
            await self.reporter.report(f"Sending emails failed:\n{e}")
            return Disposition.TEMPFAIL
        except Exception as e:
            logger.error(f"Unexpected error relaying mail: {type(e).__name__}: {e}", exc_info=True)
            await self.reporter.report(f"Sending emails failed:\n{type(e).__name__}: {e}")
            return Disposition.TEMPFAIL
        return Disposition.ACCEPTED
