"""aiosmtpd handler feeding received mail into the bridge.

SMTP replies:
    250 OK                                     accepted (or partially delivered)
    451 4.3.0 Temporary failure, retry later   parse failure / nothing delivered
    550 5.1.1 Mailbox unavailable              unknown recipient under "deny"
"""

import asyncio
import logging

from aiosmtpd.smtp import SMTP, Envelope, Session

from . import __version__
from .bridge import Disposition, MailBridge

logger = logging.getLogger("smtp2tg.smtp")

REPLY_OK = "250 OK"
REPLY_TEMPFAIL = "451 4.3.0 Temporary failure, retry later"
REPLY_NO_MAILBOX = "550 5.1.1 Mailbox unavailable"


class BridgeHandler:
    """aiosmtpd handler: RCPT policy check and DATA relay."""

    def __init__(self, bridge: MailBridge):
        self.bridge = bridge

    async def handle_RCPT(
        self,
        server: SMTP,
        session: Session,
        envelope: Envelope,
        address: str,
        rcpt_options: list[str],
    ) -> str:
        if not self.bridge.settings.relay and not self.bridge.resolver.is_known(address):
            logger.info(f"Refusing unknown recipient {address} (unknown = \"deny\")")
            return REPLY_NO_MAILBOX
        envelope.rcpt_tos.append(address)
        return REPLY_OK

    async def handle_DATA(
        self,
        server: SMTP,
        session: Session,
        envelope: Envelope,
    ) -> str:
        raw = envelope.original_content or envelope.content or b""
        if isinstance(raw, str):
            raw = raw.encode("utf-8", errors="surrogateescape")
        disposition = await self.bridge.handle_message(
            envelope.mail_from or "", list(envelope.rcpt_tos), raw
        )
        if disposition is Disposition.ACCEPTED:
            return REPLY_OK
        return REPLY_TEMPFAIL


def build_smtp(handler: BridgeHandler, hostname: str) -> SMTP:
    """One SMTP protocol instance per connection; AUTH is never offered."""
    return SMTP(
        handler,
        hostname=hostname,
        ident=f"SMTP2TG {__version__}",
        enable_SMTPUTF8=True,
        auth_required=False,
        auth_require_tls=False,
        authenticator=None,
    )


async def start_server(bridge: MailBridge) -> asyncio.AbstractServer:
    """Listen on ``listen_on`` inside the running event loop."""
    host, port = bridge.settings.listen_address
    handler = BridgeHandler(bridge)
    loop = asyncio.get_running_loop()
    server = await loop.create_server(
        lambda: build_smtp(handler, bridge.settings.hostname),
        host=host,
        port=port,
    )
    logger.info(f"Listening for SMTP on {host}:{port}")
    return server
