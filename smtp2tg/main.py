"""SMTP2TG — Main entry point."""

import asyncio
import logging
import os
from typing import Optional

from .bridge import MailBridge
from .config import BridgeSettings, load_settings
from .smtp import start_server
from .telegram import TelegramTransport, build_bot

_log_format = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

logger = logging.getLogger("smtp2tg")


def setup_logging(log_file: Optional[str] = None, debug: bool = False) -> None:
    """Log to stderr, and to ``log_file`` when configured."""
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(os.path.expanduser(log_file), encoding="utf-8"))
    logging.basicConfig(level=logging.INFO, format=_log_format, handlers=handlers, force=True)
    if debug:
        logging.getLogger("smtp2tg").setLevel(logging.DEBUG)
    # httpx logs every Bot API request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


async def run(settings: BridgeSettings):
    """Main run loop."""
    server = None
    async with build_bot(settings) as bot:
        bridge = MailBridge(settings, TelegramTransport(bot))
        try:
            server = await start_server(bridge)
            logger.info("SMTP2TG is running. Press Ctrl+C to stop.")
            await server.serve_forever()
        except asyncio.CancelledError:
            pass
        finally:
            if server:
                server.close()
                await server.wait_closed()
            logger.info("SMTP2TG stopped.")


def main(config: Optional[str] = None, debug: bool = False):
    """Entry point."""
    settings = load_settings(config)
    setup_logging(settings.log_file, debug)
    try:
        asyncio.run(run(settings))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
