"""Telegram transport: plain text, single documents and document groups."""

import logging

from telegram import Bot, InputMediaDocument, Message

from .attachments import Attachment
from .config import BridgeSettings

logger = logging.getLogger("smtp2tg.telegram")

# Bot API accepts 2-10 items per sendMediaGroup
MEDIA_GROUP_MAX = 10


def build_bot(settings: BridgeSettings) -> Bot:
    """Create a Bot talking to the configured Bot API server."""
    gateway = settings.api_gateway.rstrip("/")
    return Bot(
        token=settings.api_key,
        base_url=f"{gateway}/bot",
        base_file_url=f"{gateway}/file/bot",
    )


class TelegramTransport:
    """Thin wrapper over ``telegram.Bot``; every message uses HTML parse mode."""

    def __init__(self, bot: Bot):
        self.bot = bot

    async def send_text(self, chat_id: int, text: str) -> int:
        """Send a text message, returning its message id."""
        sent = await self.bot.send_message(chat_id=chat_id, text=text, parse_mode="HTML")
        return sent.message_id

    async def send_document(self, chat_id: int, attachment: Attachment, caption: str = "") -> int:
        """Send one file with an optional caption."""
        sent = await self.bot.send_document(
            chat_id=chat_id,
            document=attachment.data,
            filename=attachment.filename,
            caption=caption or None,
            parse_mode="HTML" if caption else None,
        )
        return sent.message_id

    async def send_document_batch(
        self,
        chat_id: int,
        attachments: list[Attachment],
        caption: str = "",
    ) -> list[int]:
        """Send files as document group(s), caption on the last file only.

        Groups hold at most ten files; a single file left over after full
        groups goes out as a plain document.
        """
        message_ids: list[int] = []
        last = len(attachments) - 1
        for start in range(0, len(attachments), MEDIA_GROUP_MAX):
            chunk = attachments[start:start + MEDIA_GROUP_MAX]
            if len(chunk) == 1:
                item_caption = caption if start == last else ""
                message_ids.append(await self.send_document(chat_id, chunk[0], item_caption))
                continue
            media = []
            for offset, attachment in enumerate(chunk):
                with_caption = bool(caption) and start + offset == last
                media.append(InputMediaDocument(
                    media=attachment.data,
                    filename=attachment.filename,
                    caption=caption if with_caption else None,
                    parse_mode="HTML" if with_caption else None,
                ))
            sent: tuple[Message, ...] = await self.bot.send_media_group(chat_id=chat_id, media=media)
            message_ids.extend(m.message_id for m in sent)
        logger.debug(f"Sent {len(attachments)} file(s) to {chat_id} in {len(message_ids)} message(s)")
        return message_ids
