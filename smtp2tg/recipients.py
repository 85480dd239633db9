"""Map envelope recipients to Telegram chats."""

import logging
from types import MappingProxyType
from typing import Iterable, Optional

from .address import local_part
from .config import BridgeSettings

logger = logging.getLogger("smtp2tg.recipients")


class RecipientResolver:
    """Resolve addresses to chat ids, falling back to the default chat.

    The mapping and domain set are copied once and never mutated, so one
    resolver can be shared by every SMTP session.
    """

    def __init__(self, settings: BridgeSettings, reporter=None):
        self.default: int = settings.default
        self.domains: frozenset[str] = settings.domains
        self._recipients = MappingProxyType(
            {key.lower(): chat for key, chat in settings.recipients.items()}
        )
        self._reporter = reporter

    def lookup(self, address: str) -> Optional[int]:
        """Return the configured chat for an address, or None when unmapped.

        Locally addressed mail is looked up by local part; anything else is
        looked up by the raw address, so operators can map full foreign
        addresses explicitly.
        """
        key = local_part(address, self.domains)
        if key is None:
            key = address.strip().strip("<>").lower()
        return self._recipients.get(key)

    def resolve(self, address: str) -> int:
        """Return the chat for an address. Never fails."""
        chat = self.lookup(address)
        if chat is None:
            logger.info(f"Recipient \"{address}\" not found in configuration, using default chat")
            return self.default
        return chat

    def is_known(self, address: str) -> bool:
        """True if the address maps to a configured entry (used by the deny policy)."""
        return self.lookup(address) is not None

    async def resolve_all(self, addresses: Iterable[str]) -> set[int]:
        """Resolve every envelope recipient into a set of distinct chats.

        An empty recipient list yields the default chat and a diagnostic.
        """
        addresses = list(addresses)
        if not addresses:
            if self._reporter is not None:
                await self._reporter.report("No recipient or envelope address.")
            return {self.default}
        return {self.resolve(address) for address in addresses}
