"""Pytest configuration and shared fixtures."""

from email.message import EmailMessage
from typing import Optional
from unittest.mock import AsyncMock

import pytest

from smtp2tg.config import BridgeSettings
from smtp2tg.message import MessagePart


def _build_settings(**overrides) -> BridgeSettings:
    values = {
        "api_key": "123:TEST",
        "default": 1000,
        "recipients": {"alice": 111, "ops": 222, "external@partner.org": 333},
        "domains": ["example.com"],
    }
    values.update(overrides)
    return BridgeSettings(**values)


@pytest.fixture
def settings() -> BridgeSettings:
    return _build_settings()


@pytest.fixture
def make_settings():
    """Build settings with per-test overrides."""
    return _build_settings


@pytest.fixture
def reporter():
    """Stand-in DiagnosticReporter recording every notice."""
    rep = AsyncMock()
    rep.report = AsyncMock(return_value=True)
    return rep


@pytest.fixture
def transport():
    """Stand-in TelegramTransport; every send succeeds."""
    t = AsyncMock()
    t.send_text = AsyncMock(return_value=1)
    t.send_document = AsyncMock(return_value=2)
    t.send_document_batch = AsyncMock(return_value=[3, 4])
    return t


def _build_mail(
    body: Optional[str] = "Hello there",
    subject: Optional[str] = "Greetings",
    html: Optional[str] = None,
    attachments: tuple = (),
    headers: Optional[dict] = None,
) -> bytes:
    """Build raw RFC 5322 bytes.

    ``attachments`` holds (filename, bytes) pairs; the name is declared in the
    Content-Type ``name`` parameter. A None filename declares nothing.
    """
    msg = EmailMessage()
    msg["From"] = "Sender <sender@remote.test>"
    msg["To"] = "alice@example.com"
    if subject is not None:
        msg["Subject"] = subject
    msg["Date"] = "Tue, 14 Oct 2025 10:00:00 +0000"
    for name, value in (headers or {}).items():
        msg[name] = value

    if body is not None:
        msg.set_content(body)
        if html is not None:
            msg.add_alternative(html, subtype="html")
    elif html is not None:
        msg.set_content(html, subtype="html")

    for filename, data in attachments:
        params = {"name": filename} if filename else None
        msg.add_attachment(
            data, maintype="application", subtype="octet-stream",
            filename=filename, params=params,
        )
    return msg.as_bytes()


class FakeMessage:
    """ParsedMessage look-alike for exact control over parts and lengths."""

    def __init__(
        self,
        subject=None,
        thread=None,
        date=None,
        from_addresses=(),
        texts=(),
        html_count=0,
        attachments=(),
    ):
        self._subject = subject
        self._thread = thread
        self._date = date
        self._from = list(from_addresses)
        self._texts = list(texts)
        self._html_count = html_count
        self._attachments = list(attachments)

    def subject(self):
        return self._subject

    def thread_name(self):
        return self._thread

    def date(self):
        return self._date

    def from_addresses(self):
        return self._from

    def html_body_count(self):
        return self._html_count

    def text_body_count(self):
        return len(self._texts)

    def attachment_count(self):
        return len(self._attachments)

    def body_text(self, index):
        return self._texts[index]

    def text_part(self, index):
        return MessagePart(content=self._texts[index].encode())

    def attachment(self, index):
        return self._attachments[index]


@pytest.fixture
def make_mail():
    """Build raw message bytes, see ``_build_mail``."""
    return _build_mail


@pytest.fixture
def fake_message():
    """Build ParsedMessage look-alikes."""
    return FakeMessage
