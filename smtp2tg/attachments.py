"""Collect the parts that travel as files."""

import email.errors
import email.header
import logging
from dataclasses import dataclass

from .message import MessagePart, ParsedMessage

logger = logging.getLogger("smtp2tg.attachments")

DEFAULT_FILENAME = "Attachment.txt"


@dataclass(frozen=True)
class Attachment:
    """File payload and the name it is shown under."""

    data: bytes
    filename: str = DEFAULT_FILENAME


def _decode_name(name: str) -> str:
    """Decode RFC 2047 encoded words some mailers put inside ``name``."""
    try:
        return str(email.header.make_header(email.header.decode_header(name)))
    except (email.errors.HeaderParseError, LookupError, UnicodeDecodeError) as e:
        logger.debug(f"Keeping undecodable attachment name {name!r}: {e}")
        return name


async def declared_filename(part: MessagePart, reporter) -> str:
    """Filename from the ``name`` parameter of Content-Type, or the placeholder.

    Header defects do not matter as long as the parameters were parsed. A
    Content-Type that could not be parsed at all is reported and treated
    as undeclared.
    """
    filename = None
    for name, value in part.headers:
        if name.lower() != "content-type":
            continue
        params = getattr(value, "params", None)
        if params is None:
            await reporter.report("Attachment has bad ContentType header.")
            continue
        if params.get("name"):
            filename = _decode_name(str(params["name"]))
    return filename or DEFAULT_FILENAME


async def collect_attachments(
    message: ParsedMessage,
    first_text_part: int,
    reporter,
) -> list[Attachment]:
    """Remaining text bodies (from ``first_text_part``) then all attachments, in order."""
    parts = [message.text_part(i) for i in range(first_text_part, message.text_body_count())]
    parts.extend(message.attachment(i) for i in range(message.attachment_count()))

    files = []
    for part in parts:
        files.append(Attachment(data=part.content, filename=await declared_filename(part, reporter)))
    if files:
        logger.debug(f"Collected {len(files)} attachment(s): {[f.filename for f in files]}")
    return files
