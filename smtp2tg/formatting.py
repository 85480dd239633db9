"""Telegram HTML helpers.

Telegram supports a limited HTML subset:
  <b>bold</b>, <i>italic</i>, <code>inline code</code>, <pre>code block</pre>

Mail content is always escaped before it is placed inside one of these tags.
"""

import html as _html
import re

from .errors import ValidationError

# Closing tag of a preformatted block, tolerant of case and inner whitespace
PRE_CLOSE_RE = re.compile(r"<\s*/\s*pre\s*>", re.IGNORECASE)


def escape(text: str) -> str:
    """Escape HTML special characters in plain text segments."""
    return _html.escape(text, quote=False)


def validate(text: str) -> str:
    """Return text unchanged unless it contains a ``</pre>`` terminator.

    Raw mail content is embedded in a single <pre> block; a terminator in it
    would close the block early and let the remainder render as markup.

    Raises:
        ValidationError: text contains the closing marker.
    """
    match = PRE_CLOSE_RE.search(text)
    if match:
        raise ValidationError(
            f"text contains preformatted block terminator at offset {match.start()}"
        )
    return text


def field(label: str, value: str) -> str:
    """Render one header line: bold label, value as inline code."""
    return f"<b>{label}:</b> <code>{escape(value)}</code>"


def pre(text: str) -> str:
    """Wrap validated text in a preformatted block, lines kept verbatim."""
    return f"<pre>{escape(validate(text))}</pre>"
