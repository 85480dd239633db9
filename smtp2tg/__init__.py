"""SMTP2TG — SMTP to Telegram gateway."""

__version__ = "0.5.0"
