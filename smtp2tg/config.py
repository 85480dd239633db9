"""SMTP2TG configuration management."""

import logging
import os
import re
import socket
import stat
import tomllib
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, ValidationError as PydanticValidationError, field_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from .errors import ConfigError

logger = logging.getLogger("smtp2tg.config")

DEFAULT_CONFIG_FILE = "smtp2tg.toml"

# Telegram hard caps for a text message and for a document caption
TELEGRAM_MESSAGE_LIMIT = 4096
TELEGRAM_CAPTION_LIMIT = 1024

HEADER_FIELDS = frozenset({"subject", "from", "date"})

RE_DOMAIN = re.compile(
    r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?(\.[a-z0-9]([-a-z0-9]*[a-z0-9])?)*$"
)


def _default_domains() -> frozenset[str]:
    return frozenset({"localhost", socket.gethostname().lower()})


class BridgeSettings(BaseSettings):
    """Gateway settings, read from a TOML file and SMTP2TG_* environment variables.

    Immutable once built: resolver, composer and reporter share one instance.
    """

    # Telegram
    api_key: str = Field(description="Telegram bot token")
    api_gateway: str = Field(
        default="https://api.telegram.org",
        description="Bot API server (for self-hosted gateways)",
    )

    # Routing
    default: int = Field(description="Chat that receives unmatched mail and diagnostics")
    recipients: dict[str, int] = Field(
        default_factory=dict,
        description="Local part (or full address) → chat id",
    )
    domains: frozenset[str] = Field(
        default_factory=_default_domains,
        description="Domains treated as locally addressed",
    )
    unknown: Literal["relay", "deny"] = Field(
        default="relay",
        description="Accept (relay) or refuse (deny) unknown recipients at RCPT",
    )

    # Rendering
    fields: frozenset[str] = Field(
        default=frozenset({"date", "from", "subject"}),
        description="Header fields shown above the body",
    )
    message_limit: int = Field(default=TELEGRAM_MESSAGE_LIMIT, gt=0, le=TELEGRAM_MESSAGE_LIMIT)
    caption_limit: int = Field(
        default=TELEGRAM_CAPTION_LIMIT,
        gt=0,
        le=TELEGRAM_CAPTION_LIMIT,
        description="Limit used instead of message_limit when the text goes out as a caption",
    )

    # Server
    hostname: str = Field(default="smtp.2.tg", description="Name announced in SMTP greeting")
    listen_on: str = Field(default="0.0.0.0:1025", description="host:port to listen on")
    log_file: Optional[str] = Field(default=None, description="Optional log file path")

    model_config = SettingsConfigDict(env_prefix="SMTP2TG_", frozen=True, extra="ignore")

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # File values arrive as init kwargs; environment overrides them.
        return env_settings, init_settings

    @field_validator("domains", mode="before")
    @classmethod
    def _check_domains(cls, value):
        if isinstance(value, str):
            value = [value]
        domains = set()
        for domain in value:
            domain = str(domain).strip().lower()
            if not RE_DOMAIN.match(domain):
                raise ValueError(f"invalid domain in \"domains\": {domain!r}")
            domains.add(domain)
        return frozenset(domains)

    @field_validator("fields", mode="before")
    @classmethod
    def _check_fields(cls, value):
        if isinstance(value, str):
            value = [value]
        unknown = set(value) - HEADER_FIELDS
        if unknown:
            raise ValueError(
                f"unknown field(s) {sorted(unknown)}, expected any of {sorted(HEADER_FIELDS)}"
            )
        return frozenset(value)

    @field_validator("listen_on")
    @classmethod
    def _check_listen_on(cls, value: str) -> str:
        host, sep, port = value.rpartition(":")
        if not sep or not host or not port.isdigit() or not 0 < int(port) < 65536:
            raise ValueError(f"\"listen_on\" should look like host:port, got {value!r}")
        return value

    @property
    def relay(self) -> bool:
        """True when unknown recipients are accepted at RCPT."""
        return self.unknown == "relay"

    @property
    def listen_address(self) -> tuple[str, int]:
        host, _, port = self.listen_on.rpartition(":")
        return host.strip("[]"), int(port)


def _check_permissions(path: Path) -> None:
    """Refuse config files other users can read or write (they hold the bot token)."""
    mode = path.stat().st_mode
    if stat.S_IMODE(mode) & ~0o600:
        raise ConfigError(
            f"other users can read or write config file {str(path)!r}\n"
            f"File permissions: {stat.S_IMODE(mode):o}"
        )


def load_settings(path: Optional[str] = None) -> BridgeSettings:
    """Load settings from a TOML file plus environment.

    Args:
        path: Config file location. Falls back to $SMTP2TG_CONFIG, then
            ``smtp2tg.toml`` in the working directory.

    Raises:
        ConfigError: File missing, unsafe permissions, bad TOML or invalid values.
    """
    config_file = Path(path or os.environ.get("SMTP2TG_CONFIG") or DEFAULT_CONFIG_FILE)
    if not config_file.is_file():
        raise ConfigError(f"can't read configuration from {str(config_file)!r}")
    _check_permissions(config_file)

    try:
        with open(config_file, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"[{config_file}] there was an error reading config: {e}") from e

    try:
        settings = BridgeSettings(**data)
    except PydanticValidationError as e:
        raise ConfigError(
            f"[{config_file}] invalid configuration\n{e}\n"
            "\tplease consult \"smtp2tg.toml.example\" for details"
        ) from e

    if not settings.recipients:
        logger.warning("No recipients configured, all mail goes to the default chat.")
    logger.debug(f"Loaded configuration from {config_file}")
    return settings
