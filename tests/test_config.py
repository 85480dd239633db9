"""Tests for configuration loading."""

import os

import pytest

from smtp2tg.config import BridgeSettings, load_settings
from smtp2tg.errors import ConfigError

GOOD_CONFIG = """
api_key = "123:ABC"
default = 42
domains = ["Example.COM", "localhost"]
fields = ["subject", "from"]
unknown = "deny"
listen_on = "127.0.0.1:2525"

[recipients]
alice = 111
"""


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for key in list(os.environ):
        if key.upper().startswith("SMTP2TG_"):
            monkeypatch.delenv(key)


def _write(tmp_path, text, mode=0o600):
    path = tmp_path / "smtp2tg.toml"
    path.write_text(text)
    os.chmod(path, mode)
    return str(path)


def test_load(tmp_path):
    settings = load_settings(_write(tmp_path, GOOD_CONFIG))
    assert settings.api_key == "123:ABC"
    assert settings.default == 42
    assert settings.recipients == {"alice": 111}
    assert settings.domains == frozenset({"example.com", "localhost"})
    assert settings.fields == frozenset({"subject", "from"})
    assert settings.relay is False
    assert settings.listen_address == ("127.0.0.1", 2525)
    assert settings.message_limit == 4096
    assert settings.caption_limit == 1024


def test_defaults(tmp_path):
    settings = load_settings(_write(tmp_path, 'api_key = "k"\ndefault = 1\n'))
    assert settings.fields == frozenset({"date", "from", "subject"})
    assert "localhost" in settings.domains
    assert settings.unknown == "relay"
    assert settings.hostname == "smtp.2.tg"
    assert settings.listen_on == "0.0.0.0:1025"


def test_env_overrides_file(tmp_path, monkeypatch):
    monkeypatch.setenv("SMTP2TG_DEFAULT", "7")
    settings = load_settings(_write(tmp_path, GOOD_CONFIG))
    assert settings.default == 7


def test_config_path_from_env(tmp_path, monkeypatch):
    monkeypatch.setenv("SMTP2TG_CONFIG", _write(tmp_path, GOOD_CONFIG))
    assert load_settings().default == 42


def test_missing_file(tmp_path):
    with pytest.raises(ConfigError, match="can't read configuration"):
        load_settings(str(tmp_path / "absent.toml"))


def test_world_readable_refused(tmp_path):
    with pytest.raises(ConfigError, match="other users can read or write"):
        load_settings(_write(tmp_path, GOOD_CONFIG, mode=0o644))


def test_bad_toml(tmp_path):
    with pytest.raises(ConfigError):
        load_settings(_write(tmp_path, "api_key = \n"))


def test_missing_default(tmp_path):
    with pytest.raises(ConfigError):
        load_settings(_write(tmp_path, 'api_key = "k"\n'))


@pytest.mark.parametrize("overrides", [
    {"domains": ["bad domain"]},
    {"domains": ["-leading.dash"]},
    {"fields": ["subject", "body"]},
    {"unknown": "drop"},
    {"listen_on": "1025"},
    {"listen_on": "host:99999"},
    {"message_limit": 5000},
    {"caption_limit": 2000},
])
def test_invalid_values(overrides, make_settings):
    with pytest.raises(ValueError):
        make_settings(**overrides)


def test_settings_are_frozen(make_settings):
    settings = make_settings()
    with pytest.raises(ValueError):
        settings.default = 5


def test_ipv6_listen_address(make_settings):
    assert make_settings(listen_on="[::1]:25").listen_address == ("::1", 25)


def test_direct_construction():
    settings = BridgeSettings(api_key="k", default=1, domains="Mail.Example.org")
    assert settings.domains == frozenset({"mail.example.org"})
