"""Tests for address matching and recipient resolution."""

import pytest

from smtp2tg.address import local_part, split_address
from smtp2tg.recipients import RecipientResolver


# ── Address matcher ─────────────────────────────────────────

class TestLocalPart:
    def test_configured_domain(self):
        assert local_part("alice@example.com", {"example.com"}) == "alice"

    def test_domain_is_case_insensitive(self):
        assert local_part("Alice@EXAMPLE.com", {"example.com"}) == "alice"

    def test_subdomain_does_not_match(self):
        assert local_part("alice@mail.example.com", {"example.com"}) is None

    def test_suffix_does_not_match(self):
        assert local_part("alice@badexample.com", {"example.com"}) is None

    def test_unconfigured_domain(self):
        assert local_part("alice@other.org", {"example.com"}) is None

    def test_no_domain(self):
        assert local_part("alice", {"example.com"}) is None

    def test_angle_brackets_stripped(self):
        assert local_part("<bob@example.com>", {"example.com"}) == "bob"

    def test_split_uses_last_at(self):
        assert split_address('"a@b"@example.com') == ('"a@b"', "example.com")


# ── Resolver ────────────────────────────────────────────────

class TestResolve:
    def test_mapped_local_part(self, settings):
        """alice@example.com with alice → 111 resolves to 111."""
        assert RecipientResolver(settings).resolve("alice@example.com") == 111

    def test_unmapped_local_part_falls_back(self, settings):
        """bob@example.com with no mapping resolves to the default chat."""
        assert RecipientResolver(settings).resolve("bob@example.com") == 1000

    def test_foreign_domain_falls_back(self, settings):
        assert RecipientResolver(settings).resolve("alice@elsewhere.net") == 1000

    def test_raw_address_key(self, settings):
        """Operators may map full foreign addresses."""
        assert RecipientResolver(settings).resolve("external@partner.org") == 333

    def test_mapping_keys_case_insensitive(self, make_settings):
        resolver = RecipientResolver(make_settings(recipients={"Alice": 5}))
        assert resolver.resolve("ALICE@example.com") == 5

    def test_every_mapping_key_resolves(self, settings):
        resolver = RecipientResolver(settings)
        for key, chat in settings.recipients.items():
            if "@" not in key:
                assert resolver.resolve(f"{key}@example.com") == chat

    def test_is_known(self, settings):
        resolver = RecipientResolver(settings)
        assert resolver.is_known("ops@example.com")
        assert not resolver.is_known("nobody@example.com")


class TestResolveAll:
    @pytest.mark.asyncio
    async def test_deduplicates(self, settings, reporter):
        resolver = RecipientResolver(settings, reporter=reporter)
        chats = await resolver.resolve_all([
            "alice@example.com", "ALICE@example.com", "bob@example.com", "carol@example.com",
        ])
        assert chats == {111, 1000}
        reporter.report.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_empty_list_goes_to_default(self, settings, reporter):
        resolver = RecipientResolver(settings, reporter=reporter)
        assert await resolver.resolve_all([]) == {1000}
        reporter.report.assert_awaited_once()
        assert "No recipient" in reporter.report.await_args.args[0]
