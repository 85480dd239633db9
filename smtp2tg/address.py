"""Recognise locally addressed recipients."""

from typing import Iterable, Optional


def split_address(address: str) -> tuple[str, str]:
    """Split ``local@domain`` at the last ``@``; domain is '' when absent."""
    address = address.strip().strip("<>")
    local, sep, domain = address.rpartition("@")
    if not sep:
        return address, ""
    return local, domain


def local_part(address: str, domains: Iterable[str]) -> Optional[str]:
    """Return the lower-cased local part if the address belongs to a configured domain.

    The domain after ``@`` must equal one of ``domains`` exactly (case-insensitive);
    subdomains and suffixes do not match.

    Examples:
        local_part("Alice@Example.com", {"example.com"}) → "alice"
        local_part("alice@mail.example.com", {"example.com"}) → None
        local_part("alice", {"example.com"}) → None
    """
    local, domain = split_address(address)
    if not local or not domain:
        return None
    if domain.lower() not in domains:
        return None
    return local.lower()
