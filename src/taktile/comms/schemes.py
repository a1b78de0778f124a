# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""Transport scheme registry.

Static two-way mapping between the ``Scheme`` enumeration and the
lowercase tokens that appear in CoT URLs (``udp+wo://239.2.3.1:6969``).
"""

from __future__ import annotations

from enum import Enum

from taktile.errors import UnknownScheme


class Scheme(str, Enum):
    """Transport schemes understood by the locator resolver.

    The value of each member is its canonical token.
    """

    HTTPS = "https"
    TLS = "tls"
    TCP = "tcp"
    UDP = "udp"
    UDP_BROADCAST = "udp+broadcast"
    UDP_WRITE_ONLY = "udp+wo"
    LOG = "log"

    @property
    def is_udp(self) -> bool:
        return self in _UDP_SCHEMES

    def __str__(self) -> str:
        return self.value


_UDP_SCHEMES = frozenset({Scheme.UDP, Scheme.UDP_BROADCAST, Scheme.UDP_WRITE_ONLY})

_TOKEN_TO_SCHEME: dict[str, Scheme] = {s.value: s for s in Scheme}


def token_of(scheme: Scheme) -> str:
    """Canonical lowercase token for a scheme."""
    return scheme.value


def scheme_of(token: str) -> Scheme:
    """Look up a scheme by its exact token.

    Matching is case-sensitive: ``"UDP"`` is not ``"udp"``.

    Raises:
        UnknownScheme: token is not registered.
    """
    try:
        return _TOKEN_TO_SCHEME[token]
    except (KeyError, TypeError):
        raise UnknownScheme(token) from None


def all_tokens() -> list[str]:
    """Every registered token, in enumeration order."""
    return [s.value for s in Scheme]
