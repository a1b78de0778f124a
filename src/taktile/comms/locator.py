# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""Locator resolution — ``scheme://host[:port]`` to a (scheme, host, port) triple.

Port defaulting looks at the scheme *token*, not the enum:

    udp+broadcast, udp+wo   -> 6969  (shared broadcast / discovery port)
    everything else         -> 8087  (CoT service port)

An explicit port always wins, except a literal ``0`` which is treated the
same as no port at all.
"""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import urlsplit

from loguru import logger

from taktile.comms.schemes import Scheme, scheme_of, token_of
from taktile.errors import InvalidArgument, UnknownScheme

DEFAULT_COT_URL = "udp+wo://239.2.3.1:6969"
DEFAULT_BROADCAST_PORT = 6969
DEFAULT_COT_PORT = 8087

_MAX_PORT = 65535

# Token substrings that select the broadcast port
_BROADCAST_MARKERS = ("broadcast", "wo")


@dataclass(frozen=True)
class Locator:
    """Where CoT traffic is sent or received.

    ``Locator()`` is the default write-only multicast locator.
    """

    scheme: Scheme = Scheme.UDP_WRITE_ONLY
    host: str = "239.2.3.1"
    port: int = DEFAULT_BROADCAST_PORT

    def __post_init__(self) -> None:
        if not isinstance(self.scheme, Scheme):
            raise InvalidArgument(f"Locator scheme must be a Scheme, got {self.scheme!r}")
        if isinstance(self.port, bool) or not isinstance(self.port, int):
            raise InvalidArgument(f"Locator port must be an integer, got {self.port!r}")
        if not 0 <= self.port <= _MAX_PORT:
            raise InvalidArgument(f"Locator port must be between 0 and {_MAX_PORT}")

    @property
    def url(self) -> str:
        # IPv6 literals need brackets to keep the port separable
        host = f"[{self.host}]" if ":" in self.host else self.host
        return f"{token_of(self.scheme)}://{host}:{self.port}"

    def __str__(self) -> str:
        return self.url


def default_port_for(token: str) -> int:
    """Default port for a scheme token when the locator omits one."""
    if any(marker in token for marker in _BROADCAST_MARKERS):
        return DEFAULT_BROADCAST_PORT
    return DEFAULT_COT_PORT


def _host_of(netloc: str) -> str:
    """Host part of a netloc, case preserved (``SplitResult.hostname`` lowercases)."""
    hostport = netloc.rpartition("@")[2]
    if hostport.startswith("["):
        return hostport[1:].partition("]")[0]
    return hostport.partition(":")[0]


def resolve(url: str) -> Locator:
    """Parse a locator string.

    Args:
        url: ``scheme://host[:port]``, e.g. ``"tcp://takserver.local"``.

    Returns:
        The resolved Locator.

    Raises:
        UnknownScheme: the scheme token is missing or not registered
            (message ``"Invalid scheme: <token>"``).
        InvalidArgument: the host is missing or the port is malformed.
    """
    # urlsplit lowercases the scheme; registry lookups are case-sensitive
    token, sep, _ = url.partition("://")
    if not sep:
        token = ""
    try:
        scheme = scheme_of(token)
    except UnknownScheme:
        raise UnknownScheme(token, f"Invalid scheme: {token}") from None

    try:
        parts = urlsplit(url)
    except ValueError as exc:
        raise InvalidArgument(f"Invalid locator: {exc}") from exc
    host = _host_of(parts.netloc)
    if not host:
        raise InvalidArgument("Locator host must not be empty")

    try:
        port = parts.port
    except ValueError as exc:
        raise InvalidArgument(f"Invalid port in locator: {exc}") from exc

    if not port:
        port = default_port_for(token)

    locator = Locator(scheme=scheme, host=host, port=port)
    logger.debug("Resolved {} -> {}", url, locator)
    return locator
