# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""Exception hierarchy for taktile.

Every failure raised by the core is an input error: none of them are
retryable.  ``ParseError`` never leaves the XML decoder; it is always
re-raised as ``InvalidArgument`` with the original chained.
"""

from __future__ import annotations


class TaktileError(Exception):
    """Base class for all taktile errors."""


class InvalidArgument(TaktileError, ValueError):
    """A value is out of bounds, empty, or otherwise malformed."""


class UnknownScheme(InvalidArgument):
    """A transport scheme token is not in the registry."""

    def __init__(self, token: str, message: str | None = None) -> None:
        self.token = token
        super().__init__(message or f"Unknown scheme: {token!r}")


class ParseError(TaktileError):
    """Structurally malformed CoT XML or an unparsable attribute."""


class PayloadTooLarge(InvalidArgument):
    """An envelope payload exceeds its transport's size bound."""

    def __init__(self, size: int, limit: int) -> None:
        self.size = size
        self.limit = limit
        super().__init__(f"Payload of {size} bytes exceeds the {limit} byte limit")
