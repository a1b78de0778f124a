# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""taktile — Cursor-on-Target records, locators and XML codec."""

__version__ = "0.1.0"

from taktile.comms.cot import CotRecord, default_record, format_time, hello_event, validate  # noqa: E402
from taktile.comms.cot_xml import decode, encode, from_xml_string, to_xml_string  # noqa: E402
from taktile.comms.envelope import CotSerializer, Envelope, Transport  # noqa: E402
from taktile.comms.locator import Locator, resolve  # noqa: E402
from taktile.comms.schemes import Scheme, scheme_of, token_of  # noqa: E402
from taktile.errors import InvalidArgument, ParseError, TaktileError, UnknownScheme  # noqa: E402

__all__ = [
    "CotRecord",
    "CotSerializer",
    "Envelope",
    "InvalidArgument",
    "Locator",
    "ParseError",
    "Scheme",
    "TaktileError",
    "Transport",
    "UnknownScheme",
    "decode",
    "default_record",
    "encode",
    "format_time",
    "from_xml_string",
    "hello_event",
    "resolve",
    "scheme_of",
    "to_xml_string",
    "token_of",
    "validate",
]
