# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""taktile command line.

Usage:
    taktile resolve tcp://takserver.local
    taktile hello --uid sensor-7
    taktile encode --lat 37.7749 --lon -122.4194 --uid rover-1 --pretty
    taktile decode event.xml        # or read from stdin

Input errors exit with status 2 and a one-line log message.
"""

from __future__ import annotations

import argparse
import json
import sys
import xml.etree.ElementTree as ET

from loguru import logger
from pydantic import ValidationError

from taktile import __version__
from taktile.comms.cot import DEFAULT_COT_VAL, CotRecord, hello_event
from taktile.comms.cot_xml import from_xml_string, to_xml_string
from taktile.comms.envelope import CotSerializer, Envelope, transport_for
from taktile.comms.locator import resolve
from taktile.comms.schemes import all_tokens, token_of
from taktile.config import TaktileSettings, get_settings
from taktile.errors import TaktileError
from taktile.log import LOG_LEVELS, configure_logging

EXIT_OK = 0
EXIT_INPUT_ERROR = 2


def _cmd_resolve(args: argparse.Namespace, settings: TaktileSettings) -> int:
    locator = resolve(args.url)
    print(f"{token_of(locator.scheme)} {locator.host} {locator.port}")
    return EXIT_OK


def _cmd_hello(args: argparse.Namespace, settings: TaktileSettings) -> int:
    record = hello_event(args.uid)
    print(to_xml_string(record, settings.host_id, pretty=args.pretty))
    return EXIT_OK


def _cmd_encode(args: argparse.Namespace, settings: TaktileSettings) -> int:
    record = CotRecord(
        lat=args.lat,
        lon=args.lon,
        ce=args.ce,
        hae=args.hae,
        le=args.le,
        uid=args.uid if args.uid is not None else settings.host_id,
        stale=args.stale if args.stale is not None else settings.stale,
        cot_type=args.type if args.type is not None else settings.cot_type,
    )
    transport = transport_for(settings.locator.scheme)
    envelope = Envelope.wrap(record, CotSerializer(settings.host_id), transport)
    logger.debug("Encoded {} bytes for {} transport", envelope.size, transport.value)

    if args.pretty:
        event = ET.fromstring(envelope.payload)
        ET.indent(event, space="  ")
        print(ET.tostring(event, encoding="unicode"))
    else:
        print(envelope.payload.decode("utf-8"))
    return EXIT_OK


def _cmd_decode(args: argparse.Namespace, settings: TaktileSettings) -> int:
    if args.file == "-":
        data = sys.stdin.buffer.read()
    else:
        with open(args.file, "rb") as fh:
            data = fh.read()
    record = from_xml_string(data)
    print(json.dumps(record.to_dict(), indent=2))
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="taktile",
        description="Build, parse and address Cursor-on-Target messages",
    )
    parser.add_argument("--version", action="version", version=f"taktile {__version__}")
    parser.add_argument(
        "--log-level", default=None, type=str.upper, choices=LOG_LEVELS,
        help="Log level (default: TAKTILE_LOG_LEVEL or INFO)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p_resolve = sub.add_parser("resolve", help="Resolve a scheme://host[:port] locator")
    p_resolve.add_argument("url", help=f"Locator; scheme is one of: {', '.join(all_tokens())}")
    p_resolve.set_defaults(func=_cmd_resolve)

    p_hello = sub.add_parser("hello", help="Print a hello (ping) event")
    p_hello.add_argument("--uid", default=None, help="Event uid (default: takPing)")
    p_hello.add_argument("--pretty", action="store_true", help="Indent the XML")
    p_hello.set_defaults(func=_cmd_hello)

    p_encode = sub.add_parser("encode", help="Print a CoT event for a position")
    p_encode.add_argument("--lat", type=float, default=0.0)
    p_encode.add_argument("--lon", type=float, default=0.0)
    p_encode.add_argument("--ce", type=float, default=DEFAULT_COT_VAL)
    p_encode.add_argument("--hae", type=float, default=DEFAULT_COT_VAL)
    p_encode.add_argument("--le", type=float, default=DEFAULT_COT_VAL)
    p_encode.add_argument("--uid", default=None, help="Event uid (default: host id)")
    p_encode.add_argument("--stale", type=int, default=None, help="Stale window in seconds")
    p_encode.add_argument("--type", default=None, help="CoT type code")
    p_encode.add_argument("--pretty", action="store_true", help="Indent the XML")
    p_encode.set_defaults(func=_cmd_encode)

    p_decode = sub.add_parser("decode", help="Parse a CoT event and print it as JSON")
    p_decode.add_argument("file", nargs="?", default="-", help="XML file (default: stdin)")
    p_decode.set_defaults(func=_cmd_decode)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = get_settings()
    except ValidationError as exc:
        configure_logging(args.log_level or "INFO")
        logger.error("Invalid configuration: {}", exc)
        return EXIT_INPUT_ERROR

    configure_logging(args.log_level or settings.log_level, settings.log_file)

    try:
        return args.func(args, settings)
    except TaktileError as exc:
        logger.error("{}", exc)
        return EXIT_INPUT_ERROR
    except OSError as exc:
        logger.error("Cannot read input: {}", exc)
        return EXIT_INPUT_ERROR


if __name__ == "__main__":
    sys.exit(main())
