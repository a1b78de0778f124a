# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""CoT XML codec — CotRecord <-> ``<event>`` document.

Wire shape (attribute order is not significant):

    <event version="2.0" type="a-u-G" uid="..." how="m-g"
           time="..." start="..." stale="...">
      <point lat="..." lon="..." le="..." hae="..." ce="..."/>
      <detail>
        <_flow-tags_ taktile-host-v0.1.0="..."/>
      </detail>
    </event>

The codec talks to the XML engine only through the ``TreeBuilder`` and
``TreeReader`` protocols.  ``EtreeBuilder`` / ``EtreeReader`` implement
them over xml.etree.ElementTree; another engine can be dropped in by
implementing the same four or five methods.

Decode is strict: any structural problem or unparsable number is a
``ParseError``, re-raised as ``InvalidArgument("Unable to parse: ...")``.
A well-formed document describing an out-of-bounds record is re-raised as
``InvalidArgument("CoT validation failed: ...")``.
"""

from __future__ import annotations

import math
import re
import xml.etree.ElementTree as ET
from datetime import datetime, timezone
from typing import Any, Protocol

from loguru import logger

from taktile import __version__
from taktile.comms.cot import (
    DEFAULT_COT_TYPE,
    MAX_STALE,
    CotRecord,
    format_time,
    parse_time,
)
from taktile.errors import InvalidArgument, ParseError

COT_VERSION = "2.0"
COT_HOW = "m-g"

_POINT_FIELDS = ("lat", "lon", "le", "hae", "ce")

# Plain decimal or exponent notation; no whitespace, underscores, nan or inf
_FLOAT_RE = re.compile(r"[-+]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][-+]?[0-9]+)?")
_UINT_RE = re.compile(r"[0-9]+")


# ---------------------------------------------------------------------------
# Tree interfaces
# ---------------------------------------------------------------------------

class TreeBuilder(Protocol):
    """Minimal write side of an XML engine."""

    def create_element(self, tag: str) -> Any: ...

    def set_attribute(self, node: Any, name: str, value: str) -> None: ...

    def append_child(self, parent: Any, child: Any) -> None: ...


class TreeReader(Protocol):
    """Minimal read side of an XML engine."""

    def root(self) -> Any | None: ...

    def tag(self, node: Any) -> str: ...

    def get_attribute(self, node: Any, name: str) -> str | None: ...

    def child(self, node: Any, name: str) -> Any | None: ...


class EtreeBuilder:
    """TreeBuilder over xml.etree.ElementTree."""

    def create_element(self, tag: str) -> ET.Element:
        return ET.Element(tag)

    def set_attribute(self, node: ET.Element, name: str, value: str) -> None:
        node.set(name, value)

    def append_child(self, parent: ET.Element, child: ET.Element) -> None:
        parent.append(child)


class EtreeReader:
    """TreeReader over xml.etree.ElementTree."""

    def __init__(self, root: ET.Element | None) -> None:
        self._root = root

    @classmethod
    def from_string(cls, data: str | bytes) -> EtreeReader:
        """Parse XML text or UTF-8 bytes.

        Raises:
            ParseError: the input is not well-formed XML.
        """
        try:
            return cls(ET.fromstring(data))
        except ET.ParseError as exc:
            raise ParseError(f"Malformed XML: {exc}") from exc

    def root(self) -> ET.Element | None:
        return self._root

    def tag(self, node: ET.Element) -> str:
        return node.tag

    def get_attribute(self, node: ET.Element, name: str) -> str | None:
        return node.get(name)

    def child(self, node: ET.Element, name: str) -> ET.Element | None:
        return node.find(name)


# ---------------------------------------------------------------------------
# Encode
# ---------------------------------------------------------------------------

def flow_tag_name(host_id: str, version: str = __version__) -> str:
    """Attribute name used in ``<_flow-tags_>`` to mark this producer."""
    return f"{host_id}-v{version}".replace("@", "-")


def _fixed(value: float) -> str:
    return f"{value:.6f}"


def encode(
    record: CotRecord,
    host_id: str,
    builder: TreeBuilder | None = None,
    now: datetime | None = None,
) -> Any:
    """Build the ``<event>`` tree for a record.

    Args:
        record: The record to encode.
        host_id: Producer identity, seeds the flow-tag attribute name.
        builder: XML engine; defaults to ElementTree.
        now: Instant used for time, start, stale and the flow tag.
            Defaults to the current UTC time.

    Returns:
        The root ``event`` node, in the builder's node type.
    """
    if builder is None:
        builder = EtreeBuilder()
    if now is None:
        now = datetime.now(timezone.utc)
    now_str = format_time(now=now)

    event = builder.create_element("event")
    builder.set_attribute(event, "version", COT_VERSION)
    builder.set_attribute(event, "type", record.cot_type)
    builder.set_attribute(event, "uid", record.uid)
    builder.set_attribute(event, "how", COT_HOW)
    builder.set_attribute(event, "time", now_str)
    builder.set_attribute(event, "start", now_str)
    builder.set_attribute(event, "stale", format_time(record.stale, now=now))

    point = builder.create_element("point")
    builder.set_attribute(point, "lat", _fixed(record.lat))
    builder.set_attribute(point, "lon", _fixed(record.lon))
    builder.set_attribute(point, "le", _fixed(record.le))
    builder.set_attribute(point, "hae", _fixed(record.hae))
    builder.set_attribute(point, "ce", _fixed(record.ce))
    builder.append_child(event, point)

    detail = builder.create_element("detail")
    flow_tags = builder.create_element("_flow-tags_")
    builder.set_attribute(flow_tags, flow_tag_name(host_id), now_str)
    builder.append_child(detail, flow_tags)
    builder.append_child(event, detail)

    return event


def to_xml_string(
    record: CotRecord,
    host_id: str,
    pretty: bool = False,
    now: datetime | None = None,
) -> str:
    """Render a record as CoT XML text (no XML declaration)."""
    event = encode(record, host_id, now=now)
    if pretty:
        ET.indent(event, space="  ")
    return ET.tostring(event, encoding="unicode", xml_declaration=False)


def to_bytes(record: CotRecord, host_id: str, now: datetime | None = None) -> bytes:
    """Render a record as UTF-8 encoded CoT XML."""
    return to_xml_string(record, host_id, now=now).encode("utf-8")


# ---------------------------------------------------------------------------
# Decode
# ---------------------------------------------------------------------------

def _parse_float(name: str, raw: str | None) -> float:
    if raw is None:
        raise ParseError(f"Missing point attribute '{name}'")
    if not _FLOAT_RE.fullmatch(raw):
        raise ParseError(f"Invalid number for '{name}': {raw!r}")
    value = float(raw)
    if not math.isfinite(value):
        raise ParseError(f"Number out of range for '{name}': {raw!r}")
    return value


def _parse_stale(tree: TreeReader, event: Any) -> int:
    """Stale window in seconds.

    Accepts a bare unsigned integer, or a CoT timestamp measured from
    ``start`` (falling back to ``time``), which is what ``encode`` emits.
    """
    raw = tree.get_attribute(event, "stale")
    if raw is None:
        raise ParseError("Missing event attribute 'stale'")
    if _UINT_RE.fullmatch(raw):
        value = int(raw)
        if value > MAX_STALE:
            raise ParseError(f"Stale out of range: {raw!r}")
        return value

    base = tree.get_attribute(event, "start") or tree.get_attribute(event, "time")
    if base is None:
        raise ParseError(f"Invalid stale value: {raw!r}")
    try:
        delta = parse_time(raw) - parse_time(base)
    except ValueError as exc:
        raise ParseError(f"Invalid stale value: {raw!r}") from exc
    seconds = round(delta.total_seconds())
    if not 0 <= seconds <= MAX_STALE:
        raise ParseError(f"Stale out of range: {raw!r}")
    return seconds


def _read_fields(tree: TreeReader | None) -> dict:
    event = tree.root() if tree is not None else None
    if event is None:
        raise ParseError("Empty CoT document")
    if tree.tag(event) != "event":
        raise ParseError(f"Root element must be 'event', got '{tree.tag(event)}'")

    point = tree.child(event, "point")
    if point is None:
        raise ParseError("Missing 'point' element")

    uid = tree.get_attribute(event, "uid")
    if not uid:
        raise ParseError("Missing or empty 'uid' attribute")

    fields = {name: _parse_float(name, tree.get_attribute(point, name)) for name in _POINT_FIELDS}
    fields["uid"] = uid
    fields["stale"] = _parse_stale(tree, event)
    cot_type = tree.get_attribute(event, "type")
    fields["cot_type"] = DEFAULT_COT_TYPE if cot_type is None else cot_type
    return fields


def decode(tree: TreeReader | None) -> CotRecord:
    """Rebuild a validated record from an ``<event>`` tree.

    ``time``, ``start`` and the ``<detail>`` block are not reconstructed.

    Raises:
        InvalidArgument: the tree is malformed ("Unable to parse: ...") or
            describes an invalid record ("CoT validation failed: ...").
    """
    try:
        fields = _read_fields(tree)
    except (ParseError, ValueError) as exc:
        logger.debug("Rejected CoT event: {}", exc)
        raise InvalidArgument(f"Unable to parse: {exc}") from exc

    try:
        return CotRecord(**fields)
    except InvalidArgument as exc:
        logger.debug("Rejected CoT event {}: {}", fields["uid"], exc)
        raise InvalidArgument(f"CoT validation failed: {exc}") from exc


def from_xml_string(data: str | bytes) -> CotRecord:
    """Parse CoT XML text (or UTF-8 bytes) into a validated record."""
    try:
        tree = EtreeReader.from_string(data)
    except ParseError as exc:
        logger.debug("Rejected CoT payload: {}", exc)
        raise InvalidArgument(f"Unable to parse: {exc}") from exc
    return decode(tree)


def from_bytes(data: bytes) -> CotRecord:
    """Parse UTF-8 encoded CoT XML into a validated record."""
    return from_xml_string(data)
