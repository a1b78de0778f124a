# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""CoT (Cursor on Target) record — the validated position/identity value type.

A ``CotRecord`` can only exist in a valid state: construction runs
``validate()`` and raises on the first violated rule.  Records are frozen;
use ``dataclasses.replace()`` to derive a modified copy, which validates
again.

XML serialization lives in cot_xml.py.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from taktile.errors import InvalidArgument

MAX_LATITUDE = 90.0
MAX_LONGITUDE = 180.0

DEFAULT_COT_STALE = 120
DEFAULT_COT_TYPE = "a-u-G"
# "Unknown error" sentinel for ce / hae / le
DEFAULT_COT_VAL = 9999999.0

HELLO_UID = "takPing"
HELLO_TYPE = "t-x-d-d"

MAX_STALE = 2**32 - 1

W3C_XML_DATETIME = "%Y-%m-%dT%H:%M:%S"


@dataclass(frozen=True)
class CotRecord:
    """A single CoT position report.

    Attributes:
        lat: Latitude in degrees, [-90, 90].
        lon: Longitude in degrees, [-180, 180].
        ce: Circular error in meters, >= 0.
        hae: Height above ellipsoid in meters, >= 0.
        le: Linear error in meters, >= 0.
        uid: Unique identifier of the reporting entity, non-empty.
        stale: Seconds after "now" at which the report expires.
        cot_type: CoT type code, non-empty (e.g. "a-f-G-U-C").
    """

    lat: float
    lon: float
    ce: float
    hae: float
    le: float
    uid: str
    stale: int = DEFAULT_COT_STALE
    cot_type: str = DEFAULT_COT_TYPE

    def __post_init__(self) -> None:
        validate(self)

    @classmethod
    def from_uid(cls, uid: str) -> CotRecord:
        """Zero position and error, default stale and type."""
        return cls(
            lat=0.0, lon=0.0, ce=0.0, hae=0.0, le=0.0,
            uid=uid, stale=DEFAULT_COT_STALE, cot_type=DEFAULT_COT_TYPE,
        )

    def to_dict(self) -> dict:
        return {
            "lat": self.lat,
            "lon": self.lon,
            "ce": self.ce,
            "hae": self.hae,
            "le": self.le,
            "uid": self.uid,
            "stale": self.stale,
            "cot_type": self.cot_type,
        }


def _in_range(value: float, bound: float) -> bool:
    # NaN compares false against everything, so it is rejected here too
    return -bound <= value <= bound


def _non_negative(value: float) -> bool:
    return math.isfinite(value) and value >= 0


def validate(record: CotRecord) -> None:
    """Check every field bound, stopping at the first violation.

    Rules are checked in a fixed order: lat, lon, ce, hae, le, uid,
    cot_type, stale.

    Raises:
        InvalidArgument: naming the violated rule.
    """
    if not _in_range(record.lat, MAX_LATITUDE):
        raise InvalidArgument("Latitude must be between -90 and 90 degrees")
    if not _in_range(record.lon, MAX_LONGITUDE):
        raise InvalidArgument("Longitude out of range")
    if not _non_negative(record.ce):
        raise InvalidArgument("Circular Error must be ≥ 0")
    if not _non_negative(record.hae):
        raise InvalidArgument("Height Above Ellipsoid must be ≥ 0")
    if not _non_negative(record.le):
        raise InvalidArgument("Linear Error must be ≥ 0")
    if not record.uid:
        raise InvalidArgument("UID must not be empty")
    if not record.cot_type:
        raise InvalidArgument("CoT type must not be empty")
    stale = record.stale
    if isinstance(stale, bool) or not isinstance(stale, int) or not 0 <= stale <= MAX_STALE:
        raise InvalidArgument(f"Stale must be between 0 and {MAX_STALE} seconds")


def default_record(host_id: str) -> CotRecord:
    """A record with every field defaulted, reporting as ``host_id``.

    Error fields carry the "unknown" sentinel rather than zero.
    """
    return CotRecord(
        lat=0.0,
        lon=0.0,
        ce=DEFAULT_COT_VAL,
        hae=DEFAULT_COT_VAL,
        le=DEFAULT_COT_VAL,
        uid=host_id,
        stale=DEFAULT_COT_STALE,
        cot_type=DEFAULT_COT_TYPE,
    )


def hello_event(uid: str | None = None) -> CotRecord:
    """Build a "ping" record used to announce presence to a TAK endpoint."""
    return CotRecord(
        lat=0.0,
        lon=0.0,
        ce=0.0,
        hae=0.0,
        le=0.0,
        uid=uid if uid is not None else HELLO_UID,
        stale=0,
        cot_type=HELLO_TYPE,
    )


def format_time(offset_seconds: int | None = None, now: datetime | None = None) -> str:
    """Render a UTC instant in CoT time format.

    Args:
        offset_seconds: Seconds to add (used for the stale time).
        now: Base instant; defaults to the current UTC time. Naive values
            are taken as UTC.

    Returns:
        ``YYYY-MM-DDTHH:MM:SS.mmmZ`` with milliseconds truncated.
    """
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    else:
        now = now.astimezone(timezone.utc)
    if offset_seconds:
        now = now + timedelta(seconds=offset_seconds)
    return f"{now.strftime(W3C_XML_DATETIME)}.{now.microsecond // 1000:03d}Z"


def parse_time(value: str) -> datetime:
    """Parse a CoT timestamp back into an aware UTC datetime.

    Accepts the ``Z`` suffix with or without fractional seconds.

    Raises:
        ValueError: value is not a CoT timestamp.
    """
    if not value.endswith("Z"):
        raise ValueError(f"CoT time must end in 'Z': {value!r}")
    body = value[:-1]
    fmt = f"{W3C_XML_DATETIME}.%f" if "." in body else W3C_XML_DATETIME
    return datetime.strptime(body, fmt).replace(tzinfo=timezone.utc)
