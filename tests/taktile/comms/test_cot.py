# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""Tests for the CoT record: bounds, factories and time formatting."""

import dataclasses
import math
import re
from datetime import datetime, timedelta, timezone

import pytest

TIME_RE = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z$")


def _record(**overrides):
    from taktile.comms.cot import CotRecord
    fields = {
        "lat": 37.7749,
        "lon": -122.4194,
        "ce": 10.0,
        "hae": 16.0,
        "le": 5.0,
        "uid": "rover-1",
        "stale": 120,
        "cot_type": "a-f-G-U-C",
    }
    fields.update(overrides)
    return CotRecord(**fields)


# ===================================================================
# Construction and validation
# ===================================================================

@pytest.mark.unit
class TestConstruction:

    def test_valid_record(self):
        rec = _record()
        assert rec.uid == "rover-1"
        assert rec.lat == pytest.approx(37.7749)

    def test_bounds_inclusive(self):
        _record(lat=90.0, lon=180.0)
        _record(lat=-90.0, lon=-180.0)
        _record(ce=0.0, hae=0.0, le=0.0)

    def test_defaults(self):
        from taktile.comms.cot import CotRecord
        rec = CotRecord(lat=1.0, lon=2.0, ce=3.0, hae=4.0, le=5.0, uid="x")
        assert rec.stale == 120
        assert rec.cot_type == "a-u-G"

    def test_frozen(self):
        rec = _record()
        with pytest.raises(dataclasses.FrozenInstanceError):
            rec.lat = 95.0

    def test_replace_revalidates(self):
        from taktile.errors import InvalidArgument
        rec = _record()
        moved = dataclasses.replace(rec, lat=10.0)
        assert moved.lat == 10.0
        with pytest.raises(InvalidArgument):
            dataclasses.replace(rec, lat=91.0)

    def test_equality_is_by_value(self):
        assert _record() == _record()
        assert _record() != _record(uid="rover-2")


@pytest.mark.unit
class TestValidationRules:

    @pytest.mark.parametrize("field,value,message", [
        ("lat", 91.0, "Latitude must be between -90 and 90 degrees"),
        ("lat", -90.5, "Latitude must be between -90 and 90 degrees"),
        ("lon", 180.01, "Longitude out of range"),
        ("lon", -181.0, "Longitude out of range"),
        ("ce", -1.0, "Circular Error must be ≥ 0"),
        ("hae", -0.1, "Height Above Ellipsoid must be ≥ 0"),
        ("le", -5.0, "Linear Error must be ≥ 0"),
        ("uid", "", "UID must not be empty"),
        ("cot_type", "", "CoT type must not be empty"),
    ])
    def test_each_rule_is_named(self, field, value, message):
        from taktile.errors import InvalidArgument
        with pytest.raises(InvalidArgument) as info:
            _record(**{field: value})
        assert str(info.value) == message

    def test_first_violation_wins(self):
        from taktile.errors import InvalidArgument
        with pytest.raises(InvalidArgument) as info:
            _record(lat=91.0, lon=200.0, ce=-1.0, uid="")
        assert "Latitude" in str(info.value)

        with pytest.raises(InvalidArgument) as info:
            _record(ce=-1.0, le=-1.0, uid="")
        assert "Circular Error" in str(info.value)

        with pytest.raises(InvalidArgument) as info:
            _record(uid="", cot_type="")
        assert "UID" in str(info.value)

    def test_nan_rejected(self):
        from taktile.errors import InvalidArgument
        with pytest.raises(InvalidArgument, match="Latitude"):
            _record(lat=math.nan)
        with pytest.raises(InvalidArgument, match="Circular Error"):
            _record(ce=math.nan)

    def test_infinite_values_rejected(self):
        from taktile.errors import InvalidArgument
        with pytest.raises(InvalidArgument, match="Circular Error"):
            _record(ce=math.inf)
        with pytest.raises(InvalidArgument, match="Height Above Ellipsoid"):
            _record(hae=math.inf)
        with pytest.raises(InvalidArgument, match="Linear Error"):
            _record(le=math.inf)
        with pytest.raises(InvalidArgument):
            _record(lat=math.inf)

    def test_stale_must_fit_uint32(self):
        from taktile.errors import InvalidArgument
        _record(stale=0)
        _record(stale=2**32 - 1)
        with pytest.raises(InvalidArgument, match="Stale"):
            _record(stale=-1)
        with pytest.raises(InvalidArgument, match="Stale"):
            _record(stale=2**32)

    def test_stale_checked_after_listed_rules(self):
        from taktile.errors import InvalidArgument
        with pytest.raises(InvalidArgument, match="CoT type"):
            _record(cot_type="", stale=-1)

    def test_validate_accepts_valid(self):
        from taktile.comms.cot import validate
        assert validate(_record()) is None


# ===================================================================
# Factories
# ===================================================================

@pytest.mark.unit
class TestFactories:

    def test_from_uid(self):
        from taktile.comms.cot import CotRecord
        rec = CotRecord.from_uid("sensor-7")
        assert rec.uid == "sensor-7"
        assert (rec.lat, rec.lon, rec.ce, rec.hae, rec.le) == (0.0, 0.0, 0.0, 0.0, 0.0)
        assert rec.stale == 120
        assert rec.cot_type == "a-u-G"

    def test_from_uid_empty_rejected(self):
        from taktile.comms.cot import CotRecord
        from taktile.errors import InvalidArgument
        with pytest.raises(InvalidArgument, match="UID"):
            CotRecord.from_uid("")

    def test_default_record(self, host_id):
        from taktile.comms.cot import DEFAULT_COT_VAL, default_record
        rec = default_record(host_id)
        assert rec.uid == "taktile@testhost"
        assert rec.ce == rec.hae == rec.le == DEFAULT_COT_VAL == 9999999.0
        assert rec.lat == rec.lon == 0.0
        assert rec.stale == 120
        assert rec.cot_type == "a-u-G"

    def test_hello_event_default(self):
        from taktile.comms.cot import hello_event
        rec = hello_event(None)
        assert rec.uid == "takPing"
        assert rec.cot_type == "t-x-d-d"
        assert rec.stale == 0
        assert (rec.lat, rec.lon, rec.ce, rec.hae, rec.le) == (0.0, 0.0, 0.0, 0.0, 0.0)

    def test_hello_event_no_argument(self):
        from taktile.comms.cot import hello_event
        assert hello_event().uid == "takPing"

    def test_hello_event_custom_uid(self):
        from taktile.comms.cot import hello_event
        assert hello_event("sensor-7").uid == "sensor-7"

    def test_to_dict(self):
        d = _record().to_dict()
        assert d["uid"] == "rover-1"
        assert d["cot_type"] == "a-f-G-U-C"
        assert set(d) == {"lat", "lon", "ce", "hae", "le", "uid", "stale", "cot_type"}


# ===================================================================
# Time formatting
# ===================================================================

@pytest.mark.unit
class TestFormatTime:

    def test_shape(self):
        from taktile.comms.cot import format_time
        assert TIME_RE.match(format_time())

    def test_shape_with_offset(self):
        from taktile.comms.cot import format_time
        assert TIME_RE.match(format_time(120))

    def test_fixed_instant(self, fixed_now):
        from taktile.comms.cot import format_time
        assert format_time(now=fixed_now) == "2024-03-09T14:05:07.123Z"

    def test_milliseconds_truncated(self):
        from taktile.comms.cot import format_time
        now = datetime(2024, 1, 1, 0, 0, 0, 999999, tzinfo=timezone.utc)
        assert format_time(now=now) == "2024-01-01T00:00:00.999Z"

    def test_zero_padded_milliseconds(self):
        from taktile.comms.cot import format_time
        now = datetime(2024, 1, 1, 0, 0, 0, 7000, tzinfo=timezone.utc)
        assert format_time(now=now) == "2024-01-01T00:00:00.007Z"

    def test_offset(self, fixed_now):
        from taktile.comms.cot import format_time
        assert format_time(120, now=fixed_now) == "2024-03-09T14:07:07.123Z"

    def test_negative_offset(self, fixed_now):
        from taktile.comms.cot import format_time
        assert format_time(-7, now=fixed_now) == "2024-03-09T14:05:00.123Z"

    def test_offset_crosses_day(self):
        from taktile.comms.cot import format_time
        now = datetime(2024, 12, 31, 23, 59, 30, tzinfo=timezone.utc)
        assert format_time(60, now=now) == "2025-01-01T00:00:30.000Z"

    def test_non_utc_input_converted(self):
        from taktile.comms.cot import format_time
        plus_two = timezone(timedelta(hours=2))
        now = datetime(2024, 3, 9, 16, 5, 7, tzinfo=plus_two)
        assert format_time(now=now) == "2024-03-09T14:05:07.000Z"

    def test_naive_input_is_utc(self):
        from taktile.comms.cot import format_time
        assert format_time(now=datetime(2024, 3, 9, 14, 5, 7)) == "2024-03-09T14:05:07.000Z"

    def test_current_time_is_close(self):
        from taktile.comms.cot import format_time, parse_time
        before = datetime.now(timezone.utc) - timedelta(seconds=1)
        stamped = parse_time(format_time())
        after = datetime.now(timezone.utc) + timedelta(seconds=1)
        assert before <= stamped <= after


@pytest.mark.unit
class TestParseTime:

    def test_with_millis(self):
        from taktile.comms.cot import parse_time
        dt = parse_time("2024-03-09T14:05:07.123Z")
        assert dt == datetime(2024, 3, 9, 14, 5, 7, 123000, tzinfo=timezone.utc)

    def test_without_fraction(self):
        from taktile.comms.cot import parse_time
        assert parse_time("2024-03-09T14:05:07Z").second == 7

    def test_requires_z(self):
        from taktile.comms.cot import parse_time
        with pytest.raises(ValueError):
            parse_time("2024-03-09T14:05:07.123+00:00")

    def test_garbage(self):
        from taktile.comms.cot import parse_time
        with pytest.raises(ValueError):
            parse_time("yesterdayZ")
