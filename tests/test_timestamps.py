"""Tests for rcc.timestamps."""

import time
from datetime import datetime, timezone

import pytest

from rcc.timestamps import (
    InvalidTimestampError,
    InvalidTimezoneError,
    current_timestamp,
    resolve_timezone,
    to_readable,
    to_timezone,
)


# --- Timezone conversion ---

def test_epoch_in_utc():
    assert to_timezone(0, "UTC") == "1970-01-01 00:00:00 UTC (+0000)"


def test_epoch_in_new_york():
    assert to_timezone(0, "America/New_York") == "1969-12-31 19:00:00 EST (-0500)"


def test_daylight_saving_applies():
    # 2023-07-01T12:00:00Z
    assert to_timezone(1688212800, "America/New_York") == "2023-07-01 08:00:00 EDT (-0400)"


def test_half_hour_offset():
    assert to_timezone(0, "Asia/Kolkata") == "1970-01-01 05:30:00 IST (+0530)"


def test_negative_timestamp():
    assert to_timezone(-86400, "UTC") == "1969-12-31 00:00:00 UTC (+0000)"


@pytest.mark.parametrize("name", ["Not/AZone", "", "Mars/Olympus_Mons", "../etc/passwd"])
def test_invalid_timezone(name):
    with pytest.raises(InvalidTimezoneError) as exc_info:
        to_timezone(0, name)
    assert str(exc_info.value) == f"Invalid timezone: {name}"
    assert exc_info.value.name == name


def test_resolve_timezone_returns_zoneinfo():
    assert resolve_timezone("Europe/Paris").key == "Europe/Paris"


def test_out_of_range_timestamp_in_timezone():
    with pytest.raises(InvalidTimestampError) as exc_info:
        to_timezone(2**62, "UTC")
    assert str(exc_info.value) == f"Invalid timestamp: {2**62}"


# --- Readable (local) conversion ---

def test_readable_matches_local_time():
    expected = datetime.fromtimestamp(86400 * 365, tz=timezone.utc).astimezone()
    assert to_readable(86400 * 365) == expected.strftime("%Y-%m-%d %H:%M:%S")


def test_readable_format_shape():
    rendered = to_readable(0)
    datetime.strptime(rendered, "%Y-%m-%d %H:%M:%S")


@pytest.mark.parametrize("ts", [2**62, -(2**62)])
def test_readable_out_of_range(ts):
    with pytest.raises(InvalidTimestampError, match=f"Invalid timestamp: {ts}"):
        to_readable(ts)


def test_errors_are_value_errors():
    assert issubclass(InvalidTimezoneError, ValueError)
    assert issubclass(InvalidTimestampError, ValueError)


# --- Current timestamp ---

def test_current_timestamp_close_to_wall_clock():
    now = current_timestamp()
    assert isinstance(now, int)
    assert abs(now - time.time()) < 5
