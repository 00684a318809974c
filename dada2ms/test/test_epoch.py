"""Tests for :mod:`dada2ms.epoch`."""

import katpoint
import pytest

from dada2ms.epoch import parse_epoch, mjd_seconds
from dada2ms.errors import FormatError


class TestParseEpoch(object):
    def test_simple(self):
        timestamp = parse_epoch('2015-01-01-00:00:00.0', 0)
        assert timestamp.secs == 1420070400.0

    def test_offset(self):
        """The offset is added to the parsed time"""
        timestamp = parse_epoch('2015-01-01-00:00:00', 90.5)
        assert timestamp.secs == pytest.approx(1420070400.0 + 90.5)

    def test_fractional_seconds(self):
        timestamp = parse_epoch('2014-12-31-23:59:59.25', 0.5)
        assert timestamp.secs == pytest.approx(1420070399.75)

    def test_missing_field(self):
        """Must raise :exc:`FormatError` if fewer than six fields are present"""
        for value in ['2015-01-01-00:00', '2015-01-01', '2015-01-01 00:00:00', '', 'now']:
            with pytest.raises(FormatError):
                parse_epoch(value, 0)

    def test_invalid_date(self):
        """Must raise :exc:`FormatError` if the fields do not form a date"""
        with pytest.raises(FormatError):
            parse_epoch('2015-13-01-00:00:00', 0)


class TestMjdSeconds(object):
    def test_unix_epoch(self):
        assert mjd_seconds(katpoint.Timestamp(0.0)) == 40587 * 86400.0

    def test_known_date(self):
        # 2015-01-01 is MJD 57023
        assert mjd_seconds(parse_epoch('2015-01-01-00:00:00')) == pytest.approx(57023 * 86400.0)


class TestParseEpochRanges(object):
    def test_hour_minute_checked(self):
        """Must raise :exc:`FormatError` if the hour or minute is out of range"""
        for value in ['2015-01-01-24:00:00', '2015-01-01-00:60:00']:
            with pytest.raises(FormatError):
                parse_epoch(value)

    def test_seconds_unchecked(self):
        """Seconds of 60 or more carry over into the next minute"""
        assert parse_epoch('2015-01-01-00:00:60').secs == 1420070460.0
