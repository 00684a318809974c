"""Parsing of correlator timestamps into :class:`katpoint.Timestamp` epochs."""

import calendar
import datetime
import re

import katpoint

from .errors import FormatError


# YYYY-MM-DD-HH:MM:SS[.frac], as written in the correlator dump headers
_EPOCH_RE = re.compile(
    r'^\s*(\d+)-(\d+)-(\d+)-(\d+):(\d+):(\d+(?:\.\d*)?)\s*$')
# Unix epoch (1970-01-01) expressed as a Modified Julian Date
_MJD_UNIX_EPOCH = 40587.0
_SECONDS_PER_DAY = 86400.0


def parse_epoch(value, offset=0.0):
    """Convert a UTC date/time string to an epoch.

    Parameters
    ----------
    value : str
        UTC time in the form ``YYYY-MM-DD-HH:MM:SS[.frac]``
    offset : float, optional
        Seconds to add to the parsed time

    Returns
    -------
    epoch : :class:`katpoint.Timestamp`
        The instant `value` + `offset`

    Raises
    ------
    FormatError
        if any of the six fields is missing, or the date, hour or minute is
        out of range. Seconds are not range-checked, so values of 60 or more
        (leap seconds) carry over into the next minute.
    """
    match = _EPOCH_RE.match(value)
    if match is None:
        raise FormatError('Invalid epoch string {!r}'.format(value))
    year, month, day, hour, minute = [int(x) for x in match.group(1, 2, 3, 4, 5)]
    seconds = float(match.group(6))
    try:
        start = datetime.datetime(year, month, day, hour, minute)
    except ValueError as error:
        raise FormatError('Invalid epoch string {!r}: {}'.format(value, error)) from error
    secs = calendar.timegm(start.timetuple()) + seconds + offset
    return katpoint.Timestamp(secs)


def mjd_seconds(timestamp):
    """Express a :class:`katpoint.Timestamp` as MJD seconds, the unit of all
    Measurement Set time columns."""
    return timestamp.secs + _MJD_UNIX_EPOCH * _SECONDS_PER_DAY
