# This file is part of Jabbertime.
#
# SPDX-License-Identifier: GPL-3.0-only

# Date and time helpers for XEP-0090: Legacy Entity Time

from __future__ import annotations

import logging
import os
import re
import time
from datetime import datetime
from datetime import timedelta
from datetime import timezone
from datetime import tzinfo
from zoneinfo import ZoneInfo
from zoneinfo import ZoneInfoNotFoundError

from jabbertime.common import app
from jabbertime.common.const import DEFAULT_DISPLAY_FORMAT

log = logging.getLogger('jabbertime.c.m.date_and_time')

PATTERN_OFFSET = re.compile(
    r'(?:UTC|GMT)?'
    r'([-+])'
    r'([0-9]{1,2})'
    r'(?::?([0-9]{2}))?$'
)

# CCYYMMDDThh:mm:ss
PATTERN_UTC = re.compile(
    r'([0-9]{4})([0-9]{2})([0-9]{2})'
    r'T([0-9]{2}):([0-9]{2}):([0-9]{2})$'
)

UTC_NAMES = ('UTC', 'GMT', 'Z')

ZONEINFO_DIR = 'zoneinfo/'

ZERO = timedelta(0)
SECOND = timedelta(seconds=1)

STDOFFSET = timedelta(seconds=-time.timezone)
if time.daylight:
    DSTOFFSET = timedelta(seconds=-time.altzone)
else:
    DSTOFFSET = STDOFFSET

DSTDIFF = DSTOFFSET - STDOFFSET


class LocalTimezone(tzinfo):
    '''
    A class capturing the platform's idea of local time.
    May result in wrong values on historical times in
    timezones where UTC offset and/or the DST rules had
    changed in the past.
    '''
    def fromutc(self, dt):
        assert dt.tzinfo is self
        stamp = (dt - datetime(1970, 1, 1, tzinfo=self)) // SECOND
        args = time.localtime(stamp)[:6]
        dst_diff = DSTDIFF // SECOND
        # Detect fold
        fold = (args == time.localtime(stamp - dst_diff))
        return datetime(*args, microsecond=dt.microsecond,
                        tzinfo=self, fold=fold)

    def utcoffset(self, dt):
        if self._isdst(dt):
            return DSTOFFSET
        return STDOFFSET

    def dst(self, dt):
        if self._isdst(dt):
            return DSTDIFF
        return ZERO

    def tzname(self, dt):
        return time.tzname[self._isdst(dt)]

    @property
    def key(self) -> str | None:
        return get_local_timezone_key()

    def __eq__(self, other):
        return isinstance(other, LocalTimezone)

    def __hash__(self):
        return hash(LocalTimezone)

    @staticmethod
    def _isdst(dt):
        tt = (dt.year, dt.month, dt.day,
              dt.hour, dt.minute, dt.second,
              dt.weekday(), 0, 0)
        stamp = time.mktime(tt)
        tt = time.localtime(stamp)
        return tt.tm_isdst > 0


def _is_zoneinfo_key(key: str) -> bool:
    try:
        ZoneInfo(key)
    except (ZoneInfoNotFoundError, ValueError):
        return False
    return True


def get_local_timezone_key() -> str | None:
    '''
    IANA key of the platform's local time, taken from $TZ or the
    /etc/localtime link. None if neither names a known zone.
    '''
    key = os.environ.get('TZ', '').lstrip(':')
    if key and _is_zoneinfo_key(key):
        return key

    path = os.path.realpath('/etc/localtime')
    if ZONEINFO_DIR not in path:
        return None

    key = path.split(ZONEINFO_DIR, 1)[1]
    if _is_zoneinfo_key(key):
        return key
    return None


def create_tzinfo(hours: int = 0,
                  minutes: int = 0,
                  tz_string: str | None = None) -> tzinfo | None:
    if tz_string is None:
        return timezone(timedelta(hours=hours, minutes=minutes))

    if tz_string.upper() == 'Z':
        return timezone.utc

    try:
        hours, minutes = map(int, tz_string.split(':'))
    except Exception:
        log.warning('Wrong tz string: %s', tz_string)
        return None

    if hours not in range(-24, 24):
        log.warning('Wrong tz string: %s', tz_string)
        return None

    if minutes not in range(0, 60):
        log.warning('Wrong tz string: %s', tz_string)
        return None

    if tz_string.startswith('-'):
        return timezone(timedelta(hours=hours, minutes=-minutes))
    return timezone(timedelta(hours=hours, minutes=minutes))


def resolve_timezone(identifier: str | None) -> tzinfo | None:
    '''
    Resolve a timezone identifier as found in <tz/> to a tzinfo

    Accepted are IANA keys ('Europe/Berlin'), 'UTC'/'GMT'/'Z' and
    fixed offsets ('UTC+02:00', '+0200', '-05:30').

    Returns None if the identifier is unknown.
    '''
    if not identifier:
        return None

    identifier = identifier.strip()
    if identifier.upper() in UTC_NAMES:
        return timezone.utc

    match = PATTERN_OFFSET.match(identifier)
    if match is not None:
        sign, hours, minutes = match.groups()
        return create_tzinfo(tz_string=f'{sign}{hours}:{minutes or "00"}')

    try:
        return ZoneInfo(identifier)
    except (ZoneInfoNotFoundError, ValueError):
        log.info('Unknown timezone identifier: %s', identifier)
        return None


def get_timezone_id(tz: tzinfo, value: datetime) -> str:
    key = getattr(tz, 'key', None)
    if key is not None:
        return key

    name = tz.tzname(value.astimezone(tz))
    if name is None:
        return str(tz)
    return name


def get_default_timezone() -> tzinfo:
    '''
    The timezone configured with the "timezone" setting, falls back to
    the platform's local time
    '''
    identifier = app.settings.get('timezone')
    tz = resolve_timezone(identifier)
    if tz is None:
        if identifier:
            log.warning('Unknown timezone setting "%s", '
                        'using local time', identifier)
        return LocalTimezone()
    return tz


def get_offset(tz: tzinfo, value: datetime | None = None) -> timedelta:
    '''
    UTC offset of tz at the given instant, or at the current time
    '''
    if value is None:
        value = datetime.now(timezone.utc)
    return value.astimezone(tz).utcoffset() or ZERO


def format_utc(value: datetime) -> str:
    '''
    Format value as CCYYMMDDThh:mm:ss, hh is the 12-hour clock
    without AM/PM marker
    '''
    hour = value.hour % 12 or 12
    return (f'{value.year:04d}{value.month:02d}{value.day:02d}'
            f'T{hour:02d}:{value.minute:02d}:{value.second:02d}')


def parse_utc(timestring: str) -> datetime:
    '''
    Parse a CCYYMMDDThh:mm:ss string into a naive datetime

    Hours 00 to 23 are accepted. 12 is read as 00, as on a
    12-hour clock without AM/PM marker.

    :raises ValueError: if timestring does not match
    '''
    match = PATTERN_UTC.match(timestring)
    if match is None:
        raise ValueError(f'Invalid time string: {timestring!r}')

    year, month, day, hour, minute, second = map(int, match.groups())
    if hour == 12:
        hour = 0
    return datetime(year, month, day, hour, minute, second)


def format_display(value: datetime) -> str:
    strformat = app.settings.get('display_time_format')
    return value.strftime(strformat or DEFAULT_DISPLAY_FORMAT)
