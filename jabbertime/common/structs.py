# This file is part of Jabbertime.
#
# SPDX-License-Identifier: GPL-3.0-only

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from datetime import timezone
from datetime import tzinfo

from jabbertime.common.const import NS_TIME
from jabbertime.common.modules.date_and_time import format_display
from jabbertime.common.modules.date_and_time import format_utc
from jabbertime.common.modules.date_and_time import get_default_timezone
from jabbertime.common.modules.date_and_time import get_offset
from jabbertime.common.modules.date_and_time import get_timezone_id
from jabbertime.common.modules.date_and_time import parse_utc
from jabbertime.common.modules.date_and_time import resolve_timezone

log = logging.getLogger('jabbertime.c.structs')


def _to_utc_string(value: datetime, tz: tzinfo, default_tz: tzinfo) -> str:
    # Subtract the offset of tz, render the result in the default timezone
    shifted = value.astimezone(timezone.utc) - get_offset(tz, value)
    return format_utc(shifted.astimezone(default_tz))


@dataclass(slots=True)
class TimePayload:
    '''
    Payload of a jabber:iq:time query

    utc      -- time in the CCYYMMDDThh:mm:ss format
    tz       -- timezone identifier of the sender
    display  -- human readable local time of the sender

    Every field is optional, the fields are never checked
    against each other.
    '''

    utc: str | None = None
    tz: str | None = None
    display: str | None = None

    @classmethod
    def from_datetime(cls,
                      value: datetime,
                      tz: tzinfo | None = None) -> TimePayload:
        '''
        Create a payload for value as local time in tz

        tz defaults to the tzinfo of value, then to the default timezone.
        A naive value is taken as wall clock time in tz.
        '''
        if tz is None:
            tz = value.tzinfo or get_default_timezone()
        if value.tzinfo is None:
            value = value.replace(tzinfo=tz)

        default_tz = get_default_timezone()
        return cls(utc=_to_utc_string(value, tz, default_tz),
                   tz=get_timezone_id(tz, value),
                   display=format_display(value.astimezone(default_tz)))

    @classmethod
    def now(cls, tz: tzinfo | None = None) -> TimePayload:
        if tz is None:
            tz = get_default_timezone()
        return cls.from_datetime(datetime.now(timezone.utc), tz)

    def to_datetime(self) -> datetime | None:
        '''
        The local time in the default timezone, None if utc is not set
        or can not be parsed

        The offset added back is the current offset of the default
        timezone, not the offset of the timezone the payload was
        created with.
        '''
        if self.utc is None:
            return None

        default_tz = get_default_timezone()
        try:
            utc = parse_utc(self.utc).replace(tzinfo=default_tz)
            local = utc.astimezone(timezone.utc) + get_offset(default_tz)
            return local.astimezone(default_tz)
        except (ValueError, OverflowError) as error:
            log.warning('Unable to parse utc time "%s": %s', self.utc, error)
            return None

    def set_datetime(self, value: datetime) -> None:
        '''
        Set utc from a local time, tz and display are left untouched
        '''
        default_tz = get_default_timezone()
        if value.tzinfo is None:
            value = value.replace(tzinfo=default_tz)
        self.utc = _to_utc_string(value, default_tz, default_tz)

    @property
    def tzinfo(self) -> tzinfo | None:
        return resolve_timezone(self.tz)

    @property
    def is_empty(self) -> bool:
        return self.utc is None and self.tz is None and self.display is None

    def serialize(self) -> str:
        # Values are written as they are, without escaping
        xml = f'<query xmlns="{NS_TIME}">'
        if self.utc is not None:
            xml += f'<utc>{self.utc}</utc>'
        if self.tz is not None:
            xml += f'<tz>{self.tz}</tz>'
        if self.display is not None:
            xml += f'<display>{self.display}</display>'
        xml += '</query>'
        return xml

    def __str__(self) -> str:
        return self.serialize()
