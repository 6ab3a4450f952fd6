# This file is part of Jabbertime.
#
# SPDX-License-Identifier: GPL-3.0-only

from __future__ import annotations

# XEP-0090: Legacy Entity Time
NS_TIME = 'jabber:iq:time'

DEFAULT_DISPLAY_FORMAT = '%c'

TIME_FIELDS = ('utc', 'tz', 'display')
