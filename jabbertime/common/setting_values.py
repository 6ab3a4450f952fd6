# This file is part of Jabbertime.
#
# SPDX-License-Identifier: GPL-3.0-only

from __future__ import annotations

from typing import Literal
from typing import Union

BoolAccountSettings = Literal[
    'send_time_info',
]

StringSettings = Literal[
    'display_time_format',
    'timezone',
]

SETTING_TYPE = Union[bool, int, str]


APP_SETTINGS: dict[str, SETTING_TYPE] = {
    # Empty means platform local time
    'timezone': '',
    # Empty means the locale default ('%c')
    'display_time_format': '',
}

ACCOUNT_SETTINGS: dict[str, SETTING_TYPE] = {
    'send_time_info': True,
}
