# This file is part of Jabbertime.
#
# SPDX-License-Identifier: GPL-3.0-only

from __future__ import annotations

import jabbertime
from jabbertime.common.settings import Settings

version = jabbertime.__version__

settings = Settings()
