# This file is part of Jabbertime.
#
# SPDX-License-Identifier: GPL-3.0-only

from __future__ import annotations

from typing import Any


class StanzaMalformed(Exception):
    '''
    Malformed Stanza
    '''

    def __init__(self, text: str = '', stanza: Any = '') -> None:
        Exception.__init__(self, text, stanza)
        self.stanza = stanza
        self.text = text

    def __str__(self) -> str:
        return '%s: %s' % (self.text, self.stanza)
