# This file is part of Jabbertime.
#
# SPDX-License-Identifier: GPL-3.0-only

from __future__ import annotations

from typing import Callable

import logging
import os
import sys

LogCallback = Callable[[logging.LogRecord], None]

ROOT_LOGGER = 'jabbertime'

RESET = '\033[0m'
NAME_COLOR = '\033[36m'
LEVEL_COLORS = {
    logging.DEBUG: '\033[34m',
    logging.INFO: '\033[32m',
    logging.WARNING: '\033[33m',
    logging.ERROR: '\033[31m',
    logging.CRITICAL: '\033[31;1m',
}


def parse_level(arg: str) -> int:
    '''
    A numeric level or the name of one of the logging module levels
    '''
    arg = arg.strip()
    if arg.isdigit():
        return int(arg)

    level = logging.getLevelName(arg)
    if not isinstance(level, int):
        raise ValueError(f'Invalid log level: {arg!r}')
    return level


def parse_target(arg: str) -> str:
    '''
    Logger names are relative to "jabbertime", a leading dot selects
    a logger outside of it, e.g. ".nbxmpp"
    '''
    arg = arg.strip().lower()
    if arg.startswith('.'):
        return arg[1:]
    if not arg:
        return ROOT_LOGGER
    if arg == ROOT_LOGGER or arg.startswith(f'{ROOT_LOGGER}.'):
        return arg
    return f'{ROOT_LOGGER}.{arg}'


def parse_directives(arg: str) -> dict[str, int]:
    '''
    Parse comma separated directives like "c.structs=c.settings=DEBUG"
    into a mapping of logger name to level. A bare level applies to the
    "jabbertime" logger.

    :raises ValueError: on an unknown level
    '''
    levels: dict[str, int] = {}
    for directive in arg.split(','):
        if not directive.strip():
            continue
        targets, _sep, level = directive.rpartition('=')
        value = parse_level(level)
        for target in targets.split('='):
            name = parse_target(target)
            if name:
                levels[name] = value
    return levels


class CustomStreamHandler(logging.StreamHandler):  # pyright: ignore
    '''
    Passes warnings and errors to an optional callback, e.g. to report
    unparsable time values to the user
    '''
    def __init__(self) -> None:
        super().__init__()  # pyright: ignore
        self._callback: LogCallback | None = None

    def emit(self, record: logging.LogRecord) -> None:
        super().emit(record)

        if record.levelno >= logging.WARNING and self._callback is not None:
            self._callback(record)

    def set_callback(self, func: LogCallback | None) -> None:
        self._callback = func


class FancyFormatter(logging.Formatter):
    '''
    Shortens the level name to its initial, colored on terminals
    '''
    def __init__(self,
                 fmt: str | None = None,
                 datefmt: str | None = None,
                 use_color: bool = False) -> None:
        super().__init__(fmt, datefmt)
        self._use_color = use_color

    def formatMessage(self, record: logging.LogRecord) -> str:
        # Work on a copy, other handlers get the record unchanged
        record = logging.makeLogRecord(record.__dict__)
        record.levelname = f'({record.levelname[0]})'
        if self._use_color:
            color = LEVEL_COLORS.get(record.levelno, '')
            record.levelname = f'{color}{record.levelname}{RESET}'
            record.name = f'{NAME_COLOR}{record.name}{RESET}'
        return super().formatMessage(record)


def init() -> None:
    '''
    Initialize the logging system
    '''
    use_color = os.name != 'nt' and sys.stderr.isatty()
    _custom_stream_handler.setFormatter(
        FancyFormatter('%(asctime)s %(levelname)s %(name)-30s %(message)s',
                       '%x %H:%M:%S',
                       use_color))

    for name, level in ((ROOT_LOGGER, logging.WARNING),
                        ('nbxmpp', logging.ERROR)):
        logger = logging.getLogger(name)
        logger.setLevel(level)
        if _custom_stream_handler not in logger.handlers:
            logger.addHandler(_custom_stream_handler)
        logger.propagate = False

    if os.environ.get('JABBERTIME_DEBUG'):
        set_verbose()


def set_loglevels(loglevels_string: str) -> None:
    for name, level in parse_directives(loglevels_string).items():
        logging.getLogger(name).setLevel(level)


def set_verbose() -> None:
    set_loglevels('jabbertime=DEBUG,.nbxmpp=INFO')


def get_stream_handler() -> CustomStreamHandler:
    return _custom_stream_handler


_custom_stream_handler = CustomStreamHandler()
