#!/usr/bin/env python3

# This file is part of Jabbertime.
#
# SPDX-License-Identifier: GPL-3.0-only

from __future__ import annotations

import argparse
import logging
import sys

from nbxmpp.simplexml import Node

from jabbertime.common import app
from jabbertime.common import logging_helpers
from jabbertime.common.modules.date_and_time import resolve_timezone
from jabbertime.common.modules.entity_time import parse_time_query
from jabbertime.common.structs import TimePayload

log = logging.getLogger('jabbertime.query')


def call_command(args: argparse.Namespace) -> str:
    if args.command == 'now':
        tz = None
        if args.tz is not None:
            tz = resolve_timezone(args.tz)
            if tz is None:
                raise ValueError(f'Unknown timezone: {args.tz}')
        return TimePayload.now(tz).serialize()

    payload = parse_time_query(Node(node=args.xml))
    lines = [
        f'utc: {payload.utc}',
        f'tz: {payload.tz}',
        f'display: {payload.display}',
        f'local: {payload.to_datetime()}',
    ]
    return '\n'.join(lines)


def create_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='jabbertime-query',
        description='Create and read jabber:iq:time payloads')
    parser.add_argument('--version', action='version', version=app.version)
    parser.add_argument('--loglevel', type=str, default='',
                        help='Log level directives, e.g. "c.structs=DEBUG"')
    parser.add_argument('--strict', action='store_true',
                        help='Exit with 1 if warnings were logged, '
                             'e.g. for an unparsable utc value')

    subparsers = parser.add_subparsers(dest='command', required=True)

    subparser = subparsers.add_parser(
        'now',
        help='Print the payload for the current time')
    subparser.add_argument('--tz', type=str, default=None,
                           help='Timezone identifier, defaults to local time')

    subparser = subparsers.add_parser(
        'parse',
        help='Print the fields of a time query or IQ')
    subparser.add_argument('xml', type=str)

    return parser


def main(argv: list[str] | None = None) -> int:
    logging_helpers.init()
    args = create_arg_parser().parse_args(argv)

    warnings: list[logging.LogRecord] = []
    handler = logging_helpers.get_stream_handler()
    handler.set_callback(warnings.append)
    try:
        if args.loglevel:
            logging_helpers.set_loglevels(args.loglevel)
        result = call_command(args)
    except Exception:
        log.exception('Failed to execute command')
        return 1
    finally:
        handler.set_callback(None)

    print(result)
    if args.strict and warnings:
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
