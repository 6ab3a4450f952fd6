#!/usr/bin/env python3

from __future__ import annotations

import sys

if sys.version_info < (3, 10):
    sys.exit('Jabbertime needs Python 3.10+')

import re
from pathlib import Path

from setuptools import find_packages
from setuptools import setup


REPO_DIR = Path(__file__).resolve().parent


def get_version() -> str:
    init_file = REPO_DIR / 'jabbertime' / '__init__.py'
    match = re.search(r"^__version__ = '([^']+)'",
                      init_file.read_text(encoding='utf8'),
                      re.MULTILINE)
    if match is None:
        raise ValueError('No version found in %s' % init_file)
    return match.group(1)


setup(
    name='jabbertime',
    version=get_version(),
    description='Legacy XMPP entity time (jabber:iq:time) payloads',
    license='GPL-3.0-only',
    python_requires='>=3.10',
    packages=find_packages(include=['jabbertime', 'jabbertime.*']),
    install_requires=[
        'nbxmpp>=4.0',
    ],
    entry_points={
        'console_scripts': [
            'jabbertime-query = jabbertime.jabbertime_query:main',
        ],
    },
)
