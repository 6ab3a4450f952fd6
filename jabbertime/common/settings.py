# This file is part of Jabbertime.
#
# SPDX-License-Identifier: GPL-3.0-only

from __future__ import annotations

from typing import Any
from typing import Callable

import inspect
import logging
import weakref
from collections import defaultdict

from jabbertime.common.setting_values import ACCOUNT_SETTINGS
from jabbertime.common.setting_values import APP_SETTINGS
from jabbertime.common.setting_values import BoolAccountSettings
from jabbertime.common.setting_values import SETTING_TYPE
from jabbertime.common.setting_values import StringSettings

log = logging.getLogger('jabbertime.c.settings')

SignalKey = tuple[str, str | None]


class Settings:
    '''
    In-memory store for app and per account settings
    '''

    def __init__(self) -> None:
        self._settings: dict[str, SETTING_TYPE] = {}
        self._account_settings: dict[str, dict[str, SETTING_TYPE]] = {}

        self._callbacks: dict[SignalKey, list[Any]] = defaultdict(list)

    def connect_signal(self,
                       setting: str,
                       func: Callable[..., Any],
                       account: str | None = None) -> None:

        if not inspect.ismethod(func):
            # static methods are not bound to an object so we can’t easily
            # remove the func once it should not be called anymore
            raise ValueError('Only bound methods can be connected')

        self._callbacks[(setting, account)].append(weakref.WeakMethod(func))

    def disconnect_signals(self, object_: Any) -> None:
        for _, handlers in self._callbacks.items():
            for handler in list(handlers):
                func = handler()
                if func is None or func.__self__ is object_:
                    handlers.remove(handler)

    def _notify(self,
                value: SETTING_TYPE,
                setting: str,
                account: str | None = None) -> None:

        log.info('Signal: %s changed', setting)

        callbacks = self._callbacks[(setting, account)]
        for handler in list(callbacks):
            func = handler()
            if func is None:
                callbacks.remove(handler)
                continue

            try:
                func(value, setting, account)
            except Exception:
                log.exception('Error while executing signal callback')

    def get_app_setting(self, setting: StringSettings) -> SETTING_TYPE:
        if setting not in APP_SETTINGS:
            raise ValueError(f'Invalid app setting: {setting}')

        try:
            return self._settings[setting]
        except KeyError:
            return APP_SETTINGS[setting]

    get = get_app_setting

    def set_app_setting(self,
                        setting: StringSettings,
                        value: SETTING_TYPE | None) -> None:

        if setting not in APP_SETTINGS:
            raise ValueError(f'Invalid app setting: {setting}')

        default = APP_SETTINGS[setting]
        if not isinstance(value, type(default)) and value is not None:
            raise TypeError(f'Invalid type for {setting}: '
                            f'{value} {type(value)}')

        if value is None:
            self._settings.pop(setting, None)
            self._notify(default, setting)
            return

        self._settings[setting] = value
        self._notify(value, setting)

    set = set_app_setting

    def add_account(self, account: str) -> None:
        if account in self._account_settings:
            raise ValueError(f'Account {account} exists already')
        log.info('Add account: %s', account)
        self._account_settings[account] = {}

    def remove_account(self, account: str) -> None:
        if account not in self._account_settings:
            raise ValueError(f'Unknown account: {account}')
        log.info('Remove account: %s', account)
        del self._account_settings[account]

    def get_accounts(self) -> list[str]:
        return list(self._account_settings.keys())

    def get_account_setting(self,
                            account: str,
                            setting: BoolAccountSettings) -> SETTING_TYPE:

        if account not in self._account_settings:
            raise ValueError(f'Account missing: {account}')

        if setting not in ACCOUNT_SETTINGS:
            raise ValueError(f'Invalid account setting: {setting}')

        try:
            return self._account_settings[account][setting]
        except KeyError:
            return ACCOUNT_SETTINGS[setting]

    def set_account_setting(self,
                            account: str,
                            setting: BoolAccountSettings,
                            value: SETTING_TYPE | None) -> None:

        if account not in self._account_settings:
            raise ValueError(f'Account missing: {account}')

        if setting not in ACCOUNT_SETTINGS:
            raise ValueError(f'Invalid account setting: {setting}')

        default = ACCOUNT_SETTINGS[setting]
        if not isinstance(value, type(default)) and value is not None:
            raise TypeError(f'Invalid type for {setting}: '
                            f'{value} {type(value)}')

        if value is None:
            self._account_settings[account].pop(setting, None)
            self._notify(default, setting, account)
            return

        self._account_settings[account][setting] = value
        self._notify(value, setting, account)
