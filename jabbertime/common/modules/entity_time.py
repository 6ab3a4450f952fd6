# This file is part of Jabbertime.
#
# SPDX-License-Identifier: GPL-3.0-only

# XEP-0090: Legacy Entity Time

from __future__ import annotations

import logging

from nbxmpp.protocol import ERR_SERVICE_UNAVAILABLE
from nbxmpp.protocol import ErrorNode
from nbxmpp.protocol import Iq
from nbxmpp.protocol import JID
from nbxmpp.protocol import isErrorNode
from nbxmpp.simplexml import Node

from jabbertime.common import app
from jabbertime.common.const import NS_TIME
from jabbertime.common.const import TIME_FIELDS
from jabbertime.common.exceptions import StanzaMalformed
from jabbertime.common.modules.util import LogAdapter
from jabbertime.common.structs import TimePayload


def build_time_request(jid: JID | str) -> Iq:
    return Iq(typ='get', queryNS=NS_TIME, to=jid)


def parse_time_query(node: Node) -> TimePayload:
    '''
    Read a TimePayload from a jabber:iq:time query

    node may be the <query/> element itself or a stanza containing it.
    Unknown child elements are ignored.
    '''
    if node.getName() == 'query' and node.getNamespace() == NS_TIME:
        query = node
    else:
        query = node.getTag('query', namespace=NS_TIME)

    if query is None:
        raise StanzaMalformed('No time query', node)

    payload = TimePayload()
    for child in query.getChildren():
        name = child.getName()
        if name in TIME_FIELDS:
            setattr(payload, name, child.getData())
    return payload


class EntityTime:
    def __init__(self, account: str) -> None:
        self._account = account
        self._log = LogAdapter(logging.getLogger('jabbertime.c.m.entitytime'),
                               {'account': account})
        self._enabled = True
        self._send_time_info = bool(app.settings.get_account_setting(
            account, 'send_time_info'))

        app.settings.connect_signal('send_time_info',
                                    self._on_send_time_info_changed,
                                    account=account)

    @property
    def enabled(self) -> bool:
        return self._enabled

    def set_enabled(self, enabled: bool) -> None:
        self._enabled = enabled

    def _on_send_time_info_changed(self,
                                   value: bool,
                                   _setting: str,
                                   _account: str | None) -> None:
        self._log.info('Send time info: %s', value)
        self._send_time_info = value

    def request_entity_time(self, jid: JID | str) -> Iq:
        self._log.info('Request time from %s', jid)
        return build_time_request(jid)

    def answer_request(self, stanza: Iq) -> Iq:
        self._log.info('Time request from %s', stanza.getFrom())
        if not self._allow_reply():
            self._log.info('Sending service-unavailable')
            reply = stanza.buildReply('error')
            reply.addChild(node=ErrorNode(ERR_SERVICE_UNAVAILABLE))
            return reply

        payload = TimePayload.now()
        reply = Iq(typ='result',
                   queryNS=NS_TIME,
                   to=stanza.getFrom(),
                   frm=stanza.getTo(),
                   attrs={'id': stanza.getID()})

        query = reply.getQuery()
        for name in TIME_FIELDS:
            value = getattr(payload, name)
            if value is not None:
                query.setTagData(name, value)

        self._log.debug('Sending time: %s', payload)
        return reply

    def process_result(self, stanza: Iq) -> TimePayload | None:
        if isErrorNode(stanza):
            self._log.info('Time request to %s failed: %s',
                           stanza.getFrom(), stanza.getErrorMsg())
            return None

        try:
            payload = parse_time_query(stanza)
        except StanzaMalformed as error:
            self._log.warning(error)
            return None

        self._log.info('Received time from %s: %s',
                       stanza.getFrom(), payload.utc)
        return payload

    def _allow_reply(self) -> bool:
        return self._enabled and self._send_time_info

    def cleanup(self) -> None:
        app.settings.disconnect_signals(self)
