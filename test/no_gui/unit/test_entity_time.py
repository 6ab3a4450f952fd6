import unittest
from datetime import datetime
from datetime import timedelta
from datetime import timezone

import nbxmpp
from nbxmpp.protocol import Iq

from jabbertime.common import app
from jabbertime.common.const import NS_TIME
from jabbertime.common.exceptions import StanzaMalformed
from jabbertime.common.modules.date_and_time import create_tzinfo
from jabbertime.common.modules.date_and_time import parse_utc
from jabbertime.common.modules.entity_time import EntityTime
from jabbertime.common.modules.entity_time import build_time_request
from jabbertime.common.modules.entity_time import parse_time_query
from jabbertime.common.settings import Settings
from jabbertime.common.structs import TimePayload


RESULT = '''
<iq type='result'
    from='juliet@capulet.com/balcony'
    to='romeo@montague.net/orchard'
    id='time_1'>
  <query xmlns='jabber:iq:time'>
    <utc>20020910T17:58:35</utc>
    <tz>MDT</tz>
    <display>Tue Sep 10 12:58:35 2002</display>
  </query>
</iq>
'''


class TestParseTimeQuery(unittest.TestCase):

    def test_parse_iq(self):
        payload = parse_time_query(nbxmpp.Node(node=RESULT))
        self.assertEqual(payload, TimePayload(utc='20020910T17:58:35',
                                              tz='MDT',
                                              display='Tue Sep 10 12:58:35 2002'))

    def test_parse_query(self):
        xml = ('<query xmlns="jabber:iq:time">'
               '<utc>20240115T08:30:00</utc>'
               '</query>')
        payload = parse_time_query(nbxmpp.Node(node=xml))
        self.assertEqual(payload.utc, '20240115T08:30:00')
        self.assertIsNone(payload.tz)
        self.assertIsNone(payload.display)
        self.assertEqual(payload.serialize(), xml)

    def test_parse_empty_query(self):
        payload = parse_time_query(
            nbxmpp.Node(node='<query xmlns="jabber:iq:time"/>'))
        self.assertTrue(payload.is_empty)

    def test_parse_empty_element(self):
        payload = parse_time_query(
            nbxmpp.Node(node='<query xmlns="jabber:iq:time"><tz/></query>'))
        self.assertEqual(payload.tz, '')
        self.assertIsNone(payload.utc)

    def test_unknown_elements_are_ignored(self):
        xml = ('<query xmlns="jabber:iq:time">'
               '<tzo>+02:00</tzo>'
               '<display>noon</display>'
               '</query>')
        payload = parse_time_query(nbxmpp.Node(node=xml))
        self.assertEqual(payload, TimePayload(display='noon'))

    def test_missing_query(self):
        with self.assertRaises(StanzaMalformed):
            parse_time_query(nbxmpp.Node(node="<iq type='result'/>"))

    def test_wrong_namespace(self):
        xml = ("<iq type='result'>"
               "<query xmlns='jabber:iq:version'><name>x</name></query>"
               "</iq>")
        with self.assertRaises(StanzaMalformed):
            parse_time_query(nbxmpp.Node(node=xml))

        xml = "<query xmlns='jabber:iq:version'/>"
        with self.assertRaises(StanzaMalformed):
            parse_time_query(nbxmpp.Node(node=xml))


class TestEntityTime(unittest.TestCase):

    def setUp(self):
        self.addCleanup(setattr, app, 'settings', app.settings)
        app.settings = Settings()
        app.settings.set('timezone', 'UTC+02:00')
        app.settings.add_account('test')
        self.module = EntityTime('test')

    def _request(self):
        request = build_time_request('juliet@capulet.com/balcony')
        request.setFrom('romeo@montague.net/orchard')
        request.setID('time_1')
        return request

    def test_build_time_request(self):
        request = build_time_request('juliet@capulet.com/balcony')
        self.assertEqual(request.getType(), 'get')
        self.assertEqual(request.getQueryNS(), NS_TIME)
        self.assertEqual(str(request.getTo()), 'juliet@capulet.com/balcony')
        self.assertEqual(request.getQuery().getChildren(), [])

    def test_request_entity_time(self):
        request = self.module.request_entity_time('juliet@capulet.com')
        self.assertEqual(request.getType(), 'get')
        self.assertEqual(request.getQueryNS(), NS_TIME)

    def test_answer_request(self):
        reply = self.module.answer_request(self._request())
        self.assertEqual(reply.getType(), 'result')
        self.assertEqual(reply.getID(), 'time_1')
        self.assertEqual(str(reply.getTo()), 'romeo@montague.net/orchard')
        self.assertEqual(str(reply.getFrom()), 'juliet@capulet.com/balcony')

        payload = parse_time_query(reply)
        self.assertEqual(payload.tz, 'UTC+02:00')
        self.assertIsNotNone(payload.display)
        parse_utc(payload.utc)

    def test_answer_request_not_allowed(self):
        app.settings.set_account_setting('test', 'send_time_info', False)
        reply = self.module.answer_request(self._request())
        self.assertEqual(reply.getType(), 'error')
        self.assertEqual(reply.getID(), 'time_1')
        error = reply.getTag('error')
        self.assertIsNotNone(error.getTag('service-unavailable'))

    def test_answer_request_disabled(self):
        self.module.set_enabled(False)
        self.assertFalse(self.module.enabled)
        reply = self.module.answer_request(self._request())
        self.assertEqual(reply.getType(), 'error')

        self.module.set_enabled(True)
        reply = self.module.answer_request(self._request())
        self.assertEqual(reply.getType(), 'result')

    def test_answer_request_escapes_values(self):
        app.settings.set('display_time_format', '%H:%M & <%d>')
        reply = self.module.answer_request(self._request())
        self.assertEqual(reply.getType(), 'result')

        payload = parse_time_query(reply)
        self.assertTrue(payload.display.endswith('>'))
        self.assertIn(' & <', payload.display)
        self.assertIn('&amp; &lt;', str(reply))

        payload = parse_time_query(nbxmpp.Node(node=str(reply)))
        self.assertIn(' & <', payload.display)

    def test_send_time_info_signal(self):
        app.settings.set_account_setting('test', 'send_time_info', False)
        self.assertEqual(self.module.answer_request(self._request()).getType(),
                         'error')

        app.settings.set_account_setting('test', 'send_time_info', None)
        self.assertEqual(self.module.answer_request(self._request()).getType(),
                         'result')

    def test_cleanup(self):
        self.module.cleanup()
        app.settings.set_account_setting('test', 'send_time_info', False)
        self.assertEqual(self.module.answer_request(self._request()).getType(),
                         'result')

    def test_process_result(self):
        reply = self.module.answer_request(self._request())
        payload = self.module.process_result(reply)
        self.assertEqual(payload.tz, 'UTC+02:00')

        delta = abs(payload.to_datetime() - datetime.now(timezone.utc))
        delta = min(delta, abs(delta - timedelta(hours=12)))
        self.assertLess(delta, timedelta(seconds=2))

    def test_process_result_from_wire(self):
        stanza = Iq(node=nbxmpp.Node(node=RESULT))
        payload = self.module.process_result(stanza)
        self.assertEqual(payload.tz, 'MDT')
        self.assertEqual(payload.to_datetime(),
                         datetime(2002, 9, 10, 19, 58, 35,
                                  tzinfo=create_tzinfo(hours=2)))

    def test_process_error(self):
        app.settings.set_account_setting('test', 'send_time_info', False)
        reply = self.module.answer_request(self._request())
        self.assertIsNone(self.module.process_result(reply))

    def test_process_malformed(self):
        stanza = Iq(typ='result')
        with self.assertLogs('jabbertime.c.m.entitytime', level='WARNING'):
            self.assertIsNone(self.module.process_result(stanza))


if __name__ == '__main__':
    unittest.main()
