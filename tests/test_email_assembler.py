"""
End-to-end tests for message normalization
"""

import unittest

from mailnorm.modules.email_assembler import EmailAssembler, parse_email
from mailnorm.modules.email_data import CalendarEventStatus, EmailAddress, Header
from mailnorm.modules.errors import (
    Base64DecodeFailed,
    EmptyInput,
    NoFromHeader,
    NoToHeader,
    NonUtfInput,
)
from mailnorm.utils.config import ParserConfig
from mailnorm.utils.serialization import to_jsonable

from message_factory import encode, encode_urlsafe, full_message, simple_message


class TestParseEmail(unittest.TestCase):
    """Test cases for a fully featured message"""

    @classmethod
    def setUpClass(cls):
        cls.email = parse_email(encode_urlsafe(full_message()))

    def test_addresses(self):
        email = self.email
        self.assertEqual(email.from_.name, "Alice Example")
        self.assertEqual(email.from_.address, "alice@example.com")
        self.assertEqual(email.from_.text, "Alice Example <alice@example.com>")
        self.assertEqual(email.from_addresses, [EmailAddress(name="Alice Example", address="alice@example.com")])

        self.assertEqual(email.to.address, "bob@example.com")
        self.assertEqual(email.to_addresses, [
            EmailAddress(name="Bob", address="bob@example.com"),
            EmailAddress(name=None, address="carol@example.com"),
        ])
        self.assertEqual(email.cc_addresses, [EmailAddress(name="Dave", address="dave@example.com")])
        self.assertEqual(email.bcc_addresses, [])

    def test_metadata(self):
        email = self.email
        self.assertEqual(email.subject, "Re: Fwd: Trip plans")
        self.assertEqual(email.thread_name, "Trip plans")
        self.assertEqual(email.date, 1717236000)
        self.assertEqual(email.message_id, "msg-1@example.com")
        self.assertEqual(email.mime_version, "1.0")
        self.assertIsNone(email.content_id)

    def test_headers_in_order(self):
        names = [header.name for header in self.email.headers]
        self.assertEqual(names[:4], ["From", "To", "Cc", "Subject"])
        self.assertIn(Header(name="MIME-Version", value="1.0"), self.email.headers)

    def test_text_body_visible_part(self):
        self.assertEqual(len(self.email.text_bodies), 1)
        body = self.email.text_bodies[0]
        self.assertTrue(body.text.startswith("Sounds good & see you there!"))
        self.assertIn("Are we on?", body.text)
        self.assertEqual(body.visible, "Sounds good & see you there!")

    def test_html_body_visible_part(self):
        self.assertEqual(len(self.email.html_bodies), 1)
        body = self.email.html_bodies[0]
        self.assertIn("quoted", body.text)
        self.assertIn("Sounds good!", body.visible)
        self.assertNotIn("quoted", body.visible)
        self.assertNotIn("gmail_quote_container", body.visible)

    def test_structured_markup(self):
        self.assertEqual(
            self.email.markups,
            ['{"@context":"https://schema.org","@type":"Organization","name":"Example Air"}'],
        )
        self.assertEqual([org.name for org in self.email.organizations], ["Example Air"])
        self.assertEqual(self.email.flight_reservations, [])
        self.assertEqual(self.email.event_reservations, [])

    def test_microdata(self):
        self.assertEqual(len(self.email.microdata), 1)
        item = self.email.microdata[0]
        self.assertEqual(item.item_type, "https://schema.org/Event")
        self.assertEqual(item.properties, {"name": "Trip"})

    def test_calendar_events(self):
        self.assertEqual(len(self.email.calendar_events), 1)
        event = self.email.calendar_events[0]
        self.assertEqual(event.uid, "evt-1@example.com")
        self.assertEqual(event.status, CalendarEventStatus.CONFIRMED)
        self.assertEqual(event.start, 1717228800000)

    def test_unsubscribe(self):
        unsubscribe = self.email.unsubscribe
        self.assertEqual(unsubscribe.get, "https://news.example.com/unsub?u=1")
        self.assertIsNone(unsubscribe.post)
        self.assertEqual(unsubscribe.email.email, "unsub@example.com")
        self.assertEqual(unsubscribe.email.headers, [Header(name="subject", value="unsubscribe")])

    def test_standard_alphabet_accepted(self):
        self.assertEqual(parse_email(encode(full_message())), self.email)


class TestParseEmailFailures(unittest.TestCase):
    """Test cases for fatal decode errors"""

    def test_transport_errors(self):
        with self.assertRaises(EmptyInput):
            parse_email("")
        with self.assertRaises(Base64DecodeFailed):
            parse_email("not*base64")
        with self.assertRaises(NonUtfInput):
            parse_email("_w==")

    def test_missing_from(self):
        with self.assertRaises(NoFromHeader):
            parse_email(encode(simple_message(from_header=None)))

    def test_empty_from(self):
        with self.assertRaises(NoFromHeader):
            parse_email(encode(simple_message(from_header="")))

    def test_missing_to(self):
        with self.assertRaises(NoToHeader):
            parse_email(encode(simple_message(to_header=None)))

    def test_undisclosed_recipients(self):
        with self.assertRaises(NoToHeader):
            parse_email(encode(simple_message(to_header="undisclosed-recipients:;")))

    def test_plain_text_is_not_an_email(self):
        with self.assertRaises(NoFromHeader):
            parse_email(encode("hello world"))

    def test_from_checked_before_to(self):
        with self.assertRaises(NoFromHeader):
            parse_email(encode(simple_message(from_header=None, to_header=None)))


class TestMinimalMessage(unittest.TestCase):

    def test_optional_fields_empty(self):
        email = parse_email(encode(simple_message()))
        self.assertEqual(email.cc_addresses, [])
        self.assertEqual(email.markups, [])
        self.assertEqual(email.calendar_events, [])
        self.assertEqual(email.microdata, [])
        self.assertIsNone(email.date)
        self.assertIsNone(email.unsubscribe.get)
        self.assertIsNone(email.unsubscribe.post)
        self.assertIsNone(email.unsubscribe.email)
        self.assertEqual(email.text_bodies[0].text, "Hello")
        self.assertIsNone(email.text_bodies[0].visible)

    def test_one_click_unsubscribe(self):
        email = parse_email(encode(simple_message(extra_headers=[
            "List-Unsubscribe: <https://x.example/u>",
            "List-Unsubscribe-Post: List-Unsubscribe=One-Click",
        ])))
        self.assertIsNone(email.unsubscribe.get)
        self.assertEqual(email.unsubscribe.post.url, "https://x.example/u")
        self.assertEqual(email.unsubscribe.post.body, "List-Unsubscribe=One-Click")


class TestParallelAssembly(unittest.TestCase):

    def test_thread_pool_matches_serial(self):
        raw = encode(full_message())
        serial = EmailAssembler(ParserConfig(max_workers=1)).parse_email(raw)
        threaded = EmailAssembler(ParserConfig(max_workers=4)).parse_email(raw)
        self.assertEqual(to_jsonable(threaded), to_jsonable(serial))


if __name__ == '__main__':
    unittest.main()
