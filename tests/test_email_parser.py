"""
Unit tests for the MIME adapter (mailnorm.modules.email_parser)
"""

import base64
import unittest
from unittest.mock import patch

from mailnorm.modules.email_parser import EmailParser
from mailnorm.modules.errors import EmailParseFailed
from mailnorm.utils.config import ParserConfig

from message_factory import CALENDAR, full_message, simple_message


class TestHeaders(unittest.TestCase):

    def setUp(self):
        self.parser = EmailParser()

    def test_raw_header_keeps_original_text(self):
        message = self.parser.parse(simple_message(from_header='"Doe, Jane" <jane@example.com>'))
        self.assertEqual(message.header_raw("From"), '"Doe, Jane" <jane@example.com>')

    def test_raw_header_lookup_is_case_insensitive(self):
        message = self.parser.parse(simple_message())
        self.assertEqual(message.header_raw("from"), "Alice <alice@example.com>")
        self.assertIsNone(message.header_raw("Reply-To"))

    def test_duplicate_headers_preserved_in_order(self):
        message = self.parser.parse(simple_message(extra_headers=[
            "Received: from a.example.com",
            "X-Tag: one",
            "Received: from b.example.com",
        ]))
        names = [name for name, _ in message.headers_raw()]
        self.assertEqual(names, ["From", "To", "Subject", "Received", "X-Tag", "Received"])
        received = [value for name, value in message.headers_raw() if name == "Received"]
        self.assertEqual(received, ["from a.example.com", "from b.example.com"])

    def test_addresses_for_role(self):
        message = self.parser.parse(simple_message(to_header="Bob <bob@example.com>, carol@example.com"))
        self.assertEqual(
            message.addresses("to"),
            [("Bob", "bob@example.com"), ("", "carol@example.com")],
        )
        self.assertIsNone(message.addresses("cc"))

    def test_group_addresses_are_flattened(self):
        message = self.parser.parse(simple_message(to_header="Team: a@example.com, b@example.com;"))
        self.assertEqual(
            [address for _, address in message.addresses("to")],
            ["a@example.com", "b@example.com"],
        )


class TestMetadata(unittest.TestCase):

    def setUp(self):
        self.message = EmailParser().parse(full_message())

    def test_scalar_metadata(self):
        self.assertEqual(self.message.subject, "Re: Fwd: Trip plans")
        self.assertEqual(self.message.message_id, "msg-1@example.com")
        self.assertEqual(self.message.mime_version, "1.0")
        self.assertIsNone(self.message.content_id)

    def test_identifiers_are_bare(self):
        message = EmailParser().parse(simple_message(extra_headers=[
            "Message-ID: <abc@x>",
            "Content-ID:  <part1@x> ",
        ]))
        self.assertEqual(message.message_id, "abc@x")
        self.assertEqual(message.content_id, "part1@x")

    def test_identifier_without_brackets_unchanged(self):
        message = EmailParser().parse(simple_message(extra_headers=["Message-ID: abc@x"]))
        self.assertEqual(message.message_id, "abc@x")

    def test_thread_name_strips_reply_prefixes(self):
        self.assertEqual(self.message.thread_name, "Trip plans")

    def test_date_as_epoch_seconds(self):
        self.assertEqual(self.message.date, 1717236000)

    def test_missing_or_invalid_date(self):
        parser = EmailParser()
        self.assertIsNone(parser.parse(simple_message()).date)
        invalid = parser.parse(simple_message(extra_headers=["Date: not a date"]))
        self.assertIsNone(invalid.date)


class TestContent(unittest.TestCase):

    def test_bodies_and_attachments_are_sorted(self):
        message = EmailParser().parse(full_message())
        self.assertEqual(len(message.text_bodies()), 1)
        self.assertEqual(len(message.html_bodies()), 1)
        self.assertIn("Sounds good &amp; see you there!", message.text_bodies()[0])

        attachments = message.attachments()
        self.assertEqual(len(attachments), 1)
        self.assertEqual(attachments[0].content_type, "text/calendar")
        self.assertEqual(attachments[0].filename, "invite.ics")
        self.assertIn("BEGIN:VEVENT", attachments[0].content)

    def test_base64_attachment_is_decoded(self):
        encoded = base64.b64encode(CALENDAR.encode()).decode()
        raw = "\n".join([
            "From: a@example.com",
            "To: b@example.com",
            'Content-Type: multipart/mixed; boundary="b"',
            "",
            "--b",
            "Content-Type: text/plain",
            "",
            "body",
            "--b",
            "Content-Type: text/calendar",
            "Content-Transfer-Encoding: base64",
            "",
            encoded,
            "--b--",
            "",
        ])
        attachment = EmailParser().parse(raw).attachments()[0]
        self.assertIn("UID:evt-1@example.com", attachment.content)

    def test_html_marked_as_attachment_is_not_a_body(self):
        raw = "\n".join([
            "From: a@example.com",
            "To: b@example.com",
            'Content-Type: multipart/mixed; boundary="b"',
            "",
            "--b",
            "Content-Type: text/html",
            'Content-Disposition: attachment; filename="page.html"',
            "",
            "<p>attached</p>",
            "--b--",
            "",
        ])
        message = EmailParser().parse(raw)
        self.assertEqual(message.html_bodies(), [])
        self.assertEqual(message.attachments()[0].content_type, "text/html")

    def test_mime_part_limit(self):
        parts = []
        for i in range(10):
            parts.extend(["--b", "Content-Type: text/plain", "", f"Part {i}"])
        raw = "\n".join(
            ["From: a@example.com", "To: b@example.com", 'Content-Type: multipart/mixed; boundary="b"', ""]
            + parts + ["--b--", ""]
        )
        # The container counts as the first part
        message = EmailParser(ParserConfig(max_mime_parts=4)).parse(raw)
        bodies = message.text_bodies()
        self.assertEqual(len(bodies), 3)
        self.assertIn("Part 2", bodies[-1])

    def test_body_size_limit(self):
        message = EmailParser(ParserConfig(max_body_size=5)).parse(simple_message(body="Hello world"))
        self.assertEqual(message.text_bodies(), ["Hello"])


class TestParseFailure(unittest.TestCase):

    def test_parser_exception_becomes_email_parse_failed(self):
        with patch("mailnorm.modules.email_parser.email.message_from_string", side_effect=TypeError("boom")):
            with self.assertRaises(EmailParseFailed):
                EmailParser().parse("From: a@example.com\n\nhi")


if __name__ == '__main__':
    unittest.main()
