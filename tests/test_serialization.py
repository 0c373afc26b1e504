"""
Tests for JSON conversion of pipeline records
"""

import json
import unittest

from mailnorm.modules.email_data import (
    CalendarEvent,
    CalendarEventStatus,
    EmailAddressWithText,
    MicrodataItem,
    Unsubscribe,
)
from mailnorm.modules.schemaorg import Organization
from mailnorm.utils.serialization import to_jsonable


class TestToJsonable(unittest.TestCase):

    def test_keyword_suffix_stripped(self):
        from mailnorm.modules.email_assembler import parse_email
        from message_factory import encode, simple_message

        data = to_jsonable(parse_email(encode(simple_message())))
        self.assertIn("from", data)
        self.assertNotIn("from_", data)
        self.assertEqual(data["from"], {"name": "Alice", "text": "Alice <alice@example.com>", "address": "alice@example.com"})
        json.dumps(data)

    def test_enum_value(self):
        data = to_jsonable(CalendarEvent(uid="u", status=CalendarEventStatus.CANCELLED))
        self.assertEqual(data["status"], "CANCELLED")
        self.assertIsNone(data["start"])

    def test_schema_models_keep_json_ld_keys(self):
        org = Organization.model_validate({"@type": "Organization", "name": "ACME", "sameAs": "https://acme.example"})
        data = to_jsonable(org)
        self.assertEqual(data["@type"], "Organization")
        self.assertEqual(data["sameAs"], ["https://acme.example"])
        self.assertNotIn("email", data)

    def test_nested_records(self):
        item = MicrodataItem(item_type="t", properties={"a": "1"}, children={"c": MicrodataItem()})
        self.assertEqual(to_jsonable([item, Unsubscribe()]), [
            {"item_type": "t", "properties": {"a": "1"}, "children": {"c": {"item_type": None, "properties": {}, "children": {}}}},
            {"get": None, "post": None, "email": None},
        ])

    def test_scalars_unchanged(self):
        record = EmailAddressWithText(name=None, text="x", address="x@y")
        self.assertEqual(to_jsonable(record), {"name": None, "text": "x", "address": "x@y"})
        self.assertEqual(to_jsonable(5), 5)


if __name__ == '__main__':
    unittest.main()
