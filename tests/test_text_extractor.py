"""
Extraction tests (exported OCR text → donation record)
======================================================

These tests operate on *text fixtures* only – no Drive export involved.
They enforce:
- The three known quantity layouts and their priority order.
- Which error is raised for each missing field.
"""
import sys
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT / 'src'))


COMMON_LAYOUT = (
    "Corp Wallet\n"
    "2021-05-01 12:00:00\n"
    "Member Donation - Screenshot (Jane Doe)\n"
    "Type\n"
    "1,234\n"
)

# What Drive actually returns: BOM and CRLF line endings
DRIVE_EXPORT = "\ufeff" + COMMON_LAYOUT.replace("\n", "\r\n")

RARE_LAYOUT = (
    "2022-11-30 23:59:01\r\n"
    "Member Donation [Kirk Starfall]\r\n"
    "Member Donation\r\n"
    "5,000,000\r\n"
    "Type\r\n"
    "12\r\n"
)

ALTERNATE_LAYOUT = (
    "2020-01-02 03:04:05\n"
    "Member Donation (Bob)\n"
    "Quantity\n"
    "250,000\n"
)


class TestExtractRecord(unittest.TestCase):

    def test_common_layout(self):
        from isk_import.text_extractor import extract_record

        record = extract_record(COMMON_LAYOUT)
        self.assertEqual(record.date, "2021-05-01 12:00:00")
        self.assertEqual(record.member, "Jane Doe")
        self.assertEqual(record.quantity, "1,234")

    def test_drive_export_with_crlf_and_bom(self):
        from isk_import.text_extractor import extract_record

        record = extract_record(DRIVE_EXPORT)
        self.assertEqual(
            (record.date, record.member, record.quantity),
            ("2021-05-01 12:00:00", "Jane Doe", "1,234"),
        )

    def test_member_in_brackets_and_member_donation_amount_wins(self):
        from isk_import.text_extractor import extract_record, match_quantity

        record = extract_record(RARE_LAYOUT)
        self.assertEqual(record.member, "Kirk Starfall")
        self.assertEqual(record.quantity, "5,000,000")
        self.assertEqual(match_quantity(RARE_LAYOUT)[0], "Member Donation")

    def test_quantity_label_layout(self):
        from isk_import.text_extractor import match_quantity

        self.assertEqual(match_quantity(ALTERNATE_LAYOUT), ("Quantity", "250,000"))

    def test_type_beats_quantity(self):
        from isk_import.text_extractor import match_quantity

        text = ALTERNATE_LAYOUT + "Type\n777\n"
        self.assertEqual(match_quantity(text), ("Type", "777"))

    def test_empty_capture_falls_through(self):
        from isk_import.text_extractor import match_quantity

        text = "Type\n\nQuantity\n42\n"
        self.assertEqual(match_quantity(text), ("Quantity", "42"))

    def test_member_is_case_insensitive(self):
        from isk_import.text_extractor import find_member

        self.assertEqual(find_member("member donation - x (Lower Case)"), "Lower Case")

    def test_idempotent(self):
        from isk_import.text_extractor import extract_record

        self.assertEqual(extract_record(DRIVE_EXPORT), extract_record(DRIVE_EXPORT))

    def test_missing_date(self):
        from isk_import.errors import DateNotFound
        from isk_import.text_extractor import extract_record

        with self.assertRaises(DateNotFound):
            extract_record(COMMON_LAYOUT.replace("2021-05-01 12:00:00", "yesterday"))

    def test_date_needs_ascii_digits(self):
        from isk_import.errors import DateNotFound
        from isk_import.text_extractor import find_date

        arabic_indic = "\u0662\u0660\u0662\u0661-\u0660\u0665-\u0660\u0661 \u0661\u0662:\u0660\u0660:\u0660\u0660"
        fullwidth = "\uff12\uff10\uff12\uff11-\uff10\uff15-\uff10\uff11 \uff11\uff12:\uff10\uff10:\uff10\uff10"
        for text in (arabic_indic, fullwidth):
            with self.assertRaises(DateNotFound):
                find_date(text)

    def test_date_checked_before_member(self):
        from isk_import.errors import DateNotFound
        from isk_import.text_extractor import extract_record

        with self.assertRaises(DateNotFound):
            extract_record("Type\n100\n")

    def test_missing_member(self):
        from isk_import.errors import UsernameNotFound
        from isk_import.text_extractor import extract_record

        text = COMMON_LAYOUT.replace("(Jane Doe)", "Jane Doe")
        with self.assertRaises(UsernameNotFound):
            extract_record(text)

    def test_missing_quantity(self):
        from isk_import.errors import ExtractionError, QuantityNotFound
        from isk_import.text_extractor import extract_record

        text = "2021-05-01 12:00:00\nMember Donation (Jane Doe)\nType\nISK\n"
        with self.assertRaises(QuantityNotFound) as ctx:
            extract_record(text)
        self.assertIsInstance(ctx.exception, ExtractionError)
        self.assertEqual(ctx.exception.field, "quantity")


if __name__ == "__main__":
    unittest.main()
