"""
Report sheet tests (mocked)
===========================

These tests verify that:
- The checksum is a pure function of (date, member, quantity).
- Rows have the expected column order and timestamp format.
- The row number is read back from the append response.
- An unparseable range still counts as a written row.

All tests use fake in-memory worksheet/spreadsheet objects – no real
Google Sheets or network calls.
"""
import hashlib
import sys
import unittest
from datetime import datetime
from pathlib import Path

PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT / 'src'))


class FakeWorksheet:
    def __init__(self, title="Sheet1", range_template="{title}!A{row}:F{row}"):
        self.title = title
        self.rows = []
        self.append_calls = []
        self.range_template = range_template

    def row_values(self, idx):
        if 1 <= idx <= len(self.rows):
            return self.rows[idx - 1]
        return []

    def update(self, range_name=None, values=None, value_input_option=None):
        if range_name.startswith("A1"):
            if self.rows:
                self.rows[0] = list(values[0])
            else:
                self.rows.append(list(values[0]))

    def append_row(self, values, value_input_option=None, insert_data_option=None, table_range=None):
        self.append_calls.append({
            "value_input_option": value_input_option,
            "insert_data_option": insert_data_option,
            "table_range": table_range,
        })
        self.rows.append(list(values))
        row = len(self.rows)
        return {
            "tableRange": f"{self.title}!A1:F{row - 1}",
            "updates": {"updatedRange": self.range_template.format(title=self.title, row=row)},
        }


class FakeSpreadsheet:
    def __init__(self, worksheet=None):
        self.sheet1 = worksheet or FakeWorksheet()


def _record(quantity="1,234"):
    from isk_import.models import ExtractedRecord
    return ExtractedRecord(date="2021-05-01 12:00:00", member="Jane Doe", quantity=quantity)


class TestChecksumAndRow(unittest.TestCase):

    def test_checksum_is_md5_of_concatenation(self):
        from isk_import.sheets.report_sheet import compute_checksum

        expected = hashlib.md5("2021-05-01 12:00:00Jane Doe1,234".encode("utf-8")).hexdigest()
        checksum = compute_checksum("2021-05-01 12:00:00", "Jane Doe", "1,234")
        self.assertEqual(checksum, expected)
        self.assertEqual(len(checksum), 32)
        self.assertEqual(checksum, checksum.lower())

    def test_checksum_pure_and_sensitive_to_quantity(self):
        from isk_import.sheets.report_sheet import compute_checksum

        a = compute_checksum("2021-05-01 12:00:00", "Jane Doe", "1,234")
        b = compute_checksum("2021-05-01 12:00:00", "Jane Doe", "1,234")
        c = compute_checksum("2021-05-01 12:00:00", "Jane Doe", "1,235")
        self.assertEqual(a, b)
        self.assertNotEqual(a, c)

    def test_format_row(self):
        from isk_import.sheets.report_sheet import compute_checksum, format_row

        row = format_row(_record(), "https://docs.google.com/document/d/doc1/edit",
                         now=datetime(2021, 5, 2, 8, 9, 10))
        self.assertEqual(row, [
            compute_checksum("2021-05-01 12:00:00", "Jane Doe", "1,234"),
            "05-02-2021 08:09:10",
            "2021-05-01 12:00:00",
            "Jane Doe",
            "1,234",
            "https://docs.google.com/document/d/doc1/edit",
        ])

    def test_parse_row_id(self):
        from isk_import.sheets.report_sheet import parse_row_id

        self.assertEqual(parse_row_id("Sheet1!A7:F7"), 7)
        self.assertEqual(parse_row_id("'ISK Import Report'!A123:F123"), 123)

    def test_parse_row_id_rejects_bad_ranges(self):
        from isk_import.errors import RowParseError
        from isk_import.sheets.report_sheet import parse_row_id

        for bad in ("", "Sheet1!A7", "Sheet1!A7:F"):
            with self.assertRaises(RowParseError):
                parse_row_id(bad)


class TestReportSheet(unittest.TestCase):

    def test_ensure_headers_on_empty_sheet(self):
        from isk_import import config
        from isk_import.sheets.report_sheet import ReportSheet

        fake = FakeSpreadsheet()
        sheet = ReportSheet.from_spreadsheet(fake)
        self.assertTrue(sheet.ensure_headers())
        self.assertEqual(fake.sheet1.rows[0], config.REPORT_COLUMNS)
        self.assertEqual(fake.sheet1.rows[0], ["ID", "Import Date", "Echoes Date", "Name", "Amount", "Link"])

    def test_ensure_headers_leaves_existing_header(self):
        from isk_import.sheets.report_sheet import ReportSheet

        ws = FakeWorksheet()
        ws.rows.append(["custom", "header"])
        sheet = ReportSheet.from_spreadsheet(FakeSpreadsheet(ws))
        self.assertFalse(sheet.ensure_headers())
        self.assertEqual(ws.rows, [["custom", "header"]])

    def test_append_recovers_row_after_header(self):
        from isk_import.sheets.report_sheet import ReportSheet, compute_checksum

        fake = FakeSpreadsheet()
        sheet = ReportSheet.from_spreadsheet(fake)
        sheet.ensure_headers()

        first = sheet.append_record(_record(), "link-1")
        second = sheet.append_record(_record("99"), "link-2")

        self.assertEqual(first.row_id, 2)
        self.assertEqual(second.row_id, 3)
        self.assertEqual(first.checksum, compute_checksum("2021-05-01 12:00:00", "Jane Doe", "1,234"))
        self.assertEqual(fake.sheet1.rows[1][5], "link-1")
        self.assertEqual(fake.sheet1.append_calls[0], {
            "value_input_option": "USER_ENTERED",
            "insert_data_option": "INSERT_ROWS",
            "table_range": "A1",
        })

    def test_unparseable_range_keeps_row(self):
        from isk_import.sheets.report_sheet import ReportSheet

        ws = FakeWorksheet(range_template="{title}")
        sheet = ReportSheet.from_spreadsheet(FakeSpreadsheet(ws))

        result = sheet.append_record(_record(), "link")
        self.assertIsNone(result.row_id)
        self.assertIn("Unable to parse row", result.parse_error)
        self.assertEqual(len(ws.rows), 1)

    def test_requires_sheet_id_without_spreadsheet(self):
        from isk_import.sheets.report_sheet import ReportSheet

        with self.assertRaises(ValueError):
            ReportSheet()


if __name__ == "__main__":
    unittest.main()
