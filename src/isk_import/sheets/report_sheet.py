"""
ISK Import Report – Google Sheets Integration
=============================================

Writes one row per recognised donation to the "ISK Import Report"
workbook.

Row layout (header row 1):
   - ID           md5(date + member + quantity), a display/audit key
   - Import Date  when the row was written, MM-DD-YYYY HH:MM:SS
   - Echoes Date  timestamp read from the screenshot
   - Name         member who donated
   - Amount       quantity as read (thousands separators kept)
   - Link         link to the OCR document

Guardrails:
- Appends use INSERT_ROWS + USER_ENTERED, so Sheets may turn "1,234"
  into a number.
- The ID is not checked for uniqueness; rerunning a screenshot appends
  another row.
"""
from __future__ import annotations

import hashlib
import re
from datetime import datetime
from typing import List, Optional

import gspread

from isk_import import config
from isk_import.errors import RowParseError
from isk_import.models import AppendResult, ExtractedRecord

# "Sheet1!A7:F7" -> 7
ROW_PATTERN = re.compile(r":[A-Z](\d+)$")


def _get_client():
    """Create a gspread client using the shared credential resolution."""
    return gspread.authorize(config.get_credentials())


def compute_checksum(date: str, member: str, quantity: str) -> str:
    """Lowercase hex MD5 of the concatenated fields."""
    return hashlib.md5((date + member + quantity).encode("utf-8")).hexdigest()


def format_row(record: ExtractedRecord, link: str, now: Optional[datetime] = None) -> List[str]:
    now = now or datetime.now()
    checksum = compute_checksum(record.date, record.member, record.quantity)
    return [
        checksum,
        now.strftime(config.IMPORT_DATE_FORMAT),
        record.date,
        record.member,
        record.quantity,
        link,
    ]


def parse_row_id(updated_range: str) -> int:
    """
    Recover the 1-based row number from an A1 range such as "Sheet1!A7:F7".

    Raises:
        RowParseError: If the range does not end in ":<Letter><digits>".
    """
    match = ROW_PATTERN.search(updated_range or "")
    if not match:
        raise RowParseError(updated_range)
    return int(match.group(1))


class ReportSheet:
    """
    Wrapper around the report workbook's first worksheet.

    For tests, inject a fake spreadsheet via `from_spreadsheet(spreadsheet)`,
    avoiding any real API calls.
    """

    def __init__(self, sheet_id: Optional[str] = None, spreadsheet: Optional[object] = None):
        if spreadsheet is not None:
            self.spreadsheet = spreadsheet
        else:
            if not sheet_id:
                raise ValueError("sheet_id is required without an injected spreadsheet")
            self.spreadsheet = _get_client().open_by_key(sheet_id)
        self._worksheet = None

    @classmethod
    def from_spreadsheet(cls, spreadsheet: object) -> "ReportSheet":
        """Helper for unit tests to inject a fake spreadsheet."""
        return cls(spreadsheet=spreadsheet)

    @property
    def worksheet(self):
        if self._worksheet is None:
            self._worksheet = self.spreadsheet.sheet1
        return self._worksheet

    def ensure_headers(self) -> bool:
        """Write the header row if row 1 is empty. Returns True if written."""
        if self.worksheet.row_values(1):
            return False
        self.worksheet.update(
            range_name=config.REPORT_HEADER_RANGE,
            values=[config.REPORT_COLUMNS],
            value_input_option="USER_ENTERED",
        )
        return True

    def append_record(self, record: ExtractedRecord, link: str, now: Optional[datetime] = None) -> AppendResult:
        """
        Append one donation row and read back the row number it landed on.

        A range that cannot be parsed leaves `row_id` as None: the row is
        already written, only the rename step has to be skipped. API errors
        propagate to the caller.
        """
        row = format_row(record, link, now=now)
        response = self.worksheet.append_row(
            row,
            value_input_option="USER_ENTERED",
            insert_data_option="INSERT_ROWS",
            table_range="A1",
        )
        updated_range = ((response or {}).get("updates") or {}).get("updatedRange", "")

        result = AppendResult(checksum=row[0], updated_range=updated_range)
        try:
            result.row_id = parse_row_id(updated_range)
        except RowParseError as e:
            result.parse_error = str(e)
        return result
