"""
Donation Text Extraction
========================

Pulls (date, member, quantity) out of the plain text that Drive produces
when a cropped screenshot is converted to a Google Doc and exported.

The OCR output is not consistent between screenshot variants, so the
quantity is searched for under three known labels, in a fixed order:

1. "Member Donation" followed by the amount (rare layout)
2. "Type" followed by the amount (common layout)
3. "Quantity" followed by the amount (alternate layout)

The first label that yields a non-empty amount wins.

This module:
- Does NOT import config or touch any external service.
- Is pure: the same text always gives the same record.
"""
from __future__ import annotations

import re
from typing import List, Pattern, Tuple

from isk_import.errors import DateNotFound, QuantityNotFound, UsernameNotFound
from isk_import.models import ExtractedRecord

# ASCII digits only; OCR can emit other Unicode digit forms
DATE_PATTERN = re.compile(r"(\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2})", re.ASCII)

# Name sits inside (...) or [...] on the "Member Donation" line
MEMBER_PATTERN = re.compile(
    r"Member Donation.*[(\[](?P<member>.*)[)\]]",
    re.IGNORECASE | re.MULTILINE,
)


def _label_pattern(label: str) -> Pattern:
    # Drive exports CRLF line endings; plain LF is accepted too
    return re.compile(
        rf"{label}\r?\n(?P<quantity>[0-9,]*)",
        re.IGNORECASE | re.MULTILINE | re.DOTALL,
    )


# Priority order matters: do not reorder
QUANTITY_PATTERNS: List[Tuple[str, Pattern]] = [
    ("Member Donation", _label_pattern("Member Donation")),
    ("Type", _label_pattern("Type")),
    ("Quantity", _label_pattern("Quantity")),
]


def find_date(text: str) -> str:
    match = DATE_PATTERN.search(text)
    if not match:
        raise DateNotFound()
    return match.group(1)


def find_member(text: str) -> str:
    match = MEMBER_PATTERN.search(text)
    if not match:
        raise UsernameNotFound()
    return match.group("member")


def match_quantity(text: str) -> Tuple[str, str]:
    """
    Return (label, quantity) for the first layout that matches.

    Raises:
        QuantityNotFound: If no label is followed by a non-empty amount.
    """
    for label, pattern in QUANTITY_PATTERNS:
        match = pattern.search(text)
        if match and match.group("quantity"):
            return label, match.group("quantity")
    raise QuantityNotFound()


def find_quantity(text: str) -> str:
    return match_quantity(text)[1]


def extract_record(text: str) -> ExtractedRecord:
    """
    Extract the donation record from exported OCR text.

    Fields are checked in order date, member, quantity; the first missing
    one decides which ExtractionError is raised.
    """
    date = find_date(text)
    member = find_member(text)
    quantity = find_quantity(text)
    return ExtractedRecord(date=date, member=member, quantity=quantity)
