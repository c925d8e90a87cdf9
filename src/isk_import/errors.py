"""
Error types for the ISK import pipeline.

Extraction errors are expected (OCR output varies between screenshot
layouts) and route the file to the Failed folder. Everything else fails
the one file it happened on.
"""


class IskImportError(Exception):
    """Base class for all pipeline errors."""


class ConfigurationError(IskImportError):
    """Required configuration (root folder, credentials) is missing."""


class ImageDecodeError(IskImportError):
    """The uploaded screenshot could not be decoded or cropped."""


class ExtractionError(IskImportError):
    """OCR text did not contain one of the required fields."""

    field = ''


class DateNotFound(ExtractionError):
    field = 'date'

    def __init__(self, message='Date Not Found'):
        super().__init__(message)


class UsernameNotFound(ExtractionError):
    field = 'member'

    def __init__(self, message='Username Not Found'):
        super().__init__(message)


class QuantityNotFound(ExtractionError):
    field = 'quantity'

    def __init__(self, message='Quantity Not Found'):
        super().__init__(message)


class RowParseError(IskImportError):
    """
    The row was appended but its number could not be read back from the
    updated range, so the files cannot be renamed after it.
    """

    def __init__(self, updated_range):
        self.updated_range = updated_range
        super().__init__(f"Unable to parse row which was imported: {updated_range!r}")
