"""Errors raised by the workbook extractor, the XML serializer and sessions.

Each error carries a short ``title`` and a human-readable ``detail`` so the
host can report it as a single notification.
"""


class ConversionError(Exception):
    title = "Conversion Error"

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class UnsupportedFormat(ConversionError):
    title = "Invalid File Type"


class ParseError(ConversionError):
    title = "Error Reading File"


class EmptySelection(ConversionError):
    title = "No Sheets Selected"


class UnknownSheet(ConversionError):
    title = "Unknown Sheet"


class SessionNotFound(ConversionError):
    title = "Session Not Found"
