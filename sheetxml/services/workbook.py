"""Workbook extraction.

Turns uploaded spreadsheet bytes into an ordered list of :class:`Sheet`
objects whose cells are all strings. Decoding is delegated to pandas, which
uses openpyxl for ``.xlsx`` and xlrd for ``.xls`` workbooks.
"""
from datetime import date, datetime, time
from io import BytesIO, StringIO
from pathlib import Path
from typing import List, Optional
import csv
import logging

import pandas as pd

from ..config import config
from ..errors import ParseError, UnsupportedFormat
from ..models.schemas import Sheet

log = logging.getLogger(__name__)

ZIP_MAGIC = b"PK\x03\x04"
OLE2_MAGIC = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1"

EXCEL_ENGINES = {"xlsx": "openpyxl", "xls": "xlrd"}
CSV_SHEET_NAME = "Sheet1"


def detect_format(filename: Optional[str], content_type: Optional[str]) -> str:
    """Return ``xlsx``, ``xls`` or ``csv`` for an upload, or raise UnsupportedFormat.

    An accepted file extension decides the format; the MIME type is used
    when the name carries none. Browsers report CSV files as
    ``application/vnd.ms-excel`` on some platforms.
    """
    suffix = Path(filename).suffix.lower() if filename else ""
    if suffix in config.ALLOWED_EXTENSIONS:
        return suffix.lstrip(".")

    mime = (content_type or "").split(";")[0].strip().lower()
    if mime in config.ALLOWED_CONTENT_TYPES:
        return config.ALLOWED_CONTENT_TYPES[mime]

    raise UnsupportedFormat(
        "Please upload a valid Excel file (.xlsx, .xls, or .csv)"
    )


def sniff_format(content: bytes, declared: str) -> str:
    """Physical format of ``content``, falling back to the declared one."""
    if content.startswith(ZIP_MAGIC):
        return "xlsx"
    if content.startswith(OLE2_MAGIC):
        return "xls"
    if declared in EXCEL_ENGINES:
        # Neither container signature; let the declared engine report the failure
        return declared
    return "csv"


def coerce_cell(value) -> str:
    """Coerce a decoded cell value to its string form, blanks to ``""``."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if pd.isna(value):
        # NaN and NaT
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    return str(value)


def _frame_to_rows(df: pd.DataFrame) -> List[List[str]]:
    return [
        [coerce_cell(value) for value in record]
        for record in df.itertuples(index=False, name=None)
    ]


def _read_excel(content: bytes, fmt: str) -> List[Sheet]:
    frames = pd.read_excel(
        BytesIO(content),
        sheet_name=None,
        header=None,
        dtype=object,
        engine=EXCEL_ENGINES[fmt],
    )
    # sheet_name=None keeps workbook order
    return [Sheet(name=str(name), rows=_frame_to_rows(df)) for name, df in frames.items()]


def _read_csv(content: bytes) -> List[Sheet]:
    text = content.decode("utf-8-sig")
    # Lines may be wider than the header; size the frame to the widest one
    width = max((len(record) for record in csv.reader(StringIO(text))), default=0)
    if width == 0:
        return [Sheet(name=CSV_SHEET_NAME, rows=[])]

    df = pd.read_csv(
        StringIO(text),
        header=None,
        names=range(width),
        dtype=str,
        keep_default_na=False,
        skip_blank_lines=False,
    )
    return [Sheet(name=CSV_SHEET_NAME, rows=_frame_to_rows(df))]


def extract_sheets(
    content: bytes,
    filename: Optional[str] = None,
    content_type: Optional[str] = None,
) -> List[Sheet]:
    """Decode workbook bytes into sheets of string cells.

    Raises UnsupportedFormat before any decoding when neither the MIME type
    nor the filename is an accepted spreadsheet type, and ParseError when
    the bytes cannot be decoded.
    """
    declared = detect_format(filename, content_type)
    fmt = sniff_format(content, declared)
    log.info("Extracting %s workbook %r (%d bytes)", fmt, filename, len(content))

    try:
        if fmt == "csv":
            sheets = _read_csv(content)
        else:
            sheets = _read_excel(content, fmt)
    except Exception as e:
        log.error(f"Workbook extraction failed for {filename}: {str(e)}")
        raise ParseError(
            "Unable to parse the Excel file. Please check the file format."
        ) from e

    log.info("Extracted %d sheet(s) from %r", len(sheets), filename)
    return sheets
