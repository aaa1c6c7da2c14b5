"""Shared test fixtures for sheetxml tests."""

from __future__ import annotations

import os
import tempfile
from io import BytesIO

# Keep audit logs out of the package directory while testing
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="sheetxml-logs-"))

import pytest
from openpyxl import Workbook

from sheetxml.models.schemas import Sheet


@pytest.fixture
def make_xlsx():
    """Factory fixture building .xlsx bytes from ``{sheet name: rows}``."""

    def _build(sheets: dict) -> bytes:
        wb = Workbook()
        wb.remove(wb.active)
        for name, rows in sheets.items():
            ws = wb.create_sheet(title=name)
            for row in rows:
                ws.append(row)
        buffer = BytesIO()
        wb.save(buffer)
        return buffer.getvalue()

    return _build


@pytest.fixture
def people_sheet() -> Sheet:
    return Sheet(
        name="Sheet1",
        rows=[["Name", "Age"], ["Alice", "30"], ["", ""]],
    )


@pytest.fixture
def three_sheets() -> list:
    return [
        Sheet(name="First", rows=[["A"], ["1"]]),
        Sheet(name="Second", rows=[["B"], ["2"]]),
        Sheet(name="Third", rows=[["C"], ["3"]]),
    ]


@pytest.fixture
def sample_csv() -> bytes:
    return b"Name,Age,City\nAlice,30,Paris\n,,\nBob,,Berlin\n"
