from typing import Iterable, List, Optional, Sequence
from xml.sax.saxutils import escape
import logging
import re
import time

from ..config import config
from ..errors import EmptySelection
from ..models.schemas import Sheet

log = logging.getLogger(__name__)

# escape() handles & < > itself, ampersand first
_EXTRA_ENTITIES = {'"': "&quot;", "'": "&apos;"}

_INVALID_TAG_CHARS = re.compile(r'[^A-Za-z0-9_-]')
_INVALID_TAG_START = re.compile(r'^[^A-Za-z_]')
_EXTENSION = re.compile(r'\.[^/.]+$')


def escape_xml(value) -> str:
    """Escape a value for use as XML text or a double-quoted attribute."""
    return escape(str(value), _EXTRA_ENTITIES)


def sanitize_xml_tag(name: str) -> str:
    """Turn an arbitrary header string into a valid XML element name."""
    tag = _INVALID_TAG_CHARS.sub('_', str(name))
    return _INVALID_TAG_START.sub('_', tag, count=1)


def column_tag(headers: Sequence[str], index: int) -> str:
    """Tag name for the cell at ``index``; ``Column<N>`` when the header is blank."""
    header = headers[index] if index < len(headers) else ""
    if header:
        return sanitize_xml_tag(header)
    return f"Column{index + 1}"


def select_sheets(sheets: Iterable[Sheet], selected: Iterable[str]) -> List[Sheet]:
    """Return the selected sheets in extraction order."""
    selected = set(selected)
    if not selected:
        raise EmptySelection("Please select at least one sheet to convert")

    chosen = [sheet for sheet in sheets if sheet.name in selected]
    if not chosen:
        raise EmptySelection("None of the selected sheets exist in the workbook")
    return chosen


def download_filename(source_filename: Optional[str]) -> str:
    """Name of the downloadable document for a given source file."""
    if not source_filename:
        return config.DEFAULT_OUTPUT_NAME
    return f"{_EXTENSION.sub('', source_filename)}.xml"


class SheetsToXMLConverter:
    def __init__(self, indent: str = config.XML_INDENT):
        self.indent = indent
        self.root_tag = config.XML_ROOT_TAG
        self.sheet_tag = config.XML_SHEET_TAG
        self.row_tag = config.XML_ROW_TAG

    def _create_row(self, headers: Sequence[str], row: Sequence[str]) -> List[str]:
        """Render one data row, one child element per column."""
        pad = self.indent * 3
        lines = [f"{self.indent * 2}<{self.row_tag}>"]
        for index in range(max(len(headers), len(row))):
            tag = column_tag(headers, index)
            value = row[index] if index < len(row) else ""
            lines.append(f"{pad}<{tag}>{escape_xml(value)}</{tag}>")
        lines.append(f"{self.indent * 2}</{self.row_tag}>")
        return lines

    def _create_sheet_section(self, sheet: Sheet) -> List[str]:
        """Render a sheet element; the header row only supplies tag names."""
        lines = [f'{self.indent}<{self.sheet_tag} name="{escape_xml(sheet.name)}">']
        headers = sheet.header
        emitted = 0
        for row in sheet.data_rows:
            if not any(cell != "" for cell in row):
                continue
            lines.extend(self._create_row(headers, row))
            emitted += 1
        lines.append(f"{self.indent}</{self.sheet_tag}>")
        log.debug("Sheet %r serialized: %d of %d data rows", sheet.name, emitted, len(sheet.data_rows))
        return lines

    def convert(self, sheets: Sequence[Sheet], selected: Iterable[str]) -> str:
        """Serialize the selected sheets into a single XML document."""
        start_time = time.time()
        chosen = select_sheets(sheets, selected)

        lines = [config.XML_DECLARATION, f"<{self.root_tag}>"]
        for sheet in chosen:
            lines.extend(self._create_sheet_section(sheet))
        lines.append(f"</{self.root_tag}>")

        conversion_time = (time.time() - start_time) * 1000
        log.info("Converted %d sheet(s) to XML in %.1f ms", len(chosen), conversion_time)
        return "\n".join(lines)

# Create singleton instance
converter = SheetsToXMLConverter()
