"""Spreadsheet to XML Converter Package.

Converts spreadsheet workbooks (.xlsx, .xls, .csv) into a simple XML dialect:
- Workbook extraction into named sheets of string cells
- Sheet selection per conversion session
- XML serialization using header cells as element tag names
- A FastAPI host for upload, conversion and download

For more information, refer to the project documentation.
"""

__version__ = "1.0.0"
__license__ = "MIT"
