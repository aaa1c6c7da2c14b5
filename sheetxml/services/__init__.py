"""Services Package.

This package contains:
- Workbook extraction (bytes to sheets)
- Conversion sessions holding the loaded sheets and selection
"""
