"""Routes Package.

This package contains FastAPI route handlers for the spreadsheet to XML converter service.
It includes endpoints for:
- Workbook upload
- Sheet selection
- XML conversion and download
- Health checks
"""
