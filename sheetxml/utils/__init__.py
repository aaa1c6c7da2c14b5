"""Utils Package.

This package contains utility modules for:
- XML serialization of workbook sheets
- Structured audit logging
"""
