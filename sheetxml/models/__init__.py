"""Models Package.

Pydantic models for workbook sheets and the API request and response bodies.
"""
