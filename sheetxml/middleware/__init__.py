"""Middleware Package.

This package contains FastAPI middleware components for:
- Origin and content type checks
- Upload size limits
- Security response headers
"""
