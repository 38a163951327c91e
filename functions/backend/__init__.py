"""
Backend package for the site API.

This package provides a FastAPI application with storage, database and
auth abstractions for the blog, the PDF library and per-page notes.
"""
