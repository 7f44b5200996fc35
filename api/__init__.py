"""
FastAPI RESTful API for the books and users CRUD service.

This module provides:
- Insert, read, update and delete of books and users
- Paginated search with per-field match options
- Structured JSON error envelopes
"""
