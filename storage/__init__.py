"""
Storage layer for the books and users CRUD service.

This package contains:
- MongoDB connection handling
- Search pipeline builder and match compiler
- Generic collection model
- Books and users models
"""
