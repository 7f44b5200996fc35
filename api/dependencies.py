"""
Shared service state and the FastAPI dependencies that hand it out.

The lifespan in ``api.main`` fills these globals on startup.
"""

from typing import Optional

from fastapi import HTTPException, status

from storage.books import BooksModel
from storage.database import MongoDBConnection
from storage.users import UsersModel

connection: Optional[MongoDBConnection] = None
books_model: Optional[BooksModel] = None
users_model: Optional[UsersModel] = None


def _unavailable() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail="Database service not available"
    )


def get_books_model() -> BooksModel:
    if books_model is None:
        raise _unavailable()
    return books_model


def get_users_model() -> UsersModel:
    if users_model is None:
        raise _unavailable()
    return users_model
