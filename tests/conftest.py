"""
Pytest configuration and shared fixtures.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from storage.database import MongoDBConnection
from storage.models import Book, User


def make_collection(name: str = "items", aggregate_result=None) -> MagicMock:
    """Create a mock motor collection."""
    collection = MagicMock()
    collection.name = name
    collection.insert_one = AsyncMock()
    collection.find_one = AsyncMock(return_value=None)
    collection.find_one_and_update = AsyncMock(return_value=None)
    collection.find_one_and_delete = AsyncMock(return_value=None)
    collection.index_information = AsyncMock(return_value={"_id_": {"key": [("_id", 1)]}})
    collection.create_index = AsyncMock()

    cursor = MagicMock()
    cursor.to_list = AsyncMock(return_value=aggregate_result if aggregate_result is not None else [])
    collection.aggregate = MagicMock(return_value=cursor)
    return collection


@pytest.fixture
def collection_factory():
    """Factory for mock collections with a given aggregation result."""
    return make_collection


@pytest.fixture
def mock_collection():
    """Create a mock collection for testing."""
    return make_collection()


@pytest.fixture
def mock_connection(mock_collection):
    """Create a mock MongoDB connection handing out ``mock_collection``."""
    connection = MagicMock(spec=MongoDBConnection)
    connection.get_collection.return_value = mock_collection
    connection.prepare_collection = AsyncMock(return_value=mock_collection)
    connection.ensure_indexes = AsyncMock()
    return connection


@pytest.fixture
def sample_book():
    """Create sample book for testing."""
    return Book(
        book_id="book_0",
        title="Title A",
        author="Author A",
        description="First book",
        categories=["Category A"],
    )


@pytest.fixture
def sample_user():
    """Create sample user for testing."""
    return User(
        user_id="user_0",
        username="alice",
        password="s3cret",
        account_name="Alice",
        email="alice@example.com",
    )
