"""
Books collection model.
"""

from typing import Union

import structlog

from storage.base import BaseModel, validate_required_fields
from storage.database import IndexSpec, MongoDBConnection
from storage.models import (
    Book, BookSearchOptions, BookUpdate, MatchType, PaginationData, SortData, SortOrder
)
from storage.search import SearchPipelineBuilder
from utilities.errors import DataAlreadyInUsedError, DataValidationFailedError

logger = structlog.get_logger(__name__)

BOOKS_COLLECTION = "books_info"
BOOK_ID_KEY = "book_id"

BOOK_VALIDATOR = {
    "$jsonSchema": {
        "bsonType": "object",
        "required": ["book_id", "title", "author", "description", "categories"],
        "properties": {
            "book_id": {
                "bsonType": "string",
                "minLength": 1,
                "description": "Book ID must not be empty",
            },
            "title": {
                "bsonType": "string",
                "minLength": 1,
                "description": "Title must not be empty",
            },
            "author": {
                "bsonType": "string",
                "minLength": 1,
                "description": "Author must not be empty",
            },
            "description": {
                "bsonType": "string",
                "minLength": 1,
                "description": "Description must not be empty",
            },
            "categories": {
                "bsonType": "array",
                "uniqueItems": True,
                "items": {"bsonType": "string"},
                "description": "Categories must contains unique string elements",
            },
        },
    }
}

BOOK_INDEXES = [
    IndexSpec("title_1_author_1", [("title", 1), ("author", 1)]),
    IndexSpec("book_id_1", [("book_id", 1)], unique=True),
]

BOOK_SORT = [
    SortData(key="title", sort_by=SortOrder.ASC),
    SortData(key="author", sort_by=SortOrder.ASC),
]


def validate_categories(categories) -> None:
    if categories is None or len(set(categories)) != len(categories):
        raise DataValidationFailedError()


class BooksModel(BaseModel[Book]):
    """Books stored in the ``books_info`` collection."""

    def __init__(self, connection: MongoDBConnection, page_size: int = 10):
        super().__init__(connection.get_collection(BOOKS_COLLECTION), page_size, BOOK_ID_KEY, Book)
        self.connection = connection

    @classmethod
    async def create(cls, connection: MongoDBConnection, page_size: int = 10) -> "BooksModel":
        """Build the model and make sure its collection is ready."""
        model = cls(connection, page_size)
        await model.setup()
        return model

    async def setup(self) -> None:
        """Apply the document validator and create missing indexes."""
        self.collection = await self.connection.prepare_collection(BOOKS_COLLECTION, BOOK_VALIDATOR)
        await self.connection.ensure_indexes(self.collection, BOOK_INDEXES)

    async def insert(self, book: Book) -> None:
        """
        Insert a book.

        Raises:
            DataValidationFailedError: a field is blank or categories repeat
            DataAlreadyInUsedError: the ID or the title and author pair is taken
        """
        validate_required_fields({
            "book_id": book.book_id,
            "title": book.title,
            "author": book.author,
            "description": book.description,
        })
        validate_categories(book.categories)

        existing = await self.collection.find_one(
            {
                "$or": [
                    {BOOK_ID_KEY: book.book_id},
                    {"$and": [{"title": book.title}, {"author": book.author}]},
                ]
            },
            {"_id": 0, BOOK_ID_KEY: 1},
        )
        if existing is not None:
            logger.info("Book data already in use", book_id=book.book_id,
                        conflicting_book_id=existing.get(BOOK_ID_KEY))
            raise DataAlreadyInUsedError()

        await super().insert(book)

    async def update(self, book: Union[Book, BookUpdate]) -> Book:
        """
        Merge the given fields into a stored book.

        Raises:
            ObjectIDNotFoundError: the book does not exist
            DataValidationFailedError: a given field is blank or categories repeat
            DataAlreadyInUsedError: another book has the resulting title and author
        """
        changes = book.model_dump(exclude_unset=True, exclude_none=True)
        changes.pop(BOOK_ID_KEY, None)

        validate_required_fields({
            key: value for key, value in changes.items() if key != "categories"
        })
        if "categories" in changes:
            validate_categories(changes["categories"])

        current = await self.get_by_id(book.book_id)

        if "title" in changes or "author" in changes:
            title = changes.get("title", current.title)
            author = changes.get("author", current.author)
            conflict = await self.collection.find_one(
                {"title": title, "author": author, BOOK_ID_KEY: {"$ne": book.book_id}},
                {"_id": 0, BOOK_ID_KEY: 1},
            )
            if conflict is not None:
                raise DataAlreadyInUsedError()

        return await super().update(book)

    async def search(self, options: BookSearchOptions) -> PaginationData[Book]:
        """Search books sorted by title then author."""
        builder = SearchPipelineBuilder()
        builder.sorted_by(BOOK_SORT)
        builder.skip(self.skip_for(options.current_page))
        builder.limit(self.page_size)

        if options.book_id is not None:
            builder.match(BOOK_ID_KEY, options.book_id, MatchType.EQUAL)

        if options.title is not None:
            builder.match("title", options.title.value, options.title.match_type)

        if options.author is not None:
            builder.match("author", options.author.value, options.author.match_type)

        if options.categories is not None:
            builder.match("categories", options.categories, MatchType.CONTAINS_IN)

        return await super().search(options.current_page, builder.build_pipeline())
