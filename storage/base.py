"""
Generic collection model shared by every resource.

Wraps a motor collection and translates driver outcomes into the service
error taxonomy: unknown IDs, duplicated IDs, unique index clashes and
documents rejected by the collection validator.
"""

import math
from typing import Any, Dict, Generic, List, Type

import structlog
from motor.motor_asyncio import AsyncIOMotorCollection
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError, WriteError

from storage.models import ItemT, PaginationData
from utilities.errors import (
    CurrentPageInvalidError,
    DataAlreadyInUsedError,
    DataValidationFailedError,
    DuplicatedObjectIDError,
    ObjectIDNotFoundError,
)

logger = structlog.get_logger(__name__)

# Server error code for documents rejected by a $jsonSchema validator
DOCUMENT_VALIDATION_FAILURE = 121


def validate_required_fields(fields: Dict[str, Any]) -> None:
    """
    Reject empty strings and missing values.

    Raises:
        DataValidationFailedError: some field is None or an empty string
    """
    for name, value in fields.items():
        if value is None or value == "":
            logger.info("Field validation failed", field=name)
            raise DataValidationFailedError()


class BaseModel(Generic[ItemT]):
    """
    Insert, read, update, delete and search items of one collection.

    Items are pydantic models identified by the ``item_id_key`` field.
    """

    def __init__(
        self,
        collection: AsyncIOMotorCollection,
        page_size: int,
        item_id_key: str,
        item_class: Type[ItemT]
    ):
        """
        Args:
            collection: Collection holding the items
            page_size: Number of items per search page
            item_id_key: Field holding the item's unique ID
            item_class: Pydantic model the stored documents are read into
        """
        if page_size < 1:
            raise ValueError("page_size can be only positive integer")

        self.collection = collection
        self.page_size = page_size
        self.item_id_key = item_id_key
        self.item_class = item_class

    def skip_for(self, current_page: int) -> int:
        """Number of items before ``current_page``."""
        if current_page < 1:
            raise CurrentPageInvalidError()
        return (current_page - 1) * self.page_size

    async def insert(self, item: ItemT) -> None:
        """
        Insert a new item.

        Raises:
            DuplicatedObjectIDError: a unique index already holds the value
            DataValidationFailedError: the collection validator rejected it
        """
        item_id = getattr(item, self.item_id_key)
        try:
            # insert_one adds _id to the dict it is given
            await self.collection.insert_one(item.model_dump())
            logger.debug("Inserted item", collection=self.collection.name, item_id=item_id)

        except DuplicateKeyError:
            logger.warning("Item already exists", collection=self.collection.name, item_id=item_id)
            raise DuplicatedObjectIDError(item_id) from None

        except WriteError as e:
            if e.code == DOCUMENT_VALIDATION_FAILURE:
                logger.warning("Item failed validation", collection=self.collection.name,
                               item_id=item_id, error=str(e))
                raise DataValidationFailedError() from None
            logger.error("Failed to insert item", collection=self.collection.name,
                         item_id=item_id, error=str(e))
            raise

    async def get_by_id(self, item_id: str) -> ItemT:
        """
        Get one item by its ID.

        Raises:
            ObjectIDNotFoundError: no item has this ID
        """
        document = await self.collection.find_one({self.item_id_key: item_id}, {"_id": 0})
        if document is None:
            raise ObjectIDNotFoundError(item_id)

        return self.item_class(**document)

    async def search(self, current_page: int, pipeline: List[Dict[str, Any]]) -> PaginationData[ItemT]:
        """
        Run a pipeline built by SearchPipelineBuilder and page its result.

        Args:
            current_page: Page the pipeline was built for (starts from 1)
            pipeline: Aggregation pipeline

        Returns:
            PaginationData with the page, total pages, total count and items

        Raises:
            CurrentPageInvalidError: current_page is below 1
        """
        if current_page < 1:
            raise CurrentPageInvalidError()

        cursor = self.collection.aggregate(pipeline)
        results = await cursor.to_list(length=None)

        aggregated = results[0] if results else {}
        total = aggregated.get("total", 0)
        data = aggregated.get("data", [])

        return PaginationData[self.item_class](
            page=current_page,
            total_pages=math.ceil(total / self.page_size),
            count=total,
            data=[self.item_class(**document) for document in data],
        )

    async def update(self, item: Any) -> ItemT:
        """
        Merge the fields set on ``item`` into the stored item.

        ``item`` may be the full item model or its partial update model;
        fields left unset or ``None`` keep their stored value.

        Returns:
            The item as stored after the update

        Raises:
            ObjectIDNotFoundError: no item has this ID
            DataAlreadyInUsedError: a unique index already holds a new value
            DataValidationFailedError: the collection validator rejected it
        """
        item_id = getattr(item, self.item_id_key)
        changes = item.model_dump(exclude_unset=True, exclude_none=True)
        changes.pop(self.item_id_key, None)

        if not changes:
            return await self.get_by_id(item_id)

        try:
            document = await self.collection.find_one_and_update(
                {self.item_id_key: item_id},
                {"$set": changes},
                projection={"_id": 0},
                return_document=ReturnDocument.AFTER,
            )

        except DuplicateKeyError:
            logger.warning("Updated value already in use", collection=self.collection.name, item_id=item_id)
            raise DataAlreadyInUsedError() from None

        except WriteError as e:
            if e.code == DOCUMENT_VALIDATION_FAILURE:
                raise DataValidationFailedError() from None
            logger.error("Failed to update item", collection=self.collection.name,
                         item_id=item_id, error=str(e))
            raise

        if document is None:
            raise ObjectIDNotFoundError(item_id)

        logger.debug("Updated item", collection=self.collection.name, item_id=item_id,
                     fields=sorted(changes))
        return self.item_class(**document)

    async def delete(self, item_id: str) -> None:
        """
        Delete one item by its ID.

        Raises:
            ObjectIDNotFoundError: no item has this ID
        """
        document = await self.collection.find_one_and_delete({self.item_id_key: item_id})
        if document is None:
            raise ObjectIDNotFoundError(item_id)

        logger.debug("Deleted item", collection=self.collection.name, item_id=item_id)
