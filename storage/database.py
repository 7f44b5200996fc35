"""
MongoDB connection handling for async operations.
"""

from typing import Any, Dict, List, NamedTuple, Optional, Tuple

import structlog
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection, AsyncIOMotorDatabase
from pymongo.errors import ConnectionFailure
from pymongo.server_api import ServerApi

from utilities.config import ServiceConfig

logger = structlog.get_logger(__name__)


class IndexSpec(NamedTuple):
    """Named index over one or more keys."""
    name: str
    keys: List[Tuple[str, int]]
    unique: bool = False


class MongoDBConnection:
    """
    Async MongoDB connection for one database.
    Handles connecting, health checks and collection lookup.
    """

    def __init__(self, settings: ServiceConfig):
        """
        Initialize the connection from settings; nothing is opened yet.

        Args:
            settings: Service configuration with the MongoDB fields
        """
        if not settings.mongodb_name:
            raise ValueError("MongoDB database name is required")
        if not settings.mongodb_host:
            raise ValueError("MongoDB host is required")

        self.connection_url = settings.get_mongodb_url()
        self.database_name = settings.mongodb_name
        self.timeout_ms = settings.mongodb_timeout_ms
        self.client: Optional[AsyncIOMotorClient] = None

    async def connect(self) -> None:
        """Establish connection to MongoDB."""
        try:
            self.client = AsyncIOMotorClient(
                self.connection_url,
                server_api=ServerApi("1"),
                timeoutMS=self.timeout_ms,
            )

            # Test connection
            await self.client.admin.command("ping")
            logger.info("Successfully connected to MongoDB", database=self.database_name)

        except ConnectionFailure as e:
            logger.error("Failed to connect to MongoDB", error=str(e))
            raise

    async def disconnect(self) -> None:
        """Close MongoDB connection."""
        if self.client:
            self.client.close()
            self.client = None
            logger.info("Disconnected from MongoDB")

    def get_database(self) -> AsyncIOMotorDatabase:
        if self.client is None:
            raise RuntimeError("MongoDB connection is not established")
        return self.client[self.database_name]

    def get_collection(self, collection_name: str) -> AsyncIOMotorCollection:
        return self.get_database()[collection_name]

    async def list_collection_names(self) -> List[str]:
        return await self.get_database().list_collection_names()

    async def prepare_collection(self, collection_name: str, validator: Dict[str, Any]) -> AsyncIOMotorCollection:
        """
        Create a collection with a strict document validator.

        When the collection already exists its validator is replaced instead.

        Args:
            collection_name: Name of the collection
            validator: Validator document, usually a ``$jsonSchema``

        Returns:
            The collection handle
        """
        database = self.get_database()
        try:
            if collection_name in await self.list_collection_names():
                await database.command({
                    "collMod": collection_name,
                    "validator": validator,
                    "validationLevel": "strict",
                })
                logger.info("Updated collection validator", collection=collection_name)
            else:
                await database.create_collection(
                    collection_name,
                    validator=validator,
                    validationLevel="strict",
                )
                logger.info("Created collection", collection=collection_name)

        except Exception as e:
            logger.error("Failed to prepare collection", collection=collection_name, error=str(e))
            raise

        return database[collection_name]

    async def ensure_indexes(self, collection: AsyncIOMotorCollection, indexes: List[IndexSpec]) -> None:
        """
        Create the given indexes unless an index with the same name exists.

        Args:
            collection: Collection to index
            indexes: Index specifications keyed by name
        """
        try:
            existing = await collection.index_information()

            for index in indexes:
                if index.name in existing:
                    continue
                await collection.create_index(index.keys, name=index.name, unique=index.unique)
                logger.info("Created index", collection=collection.name, index=index.name, unique=index.unique)

        except Exception as e:
            logger.error("Failed to create indexes", collection=collection.name, error=str(e))
            raise

    async def health_check(self) -> dict:
        """
        Perform database health check.

        Returns:
            Dictionary with health status
        """
        try:
            await self.get_database().command("ping")
            return {"status": "healthy", "database": self.database_name}
        except Exception as e:
            logger.error("Database health check failed", error=str(e))
            return {"status": "unhealthy", "error": str(e)}
