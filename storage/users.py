"""
Users collection model.
"""

from typing import Union

import structlog

from storage.base import BaseModel, validate_required_fields
from storage.database import IndexSpec, MongoDBConnection
from storage.models import (
    MatchType, PaginationData, SortData, SortOrder, User, UserSearchOptions, UserUpdate
)
from storage.search import SearchPipelineBuilder
from utilities.errors import DataAlreadyInUsedError

logger = structlog.get_logger(__name__)

USERS_COLLECTION = "users"
USER_ID_KEY = "user_id"

# Fields that no two users may share, besides the ID
UNIQUE_FIELDS = ("username", "account_name", "email")


def _required_string(description: str) -> dict:
    return {"bsonType": "string", "minLength": 1, "description": description}


USER_VALIDATOR = {
    "$jsonSchema": {
        "bsonType": "object",
        "required": ["user_id", "username", "password", "account_name", "email"],
        "properties": {
            "user_id": _required_string("User ID must not be empty"),
            "username": _required_string("Username must not be empty"),
            "password": _required_string("Password must not be empty"),
            "account_name": _required_string("Account name must not be empty"),
            "email": _required_string("Email must not be empty"),
        },
    }
}

USER_INDEXES = [
    IndexSpec("user_id_1", [("user_id", 1)], unique=True),
    IndexSpec("username_1", [("username", 1)], unique=True),
    IndexSpec("account_name_1", [("account_name", 1)], unique=True),
    IndexSpec("email_1", [("email", 1)], unique=True),
]

USER_SORT = [SortData(key=USER_ID_KEY, sort_by=SortOrder.ASC)]


class UsersModel(BaseModel[User]):
    """Users stored in the ``users`` collection."""

    def __init__(self, connection: MongoDBConnection, page_size: int = 10):
        super().__init__(connection.get_collection(USERS_COLLECTION), page_size, USER_ID_KEY, User)
        self.connection = connection

    @classmethod
    async def create(cls, connection: MongoDBConnection, page_size: int = 10) -> "UsersModel":
        """Build the model and make sure its collection is ready."""
        model = cls(connection, page_size)
        await model.setup()
        return model

    async def setup(self) -> None:
        """Apply the document validator and create missing indexes."""
        self.collection = await self.connection.prepare_collection(USERS_COLLECTION, USER_VALIDATOR)
        await self.connection.ensure_indexes(self.collection, USER_INDEXES)

    async def insert(self, user: User) -> None:
        """
        Insert a user.

        Raises:
            DataValidationFailedError: a field is blank
            DataAlreadyInUsedError: the ID, username, account name or email is taken
        """
        validate_required_fields(user.model_dump())

        existing = await self.collection.find_one(
            {
                "$or": [
                    {USER_ID_KEY: user.user_id},
                    {"username": user.username},
                    {"account_name": user.account_name},
                    {"email": user.email},
                ]
            },
            {"_id": 0, USER_ID_KEY: 1},
        )
        if existing is not None:
            logger.info("User data already in use", user_id=user.user_id,
                        conflicting_user_id=existing.get(USER_ID_KEY))
            raise DataAlreadyInUsedError()

        await super().insert(user)

    async def update(self, user: Union[User, UserUpdate]) -> User:
        """
        Merge the given fields into a stored user.

        Raises:
            ObjectIDNotFoundError: the user does not exist
            DataValidationFailedError: a given field is blank
            DataAlreadyInUsedError: another user holds a new unique value
        """
        changes = user.model_dump(exclude_unset=True, exclude_none=True)
        changes.pop(USER_ID_KEY, None)
        validate_required_fields(changes)

        await self.get_by_id(user.user_id)

        unique_changes = [{field: changes[field]} for field in UNIQUE_FIELDS if field in changes]
        if unique_changes:
            conflict = await self.collection.find_one(
                {"$or": unique_changes, USER_ID_KEY: {"$ne": user.user_id}},
                {"_id": 0, USER_ID_KEY: 1},
            )
            if conflict is not None:
                raise DataAlreadyInUsedError()

        return await super().update(user)

    async def search(self, options: UserSearchOptions) -> PaginationData[User]:
        """Search users sorted by user ID."""
        builder = SearchPipelineBuilder()
        builder.sorted_by(USER_SORT)
        builder.skip(self.skip_for(options.current_page))
        builder.limit(self.page_size)

        if options.user_id is not None:
            builder.match(USER_ID_KEY, options.user_id, MatchType.EQUAL)

        for field in UNIQUE_FIELDS:
            option = getattr(options, field)
            if option is not None:
                builder.match(field, option.value, option.match_type)

        return await super().search(options.current_page, builder.build_pipeline())
