"""
Unit tests for the users model.
"""

import pytest

from storage.models import MatchOption, MatchType, UserSearchOptions, UserUpdate
from storage.users import USER_INDEXES, USER_VALIDATOR, USERS_COLLECTION, UsersModel
from utilities.errors import (
    DataAlreadyInUsedError,
    DataValidationFailedError,
    MatchValueInvalidError,
    ObjectIDNotFoundError,
)


@pytest.fixture
def users_model(mock_connection):
    """Create a users model over the mock connection."""
    return UsersModel(mock_connection, page_size=10)


@pytest.mark.asyncio
async def test_create(mock_connection, mock_collection):
    """Create applies the validator and the unique indexes."""
    await UsersModel.create(mock_connection)

    mock_connection.prepare_collection.assert_awaited_once_with(USERS_COLLECTION, USER_VALIDATOR)
    mock_connection.ensure_indexes.assert_awaited_once_with(mock_collection, USER_INDEXES)
    assert all(index.unique for index in USER_INDEXES)
    assert {index.name for index in USER_INDEXES} == {
        "user_id_1", "username_1", "account_name_1", "email_1"
    }


@pytest.mark.asyncio
async def test_insert_valid_user(users_model, mock_collection, sample_user):
    """A valid, unused user is inserted after the uniqueness check."""
    await users_model.insert(sample_user)

    precheck = mock_collection.find_one.await_args.args[0]
    assert precheck == {
        "$or": [
            {"user_id": "user_0"},
            {"username": "alice"},
            {"account_name": "Alice"},
            {"email": "alice@example.com"},
        ]
    }
    mock_collection.insert_one.assert_awaited_once()


@pytest.mark.asyncio
@pytest.mark.parametrize("field", ["user_id", "username", "password", "account_name", "email"])
async def test_insert_empty_field(users_model, mock_collection, sample_user, field):
    """Every user field is required."""
    with pytest.raises(DataValidationFailedError):
        await users_model.insert(sample_user.model_copy(update={field: ""}))

    mock_collection.find_one.assert_not_awaited()


@pytest.mark.asyncio
async def test_insert_data_in_use(users_model, mock_collection, sample_user):
    """A user sharing any unique value is rejected."""
    mock_collection.find_one.return_value = {"user_id": "user_9"}

    with pytest.raises(DataAlreadyInUsedError) as exc_info:
        await users_model.insert(sample_user)

    assert exc_info.value.code == 200_008
    mock_collection.insert_one.assert_not_awaited()


@pytest.mark.asyncio
async def test_update_email(users_model, mock_collection, sample_user):
    """Changed unique fields are checked against other users."""
    updated = sample_user.model_copy(update={"email": "new@example.com"})
    mock_collection.find_one.side_effect = [sample_user.model_dump(), None]
    mock_collection.find_one_and_update.return_value = updated.model_dump()

    actual = await users_model.update(UserUpdate(user_id="user_0", email="new@example.com"))

    assert actual == updated
    conflict_query = mock_collection.find_one.await_args_list[1].args[0]
    assert conflict_query == {"$or": [{"email": "new@example.com"}], "user_id": {"$ne": "user_0"}}


@pytest.mark.asyncio
async def test_update_password_skips_conflict_check(users_model, mock_collection, sample_user):
    mock_collection.find_one.return_value = sample_user.model_dump()
    mock_collection.find_one_and_update.return_value = sample_user.model_dump()

    await users_model.update(UserUpdate(user_id="user_0", password="changed"))

    assert mock_collection.find_one.await_count == 1


@pytest.mark.asyncio
async def test_update_username_in_use(users_model, mock_collection, sample_user):
    mock_collection.find_one.side_effect = [sample_user.model_dump(), {"user_id": "user_1"}]

    with pytest.raises(DataAlreadyInUsedError):
        await users_model.update(UserUpdate(user_id="user_0", username="bob"))

    mock_collection.find_one_and_update.assert_not_awaited()


@pytest.mark.asyncio
async def test_update_missing_user(users_model, mock_collection):
    """Unknown users are reported before any conflict check."""
    with pytest.raises(ObjectIDNotFoundError):
        await users_model.update(UserUpdate(user_id="missing", username="bob"))

    assert mock_collection.find_one.await_count == 1


@pytest.mark.asyncio
async def test_search_options(users_model, mock_collection):
    """User searches sort by user ID and match each given field."""
    options = UserSearchOptions(
        current_page=2,
        user_id="user_0",
        username=MatchOption(match_type=MatchType.PARTIAL, value="ali"),
        email=MatchOption(match_type=MatchType.ENDS_WITH, value="@example.com"),
    )

    await users_model.search(options)

    pipeline = mock_collection.aggregate.call_args.args[0]
    assert pipeline[0]["$match"]["$and"] == [
        {"user_id": "user_0"},
        {"username": {"$regex": "ali", "$options": "i"}},
        {"email": {"$regex": "@example\\.com$", "$options": "i"}},
    ]
    assert pipeline[1]["$facet"]["paginate_result"][:3] == [
        {"$sort": {"user_id": 1}},
        {"$skip": 10},
        {"$limit": 10},
    ]


@pytest.mark.asyncio
async def test_search_contains_in_on_string_field(users_model):
    """Contains-in needs a list value."""
    options = UserSearchOptions(account_name=MatchOption(match_type=MatchType.CONTAINS_IN, value="Alice"))

    with pytest.raises(MatchValueInvalidError):
        await users_model.search(options)
