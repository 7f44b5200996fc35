"""
Tests for configuration and the error taxonomy.
"""

import pytest
from pydantic import ValidationError

from utilities.config import ServiceConfig
from utilities.errors import (
    DataValidationFailedError,
    ErrorKind,
    MatchValueInvalidError,
    ObjectIDNotFoundError,
    UnknownError,
)


class TestServiceConfig:
    """Test cases for ServiceConfig."""

    def test_url_without_credentials(self):
        config = ServiceConfig(mongodb_host="mongo", mongodb_port=27017, mongodb_user="", mongodb_password="")
        assert config.get_mongodb_url() == "mongodb://mongo:27017"

    def test_url_needs_both_credentials(self):
        config = ServiceConfig(mongodb_host="mongo", mongodb_user="crud", mongodb_password="")
        assert "@" not in config.get_mongodb_url()

    def test_environment_variables(self, monkeypatch):
        monkeypatch.setenv("MONGODB_HOST", "env-host")
        monkeypatch.setenv("MONGODB_PORT", "27999")
        monkeypatch.setenv("MONGODB_NAME", "env_db")
        monkeypatch.setenv("SEARCH_PAGE_SIZE", "25")

        config = ServiceConfig()

        assert config.mongodb_host == "env-host"
        assert config.mongodb_port == 27999
        assert config.mongodb_name == "env_db"
        assert config.search_page_size == 25

    @pytest.mark.parametrize("field, value", [
        ("mongodb_port", 0),
        ("search_page_size", 0),
        ("log_level", "LOUD"),
        ("log_format", "xml"),
        ("mongodb_name", " "),
    ])
    def test_invalid_values(self, field, value):
        with pytest.raises(ValidationError):
            ServiceConfig(**{field: value})

    def test_log_level_normalized(self):
        assert ServiceConfig(log_level="debug").log_level == "DEBUG"


class TestErrors:
    """Test cases for error formatting."""

    def test_to_dict(self):
        error = ObjectIDNotFoundError("book_9")
        assert error.to_dict() == {
            "code": 200_002,
            "name": "ObjectIDNotFound",
            "message": "Item with ID book_9 is not exist",
        }
        assert str(error) == "Item with ID book_9 is not exist"

    def test_message_with_two_arguments(self):
        error = MatchValueInvalidError("str", "CONTAINS_IN")
        assert error.message == "Given Match value's type str is invalid or unsupported in Match type CONTAINS_IN"
        assert error.kind == ErrorKind.RESPONSE

    def test_fixed_message(self):
        assert DataValidationFailedError().message == "Given data is invalid or cannot be used"
        assert DataValidationFailedError().kind == ErrorKind.RESPONSE

    def test_unknown_error(self):
        error = UnknownError("boom")
        assert error.code == 100_001
        assert error.message == "unexpected error: boom"
