"""
Configuration management using environment variables.
Handles database, search and logging settings with validation and defaults.
"""

from typing import Optional
from urllib.parse import quote_plus
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ServiceConfig(BaseSettings):
    """
    Configuration class for the storage side of the service.
    Uses pydantic BaseSettings for environment variable management.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore extra fields from .env
    )

    # MongoDB Configuration
    mongodb_host: str = Field(default="localhost")
    mongodb_port: int = Field(default=27017)
    mongodb_user: str = Field(default="")
    mongodb_password: str = Field(default="")
    mongodb_name: str = Field(default="go-crud_data")
    mongodb_timeout_ms: int = Field(default=3000)

    # Search Configuration
    search_page_size: int = Field(default=10)

    # Logging Configuration
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="json")
    log_file: Optional[str] = Field(default=None)

    # Development/Testing
    debug: bool = Field(default=False)

    @field_validator("mongodb_host", "mongodb_name")
    @classmethod
    def validate_required(cls, v):
        """Host and database name cannot be blank."""
        if not v.strip():
            raise ValueError("value is required")
        return v

    @field_validator("mongodb_port")
    @classmethod
    def validate_port(cls, v):
        """Ensure port is a valid TCP port."""
        if v < 1 or v > 65535:
            raise ValueError("mongodb_port must be between 1 and 65535")
        return v

    @field_validator("mongodb_timeout_ms")
    @classmethod
    def validate_timeout(cls, v):
        """Ensure timeout is reasonable."""
        if v < 100 or v > 300_000:
            raise ValueError("mongodb_timeout_ms must be between 100 and 300000")
        return v

    @field_validator("search_page_size")
    @classmethod
    def validate_page_size(cls, v):
        """Pages must hold at least one item."""
        if v < 1:
            raise ValueError("search_page_size can be only positive integer")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Ensure log level is valid."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"log_level must be one of: {valid_levels}")
        return v.upper()

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v):
        """Ensure log format is valid."""
        valid_formats = ["json", "console"]
        if v.lower() not in valid_formats:
            raise ValueError(f"log_format must be one of: {valid_formats}")
        return v.lower()

    def get_mongodb_url(self) -> str:
        """Build the MongoDB connection URL, with credentials when both are set."""
        credentials = ""
        if self.mongodb_user and self.mongodb_password:
            credentials = f"{quote_plus(self.mongodb_user)}:{quote_plus(self.mongodb_password)}@"
        return f"mongodb://{credentials}{self.mongodb_host}:{self.mongodb_port}"

    def get_log_file_path(self) -> Optional[Path]:
        """Get log file path as Path object."""
        if self.log_file:
            return Path(self.log_file)
        return None


# Global configuration instance
config = ServiceConfig()
