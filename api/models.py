"""
API request and response schemas.
"""

from datetime import datetime
from typing import Any, Dict

from pydantic import BaseModel, Field


class ErrorBody(BaseModel):
    """Error details returned to the caller."""
    code: int = Field(..., description="Stable numeric error code")
    name: str = Field(..., description="Error name")
    message: str = Field(..., description="Human-readable message")


class ResultResponse(BaseModel):
    """Successful response envelope."""
    result: Any = Field(..., description="Operation result")


class ErrorResponse(BaseModel):
    """Failed response envelope."""
    error: ErrorBody


class BookKey(BaseModel):
    """Body identifying one book."""
    book_id: str = Field(..., description="Book identifier")


class UserKey(BaseModel):
    """Body identifying one user."""
    user_id: str = Field(..., description="User identifier")


class HealthResponse(BaseModel):
    """Health check response model."""
    status: str = Field(..., description="Service status")
    timestamp: datetime = Field(..., description="Current timestamp")
    version: str = Field(..., description="API version")
    database_status: str = Field(..., description="Database connection status")


OK_RESPONSE: Dict[str, Any] = {"result": {"status": "OK"}}
