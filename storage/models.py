"""
Pydantic models for stored items, search options and pagination results.
"""

from enum import IntEnum
from typing import Generic, List, Optional, TypeVar, Union

from pydantic import BaseModel, Field


class MatchType(IntEnum):
    """Comparison strategy applied to a searched field."""
    EQUAL = 0
    PARTIAL = 1
    STARTS_WITH = 2
    ENDS_WITH = 3
    CONTAINS_IN = 4


class SortOrder(IntEnum):
    """Sort direction as understood by MongoDB."""
    ASC = 1
    DESC = -1


class SortData(BaseModel):
    """One sort key of a search pipeline."""
    key: str = Field(..., description="Field to sort by")
    sort_by: SortOrder = Field(SortOrder.ASC, description="Sort direction")


class MatchOption(BaseModel):
    """
    Constraint on a single searched field.

    ``match_type`` is kept as a plain integer so that unknown values reach the
    match compiler and are reported as MatchTypeInvalid.
    """
    match_type: int = Field(MatchType.EQUAL, description="Match type (0-4)")
    value: Union[str, List[str]] = Field(..., description="Value to compare with")


class Book(BaseModel):
    """Stored book."""
    book_id: str = Field(..., description="Unique book identifier")
    title: str = Field(..., description="Book title")
    author: str = Field(..., description="Book author")
    description: str = Field(..., description="Book description")
    categories: List[str] = Field(..., description="Unique category names")


class BookUpdate(BaseModel):
    """Partial book update; omitted fields keep their stored value."""
    book_id: str = Field(..., description="Book to update")
    title: Optional[str] = None
    author: Optional[str] = None
    description: Optional[str] = None
    categories: Optional[List[str]] = None


class BookSearchOptions(BaseModel):
    """Search options for books."""
    current_page: int = Field(1, description="Page number (starts from 1)")
    book_id: Optional[str] = Field(None, description="Exact book ID")
    title: Optional[MatchOption] = None
    author: Optional[MatchOption] = None
    categories: Optional[List[str]] = Field(None, description="Any of these categories")


class User(BaseModel):
    """Stored user."""
    user_id: str = Field(..., description="Unique user identifier")
    username: str = Field(..., description="Unique username")
    password: str = Field(..., description="Password")
    account_name: str = Field(..., description="Unique account name")
    email: str = Field(..., description="Unique email address")


class UserUpdate(BaseModel):
    """Partial user update; omitted fields keep their stored value."""
    user_id: str = Field(..., description="User to update")
    username: Optional[str] = None
    password: Optional[str] = None
    account_name: Optional[str] = None
    email: Optional[str] = None


class UserSearchOptions(BaseModel):
    """Search options for users."""
    current_page: int = Field(1, description="Page number (starts from 1)")
    user_id: Optional[str] = Field(None, description="Exact user ID")
    username: Optional[MatchOption] = None
    account_name: Optional[MatchOption] = None
    email: Optional[MatchOption] = None


ItemT = TypeVar("ItemT", bound=BaseModel)


class PaginationData(BaseModel, Generic[ItemT]):
    """One page of search results."""
    page: int = Field(..., description="Current page number")
    total_pages: int = Field(..., description="Total number of pages")
    count: int = Field(..., description="Total number of matching items")
    data: List[ItemT] = Field(default_factory=list, description="Items on this page")
