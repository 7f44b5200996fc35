"""
Error taxonomy shared by the storage layer and the API.

Every error carries a stable numeric code, a short name and a formatted
message. The kind tells the API whether the caller or the server is at fault.
"""

from enum import Enum
from typing import Any, Dict


class ErrorKind(str, Enum):
    """Who is responsible for an error."""
    RESPONSE = "response"
    INTERNAL = "internal"


UNKNOWN_ERROR_CODE = 100_001

CURRENT_PAGE_INVALID_ERROR_CODE = 200_001
OBJECT_ID_NOT_FOUND_ERROR_CODE = 200_002
DUPLICATED_OBJECT_ID_ERROR_CODE = 200_003
MATCH_TYPE_INVALID_ERROR_CODE = 200_004
SORT_LIST_INVALID_ERROR_CODE = 200_005
MATCH_KEY_DUPLICATED_ERROR_CODE = 200_006
MATCH_VALUE_INVALID_ERROR_CODE = 200_007
DATA_ALREADY_IN_USED_ERROR_CODE = 200_008
DATA_VALIDATION_FAILED_ERROR_CODE = 200_009
SORT_KEY_DUPLICATED_ERROR_CODE = 200_010


class BaseError(Exception):
    """
    Base class for all service errors.

    Subclasses set ``code``, ``name``, ``kind`` and ``message_format``;
    positional arguments given on construction are substituted into the
    format with ``str.format``.
    """

    code: int = UNKNOWN_ERROR_CODE
    name: str = "BaseError"
    kind: ErrorKind = ErrorKind.INTERNAL
    message_format: str = "unexpected error"

    def __init__(self, *args: Any):
        self.message = self.message_format.format(*args)
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the ``{code, name, message}`` error body."""
        return {
            "code": self.code,
            "name": self.name,
            "message": self.message,
        }


class UnknownError(BaseError):
    """Unexpected or unregistered error caught while operating."""
    code = UNKNOWN_ERROR_CODE
    name = "UnknownError"
    kind = ErrorKind.INTERNAL
    message_format = "unexpected error: {}"


class CurrentPageInvalidError(BaseError):
    """Search was asked for a page below 1."""
    code = CURRENT_PAGE_INVALID_ERROR_CODE
    name = "CurrentPageInvalid"
    kind = ErrorKind.RESPONSE
    message_format = "Current page can be only positive integer"


class ObjectIDNotFoundError(BaseError):
    """No item has the given ID."""
    code = OBJECT_ID_NOT_FOUND_ERROR_CODE
    name = "ObjectIDNotFound"
    kind = ErrorKind.RESPONSE
    message_format = "Item with ID {} is not exist"


class DuplicatedObjectIDError(BaseError):
    """An item was created with an ID that is already used."""
    code = DUPLICATED_OBJECT_ID_ERROR_CODE
    name = "DuplicatedObjectID"
    kind = ErrorKind.RESPONSE
    message_format = "item ID {} is already used"


class MatchTypeInvalidError(BaseError):
    """Search used an unknown match type."""
    code = MATCH_TYPE_INVALID_ERROR_CODE
    name = "MatchTypeInvalid"
    kind = ErrorKind.RESPONSE
    message_format = "Match type {} is invalid or unsupported"


class SortListInvalidError(BaseError):
    """Sort stage was requested with nothing to sort by."""
    code = SORT_LIST_INVALID_ERROR_CODE
    name = "SortListInvalid"
    kind = ErrorKind.INTERNAL
    message_format = "Sort list length should not have been zero"


class MatchKeyDuplicatedError(BaseError):
    """The same field was matched twice in one pipeline."""
    code = MATCH_KEY_DUPLICATED_ERROR_CODE
    name = "MatchKeyDuplicated"
    kind = ErrorKind.INTERNAL
    message_format = "Match key {} is duplicated"


class MatchValueInvalidError(BaseError):
    """The match value's type does not fit the match type."""
    code = MATCH_VALUE_INVALID_ERROR_CODE
    name = "MatchValueInvalid"
    kind = ErrorKind.RESPONSE
    message_format = "Given Match value's type {} is invalid or unsupported in Match type {}"


class DataAlreadyInUsedError(BaseError):
    """Some value that must be unique is already used by another item."""
    code = DATA_ALREADY_IN_USED_ERROR_CODE
    name = "DataAlreadyInUsed"
    kind = ErrorKind.RESPONSE
    message_format = "Given data is already in used"


class DataValidationFailedError(BaseError):
    """Given data is missing fields or holds unusable values."""
    code = DATA_VALIDATION_FAILED_ERROR_CODE
    name = "DataValidationFailed"
    kind = ErrorKind.RESPONSE
    message_format = "Given data is invalid or cannot be used"


class SortKeyDuplicatedError(BaseError):
    """The same field was given twice as a sort key."""
    code = SORT_KEY_DUPLICATED_ERROR_CODE
    name = "SortKeyDuplicated"
    kind = ErrorKind.INTERNAL
    message_format = "Sort key {} is duplicated"
