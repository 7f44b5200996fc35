"""
Search pipeline construction.

Compiles field predicates into MongoDB filter fragments and assembles them,
together with sorting and paging, into a single aggregation pipeline that
returns the matching total and one page of rows in one round trip.
"""

import re
from typing import Any, Dict, List, Optional

from storage.models import MatchType, SortData
from utilities.errors import (
    MatchKeyDuplicatedError,
    MatchTypeInvalidError,
    MatchValueInvalidError,
    SortKeyDuplicatedError,
    SortListInvalidError,
)


def equal_match_query(key: str, value: Any) -> Dict[str, Any]:
    """Exact match (case-sensitive)."""
    return {key: value}


def partial_match_query(key: str, value: str) -> Dict[str, Any]:
    """Substring match (case-insensitive)."""
    return {key: {"$regex": re.escape(value), "$options": "i"}}


def starts_with_match_query(key: str, value: str) -> Dict[str, Any]:
    """Prefix match (case-insensitive)."""
    return {key: {"$regex": f"^{re.escape(value)}", "$options": "i"}}


def ends_with_match_query(key: str, value: str) -> Dict[str, Any]:
    """Suffix match (case-insensitive)."""
    return {key: {"$regex": f"{re.escape(value)}$", "$options": "i"}}


def contains_in_match_query(key: str, values: List[Any]) -> Dict[str, Any]:
    """Array field shares at least one element with ``values``."""
    return {key: {"$in": list(values)}}


_REGEX_MATCHERS = {
    MatchType.PARTIAL: partial_match_query,
    MatchType.STARTS_WITH: starts_with_match_query,
    MatchType.ENDS_WITH: ends_with_match_query,
}


def create_match_query(key: str, value: Any, match_type: int) -> Dict[str, Any]:
    """
    Create the filter fragment for one field.

    Args:
        key: Document field name
        value: Value to compare with
        match_type: One of the MatchType values

    Returns:
        MongoDB filter fragment

    Raises:
        MatchTypeInvalidError: match_type is not a known MatchType
        MatchValueInvalidError: value type does not fit match_type
    """
    try:
        match_type = MatchType(match_type)
    except ValueError:
        raise MatchTypeInvalidError(match_type) from None

    if match_type == MatchType.EQUAL:
        return equal_match_query(key, value)

    if match_type == MatchType.CONTAINS_IN:
        if not isinstance(value, (list, tuple)):
            raise MatchValueInvalidError(type(value).__name__, match_type.name)
        return contains_in_match_query(key, value)

    if not isinstance(value, str):
        raise MatchValueInvalidError(type(value).__name__, match_type.name)
    return _REGEX_MATCHERS[match_type](key, value)


class SearchPipelineBuilder:
    """
    Accumulates match fragments, sort keys and paging for one search.

    ``build_pipeline`` returns a pipeline whose single result document has the
    shape ``{"count": int, "total": int, "data": [...]}``: ``total`` is the
    number of matching documents and ``data`` the requested page of them.
    """

    def __init__(self):
        self._matches: Dict[str, Dict[str, Any]] = {}
        self._sort: Dict[str, int] = {}
        self._skip = 0
        self._limit: Optional[int] = None

    def sorted_by(self, sort_list: List[SortData]) -> "SearchPipelineBuilder":
        """Append sort keys in priority order."""
        if not sort_list:
            raise SortListInvalidError()

        for sort_data in sort_list:
            if sort_data.key in self._sort:
                raise SortKeyDuplicatedError(sort_data.key)
            self._sort[sort_data.key] = int(sort_data.sort_by)

        return self

    def match(self, key: str, value: Any, match_type: int) -> "SearchPipelineBuilder":
        """Constrain ``key``; each field can be matched only once."""
        if key in self._matches:
            raise MatchKeyDuplicatedError(key)

        self._matches[key] = create_match_query(key, value, match_type)
        return self

    def skip(self, skip: int) -> "SearchPipelineBuilder":
        if skip < 0:
            raise ValueError("skip cannot be negative")
        self._skip = skip
        return self

    def limit(self, limit: int) -> "SearchPipelineBuilder":
        if limit < 1:
            raise ValueError("limit can be only positive integer")
        self._limit = limit
        return self

    def build_pipeline(self) -> List[Dict[str, Any]]:
        """Assemble the match, facet and project stages."""
        conditions = list(self._matches.values())
        match_stage = {"$match": {"$and": conditions} if conditions else {}}

        paginate_result: List[Dict[str, Any]] = []
        if self._sort:
            paginate_result.append({"$sort": dict(self._sort)})
        paginate_result.append({"$skip": self._skip})
        if self._limit is not None:
            paginate_result.append({"$limit": self._limit})
        paginate_result.append({"$project": {"_id": 0}})

        facet_stage = {
            "$facet": {
                "paginate_result": paginate_result,
                "match_result": [{"$count": "total"}],
            }
        }

        project_stage = {
            "$project": {
                "count": {"$size": "$paginate_result"},
                "total": {"$ifNull": [{"$first": "$match_result.total"}, 0]},
                "data": "$paginate_result",
            }
        }

        return [match_stage, facet_stage, project_stage]
