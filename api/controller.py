"""
Generic CRUD routes and error translation.

``create_crud_router`` wires the five CRUD operations of one resource model
to HTTP verbs; the error helpers turn service errors into JSON envelopes.
"""

from typing import Any, Callable, Optional, Type

import structlog
from fastapi import APIRouter, Body, Depends, Response, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from api.models import OK_RESPONSE, ErrorResponse, ResultResponse
from utilities.errors import (
    OBJECT_ID_NOT_FOUND_ERROR_CODE,
    BaseError,
    ErrorKind,
    UnknownError,
)

logger = structlog.get_logger(__name__)

ERROR_RESPONSES = {
    status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse, "description": "Invalid request or data"},
    status.HTTP_404_NOT_FOUND: {"model": ErrorResponse, "description": "Item not found"},
    status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse, "description": "Unexpected error"},
}


def status_code_for(error: BaseError) -> int:
    """HTTP status for a service error."""
    if error.code == OBJECT_ID_NOT_FOUND_ERROR_CODE:
        return status.HTTP_404_NOT_FOUND
    if error.kind == ErrorKind.INTERNAL:
        return status.HTTP_500_INTERNAL_SERVER_ERROR
    return status.HTTP_400_BAD_REQUEST


def error_response(error: BaseError, status_code: Optional[int] = None) -> JSONResponse:
    """Build the ``{"error": {...}}`` envelope for ``error``."""
    return JSONResponse(
        status_code=status_code or status_code_for(error),
        content=ErrorResponse(error=error.to_dict()).model_dump(),
    )


def unknown_error_response(exc: Exception) -> JSONResponse:
    """Wrap an unclassified exception as UnknownError."""
    return error_response(UnknownError(str(exc)), status.HTTP_500_INTERNAL_SERVER_ERROR)


def create_crud_router(
    prefix: str,
    tag: str,
    item_class: Type[BaseModel],
    update_class: Type[BaseModel],
    search_class: Type[BaseModel],
    key_class: Type[BaseModel],
    item_id_key: str,
    get_model: Callable[[], Any],
) -> APIRouter:
    """
    Create the CRUD routes of one resource.

    Args:
        prefix: URL prefix, e.g. ``/api/books``
        tag: OpenAPI tag
        item_class: Full item schema accepted on insert
        update_class: Partial item schema accepted on update
        search_class: Search options schema
        key_class: Body schema carrying only the item ID, used on delete
        item_id_key: Name of the ID field in ``key_class``
        get_model: Dependency returning the resource model

    Returns:
        APIRouter with POST, GET, GET by ID, PUT and DELETE routes
    """
    router = APIRouter(prefix=prefix, tags=[tag], responses=ERROR_RESPONSES)

    @router.post("", response_model=ResultResponse, status_code=status.HTTP_201_CREATED)
    async def insert_item(item: item_class, model=Depends(get_model)):
        """Insert a new item."""
        await model.insert(item)
        logger.info("Item created", resource=tag, item_id=getattr(item, item_id_key))
        return OK_RESPONSE

    @router.get("/{item_id}", response_model=ResultResponse)
    async def read_item(item_id: str, model=Depends(get_model)):
        """Get a single item by ID."""
        item = await model.get_by_id(item_id)
        return {"result": jsonable_encoder(item)}

    @router.get("", response_model=ResultResponse)
    async def search_items(
        options: Optional[search_class] = Body(None),
        model=Depends(get_model)
    ):
        """
        Get one page of items matching the search options in the JSON body.

        Without a body the first page of all items is returned.
        """
        if options is None:
            options = search_class()
        pagination = await model.search(options)
        return {"result": jsonable_encoder(pagination)}

    @router.put("", status_code=status.HTTP_204_NO_CONTENT)
    async def update_item(item: update_class, model=Depends(get_model)):
        """Merge the given fields into an existing item."""
        await model.update(item)
        logger.info("Item updated", resource=tag, item_id=getattr(item, item_id_key))
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    @router.delete("", status_code=status.HTTP_204_NO_CONTENT)
    async def delete_item(key: key_class, model=Depends(get_model)):
        """Delete an item by the ID given in the body."""
        item_id = getattr(key, item_id_key)
        await model.delete(item_id)
        logger.info("Item deleted", resource=tag, item_id=item_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return router
