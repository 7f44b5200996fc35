"""
FastAPI main application for the Books and Users CRUD API.
"""

from contextlib import asynccontextmanager
from datetime import datetime

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from api import dependencies
from api.config import config as api_config
from api.controller import create_crud_router, error_response, unknown_error_response
from api.models import BookKey, ErrorResponse, HealthResponse, UserKey
from storage.books import BooksModel
from storage.database import MongoDBConnection
from storage.models import Book, BookSearchOptions, BookUpdate, User, UserSearchOptions, UserUpdate
from storage.users import UsersModel
from utilities.config import config
from utilities.errors import BaseError, DataValidationFailedError
from utilities.logger import setup_logging

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    setup_logging(
        log_level=config.log_level,
        log_format=config.log_format,
        log_file=config.get_log_file_path(),
        debug=config.debug
    )
    logger.info("Starting CRUD API")

    connection = MongoDBConnection(config)
    try:
        await connection.connect()
        dependencies.connection = connection
        dependencies.books_model = await BooksModel.create(connection, config.search_page_size)
        dependencies.users_model = await UsersModel.create(connection, config.search_page_size)
        logger.info("Resource models ready", page_size=config.search_page_size)

    except Exception as e:
        logger.error("Failed to initialize database", error=str(e))
        await connection.disconnect()
        raise

    yield

    logger.info("Shutting down CRUD API")
    dependencies.books_model = None
    dependencies.users_model = None
    dependencies.connection = None
    await connection.disconnect()


app = FastAPI(
    title=api_config.api_title,
    description=api_config.api_description,
    version=api_config.api_version,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=api_config.cors_origins,
    allow_credentials=api_config.cors_allow_credentials,
    allow_methods=api_config.cors_allow_methods,
    allow_headers=api_config.cors_allow_headers,
)


# Exception handlers
@app.exception_handler(BaseError)
async def service_error_handler(request: Request, exc: BaseError):
    """Translate service errors into error envelopes."""
    response = error_response(exc)
    if response.status_code >= 500:
        logger.error("Internal service error", error=exc.name, message=exc.message, path=request.url.path)
    return response


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Report bodies that cannot be bound as DataValidationFailed."""
    logger.info("Request body rejected", path=request.url.path, errors=exc.errors())
    return error_response(DataValidationFailedError(), status.HTTP_400_BAD_REQUEST)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Handle HTTP exceptions, including unknown routes and methods."""
    body = ErrorResponse(error={"code": exc.status_code, "name": "HTTPException", "message": str(exc.detail)})
    return JSONResponse(
        status_code=exc.status_code,
        content=body.model_dump(),
        headers=exc.headers
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle general exceptions."""
    logger.error("Unhandled exception", error=str(exc), path=request.url.path)
    return unknown_error_response(exc)


# Health check endpoint
@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check():
    """Health check endpoint."""
    db_status = "unavailable"
    if dependencies.connection is not None:
        health_info = await dependencies.connection.health_check()
        db_status = health_info.get("status", "unknown")

    return HealthResponse(
        status="healthy" if db_status == "healthy" else "degraded",
        timestamp=datetime.utcnow(),
        version=api_config.api_version,
        database_status=db_status
    )


app.include_router(create_crud_router(
    prefix="/api/books",
    tag="Books",
    item_class=Book,
    update_class=BookUpdate,
    search_class=BookSearchOptions,
    key_class=BookKey,
    item_id_key="book_id",
    get_model=dependencies.get_books_model,
))

app.include_router(create_crud_router(
    prefix="/api/users",
    tag="Users",
    item_class=User,
    update_class=UserUpdate,
    search_class=UserSearchOptions,
    key_class=UserKey,
    item_id_key="user_id",
    get_model=dependencies.get_users_model,
))


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "api.main:app",
        host=api_config.host,
        port=api_config.port,
        reload=api_config.debug,
        log_level="info"
    )
