"""
    Centralized exception handling for the FastAPI application.

    Two failure levels reach the caller: validation failures (400 with a list
    of field errors) and operational failures (500 with a generic message).
    The underlying cause of an operational failure is only ever logged.
"""
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging

log = logging.getLogger(__name__)

class APIException(Exception):
    """Base class for API exceptions."""
    def __init__(self, status_code: int, detail: str):
        self.status_code = status_code
        self.detail = detail
        super().__init__(self.detail)

class UploadUrlException(APIException):
    """Exception for presigned upload URL failures."""
    def __init__(self, detail: str = "Failed to generate upload URL"):
        super().__init__(status_code=500, detail=detail)

class MetadataSaveException(APIException):
    """Exception for metadata write failures."""
    def __init__(self, detail: str = "Failed to save metadata"):
        super().__init__(status_code=500, detail=detail)

class SearchException(APIException):
    """Exception for catalog scan failures."""
    def __init__(self, detail: str = "Search failed"):
        super().__init__(status_code=500, detail=detail)

class ImageDeleteException(APIException):
    """Exception for object or metadata delete failures."""
    def __init__(self, detail: str = "Failed to delete image"):
        super().__init__(status_code=500, detail=detail)

def format_validation_errors(errors) -> list:
    """Flattens pydantic error dicts into field errors."""
    formatted = []
    for err in errors:
        loc = list(err.get("loc", ()))
        location = str(loc[0]) if loc else "body"
        path = ".".join(str(part) for part in loc[1:])
        formatted.append({
            "type": "field",
            "location": location,
            "path": path,
            "msg": err.get("msg", "Invalid value"),
        })
    return formatted

async def api_exception_handler(request: Request, exc: APIException):
    """Handles API exceptions."""
    log.error(f"API Exception: {exc.detail}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
    )

async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handles request validation errors as 400 with the field error list."""
    errors = format_validation_errors(exc.errors())
    log.info(f"Validation failed for {request.url.path}: {len(errors)} error(s)")
    return JSONResponse(
        status_code=400,
        content={"errors": errors},
    )

async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Handles HTTP exceptions (unknown routes, wrong methods)."""
    log.warning(f"HTTP Exception: {exc.detail}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )

async def generic_exception_handler(request: Request, exc: Exception):
    """Handles all other exceptions."""
    log.error(f"Unhandled Exception: {str(exc)}", exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"error": "An unexpected error occurred."},
    )

def add_exception_handlers(app):
    """Adds exception handlers to the FastAPI app."""
    app.add_exception_handler(APIException, api_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)
