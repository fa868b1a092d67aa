"""
Translation of every error into the JSON error envelope:

    {"success": false, "message": str, "statusCode": int, "errors"?: {field: [msg]}}
"""

import logging
from typing import Dict, List, Optional
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException
from app.core.errors import AppError, ValidationError
from app.schemas.common import ErrorResponse, strip_value_error_prefix

logger = logging.getLogger(__name__)

# Request locations FastAPI puts in front of the field path
LOCATION_PREFIXES = ("body", "query", "path", "header", "cookie")


def error_response(
    status_code: int,
    message: str,
    errors: Optional[Dict[str, List[str]]] = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    body = ErrorResponse(message=message, status_code=status_code, errors=errors or None)
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(by_alias=True, exclude_none=True),
        headers=headers,
    )


def validation_errors_to_fields(errors) -> Dict[str, List[str]]:
    """Group pydantic error entries by dotted field path"""
    fields: Dict[str, List[str]] = {}
    for error in errors:
        loc = [str(part) for part in error.get("loc", ())]
        if loc and loc[0] in LOCATION_PREFIXES:
            loc = loc[1:]
        field = ".".join(loc) or "body"
        fields.setdefault(field, []).append(strip_value_error_prefix(error.get("msg", "Invalid value")))
    return fields


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == status.HTTP_401_UNAUTHORIZED else None
    errors = exc.errors if isinstance(exc, ValidationError) else None
    return error_response(exc.status_code, exc.message, errors=errors, headers=headers)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return error_response(
        status.HTTP_400_BAD_REQUEST,
        "Validation failed",
        errors=validation_errors_to_fields(exc.errors()),
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        message = f"Route {request.url.path} not found"
    else:
        message = str(exc.detail)
    return error_response(exc.status_code, message, headers=getattr(exc, "headers", None))


# SQLSTATE for unique_violation
UNIQUE_VIOLATION = "23505"


def integrity_error_message(exc: IntegrityError) -> str:
    """Name the constraint family a failed write hit"""
    orig = exc.orig
    if getattr(orig, "pgcode", None) == UNIQUE_VIOLATION or "unique" in str(orig).lower():
        return "Duplicate field value entered"
    return "Request conflicts with existing data"


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    # Usually two writers passed the service-level uniqueness check at the same time
    logger.warning(f"Integrity error on {request.method} {request.url.path}: {exc.orig}")
    return error_response(status.HTTP_409_CONFLICT, integrity_error_message(exc))


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal Server Error")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
