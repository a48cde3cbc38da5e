# (c) Nelen & Schuurmans

import logging

from fastapi.requests import Request
from fastapi.responses import JSONResponse
from starlette import status

from keyset_python import BadRequest
from keyset_python import DoesNotExist
from keyset_python import StaticCallError
from keyset_python import Unauthorized
from keyset_python import ValueObject

logger = logging.getLogger(__name__)

__all__ = [
    "ValidationErrorResponse",
    "ErrorResponse",
    "not_found_handler",
    "validation_error_handler",
    "unauthorized_handler",
    "static_call_error_handler",
]


class ValidationErrorEntry(ValueObject):
    loc: list[str | int]
    msg: str
    type: str


class ValidationErrorResponse(ValueObject):
    error: str
    detail: list[ValidationErrorEntry]


class ErrorResponse(ValueObject):
    error: str


async def not_found_handler(request: Request, exc: DoesNotExist) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"error": "Not found"},
    )


async def validation_error_handler(request: Request, exc: BadRequest) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=ValidationErrorResponse(
            error="Validation error", detail=exc.errors()  # type: ignore
        ).model_dump(mode="json"),
    )


async def unauthorized_handler(request: Request, exc: Unauthorized) -> JSONResponse:
    if exc.args:
        logger.info(f"unauthorized: {exc}")
    return JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content={"error": "Unauthorized"},
        headers={"WWW-Authenticate": "Bearer"},
    )


async def static_call_error_handler(
    request: Request, exc: StaticCallError
) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"error": str(exc)},
    )
