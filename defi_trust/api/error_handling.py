"""Error handling utilities for API endpoints."""

import logging
from http import HTTPStatus
from typing import Any, Dict

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from starlette.responses import JSONResponse

from defi_trust.utils.errors import ErrorCode, ErrorResponse, TrustEngineError

# Set up logger
logger = logging.getLogger(__name__)


def success_response(data: Any) -> Dict[str, Any]:
    """Wrap endpoint data in the success envelope.

    Pydantic models are serialised with their camelCase aliases.
    """
    return {"success": True, "data": jsonable_encoder(data, by_alias=True)}


def error_response(status_code: int, error: Dict[str, Any]) -> JSONResponse:
    """Build an error envelope response."""
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": jsonable_encoder(error)},
    )


async def trust_engine_error_handler(request: Request, exc: TrustEngineError) -> JSONResponse:
    """Translate a domain error into its HTTP status and error envelope."""
    if exc.status_code >= HTTPStatus.INTERNAL_SERVER_ERROR:
        logger.error(f"{exc.code.value} on {request.url.path}: {exc.message}")
    else:
        logger.warning(f"{exc.code.value} on {request.url.path}: {exc.message}")
    return error_response(exc.status_code, exc.to_dict())


async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed request bodies and parameters as validation errors."""
    errors = [
        {
            "field": ".".join(str(part) for part in error.get("loc", ())),
            "message": error.get("msg", "Invalid value"),
        }
        for error in exc.errors()
    ]
    logger.warning(f"Invalid request on {request.url.path}: {errors}")
    error = ErrorResponse(
        code=ErrorCode.VALIDATION_ERROR.value,
        message="Invalid request",
        details={"errors": errors},
    )
    return error_response(HTTPStatus.BAD_REQUEST, error.model_dump())


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle uncaught exceptions."""
    logger.error(f"Unhandled exception: {str(exc)}", exc_info=True)
    error = ErrorResponse(code=ErrorCode.UNKNOWN_ERROR.value, message="Internal server error")
    return error_response(HTTPStatus.INTERNAL_SERVER_ERROR, error.model_dump())


def register_exception_handlers(app: FastAPI) -> None:
    """Install the API's exception handlers on an application."""
    app.add_exception_handler(TrustEngineError, trust_engine_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
