"""Exception handlers mapping errors to JSON `{"error": ...}` bodies."""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from verify_proxy.services.errors import BatchValidationError, ShutdownRejectedError

logger = logging.getLogger(__name__)


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _describe_validation_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid request")
    return f"{location}: {message}" if location else message


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return error_response(exc.status_code, str(exc.detail))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    message = _describe_validation_error(exc)
    logger.info("Rejected malformed request to %s: %s", request.url.path, message)
    return error_response(400, message)


async def batch_validation_handler(request: Request, exc: BatchValidationError) -> JSONResponse:
    logger.info("Rejected batch request: %s", exc)
    return error_response(400, str(exc))


async def shutdown_rejected_handler(request: Request, exc: ShutdownRejectedError) -> JSONResponse:
    logger.info("Rejected %s %s during shutdown", request.method, request.url.path)
    return error_response(503, str(exc))


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled error processing %s: %s", request.url.path, exc, exc_info=exc)
    return error_response(500, str(exc) or "Internal server error")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(BatchValidationError, batch_validation_handler)
    app.add_exception_handler(ShutdownRejectedError, shutdown_rejected_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
