"""
Error taxonomy and the single response envelope.

Every failure leaving the service looks like
    {"success": false, "message": "...", "error": "<kind>"}
and every success like
    {"success": true, "message": "...", "data": ...}
"""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class AppError(Exception):
    kind = "internal_error"
    status_code = 500

    def __init__(self, message: str = "Please Try Again"):
        super().__init__(message)
        self.message = message


class ValidationError(AppError):
    kind = "validation_error"
    status_code = 400


class UnauthorizedError(AppError):
    kind = "unauthorized"
    status_code = 401


class ForbiddenError(AppError):
    kind = "forbidden"
    status_code = 403


class NotFoundError(AppError):
    kind = "not_found"
    status_code = 404


class ConflictError(AppError):
    kind = "conflict"
    status_code = 409


class UpstreamError(AppError):
    kind = "upstream_error"
    status_code = 502


class InternalError(AppError):
    pass


def ok(message: str, data: Any = None) -> dict:
    body = {"success": True, "message": message}
    if data is not None:
        body["data"] = data
    return body


def error_body(message: str, kind: str) -> dict:
    return {"success": False, "message": message, "error": kind}


async def app_error_handler(request: Request, exc: AppError):
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.message, exc.kind))


async def request_validation_handler(request: Request, exc: RequestValidationError):
    missing = [".".join(str(p) for p in err["loc"][1:]) for err in exc.errors()]
    message = f"Invalid or missing fields: {', '.join(missing)}" if missing else "Invalid request"
    return JSONResponse(
        status_code=400,
        content={**error_body(message, ValidationError.kind), "detail": jsonable_encoder(exc.errors())},
    )


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content=error_body("Please Try Again", InternalError.kind))


def register_error_handlers(app: FastAPI):
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
