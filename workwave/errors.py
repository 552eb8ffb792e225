"""
API error taxonomy and the exception handlers that render it.

Every error body is ``{"error": "<message>"}``. Services raise these the same way
route code raises ``HTTPException``.
"""

import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class NotAuthenticatedError(HTTPException):
    def __init__(self, detail: str = "Not authenticated"):
        super().__init__(status_code=401, detail=detail)


class ForbiddenError(HTTPException):
    def __init__(self, detail: str = "Forbidden"):
        super().__init__(status_code=403, detail=detail)


class NotFoundError(HTTPException):
    def __init__(self, detail: str = "Not found"):
        super().__init__(status_code=404, detail=detail)


class ValidationError(HTTPException):
    def __init__(self, detail: str = "Invalid request data"):
        super().__init__(status_code=400, detail=detail)


class ConflictError(HTTPException):
    def __init__(self, detail: str = "Conflict"):
        super().__init__(status_code=409, detail=detail)


class PaymentProviderError(HTTPException):
    """
    Upstream payment provider call failed.

    Rendered like any other internal failure: 500 with a generic body. The caller
    logs the provider error before raising.
    """

    def __init__(self, reason: str = "Payment provider error"):
        super().__init__(status_code=500, detail="Internal server error")
        self.reason = reason


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Request body/query validation failures are plain 400s"""
    errors = exc.errors()
    logger.warning(f"⚠️ Validation error on {request.method} {request.url.path}: {len(errors)} issue(s)")
    for error in errors:
        logger.debug(f"   - {error.get('loc')}: {error.get('msg')}")
    return JSONResponse(
        status_code=400,
        content={
            "error": "Invalid request data",
            "details": [
                {"loc": list(error.get("loc", ())), "msg": error.get("msg"), "type": error.get("type")}
                for error in errors
            ],
        },
    )


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"❌ Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
