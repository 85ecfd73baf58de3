"""Error taxonomy for the API.

Every failure leaves the service in the same envelope:

    {"success": false, "message": "...", "errors": [{"field": ..., "message": ...}]}

``errors`` is only present for validation failures; server faults add an
``error`` key whose text is redacted in production.
"""
from typing import Dict, List, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

import config
from logging_config import get_logger

logger = get_logger(__name__)


class APIError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, errors: Optional[List[Dict[str, str]]] = None):
        self.message = message
        self.errors = errors or []
        super().__init__(message)

    def to_dict(self) -> dict:
        body = {"success": False, "message": self.message}
        if self.errors:
            body["errors"] = self.errors
        return body


class ValidationFailed(APIError):
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str = "Validation failed", errors: Optional[List[Dict[str, str]]] = None):
        super().__init__(message, errors)


class NotFound(APIError):
    status_code = status.HTTP_404_NOT_FOUND


class BadRequest(APIError):
    status_code = status.HTTP_400_BAD_REQUEST


def field_error(field: str, message: str) -> Dict[str, str]:
    return {"field": field, "message": message}


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(APIError)
    async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
        logger.info("request_rejected", path=request.url.path, status_code=exc.status_code, message=exc.message)
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = []
        for err in exc.errors():
            loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
            errors.append(field_error(".".join(loc) or "body", err.get("msg", "Invalid value")))
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=ValidationFailed(errors=errors).to_dict(),
        )

    @app.exception_handler(HTTPException)
    async def http_error_handler(request: Request, exc: HTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "message": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def server_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error("unhandled_error", path=request.url.path, error=str(exc), exc_info=exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "success": False,
                "message": "Server error",
                "error": "Internal server error" if config.is_production() else str(exc),
            },
        )
