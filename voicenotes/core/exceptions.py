"""
Global exception handlers for consistent API errors.

Every error body carries an `error` message (and `request_id` when known).
"""
import logging
from typing import Any, Dict

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from voicenotes.core.errors import VoiceNotesError


def _req_id(request: Request) -> str | None:
    return getattr(getattr(request, "state", object()), "request_id", None)


def _with_request_id(request: Request, body: Dict[str, Any]) -> Dict[str, Any]:
    rid = _req_id(request)
    if rid:
        body["request_id"] = rid
    return body


def register_exception_handlers(app: FastAPI) -> None:
    log = logging.getLogger("voicenotes.errors")

    @app.exception_handler(VoiceNotesError)
    async def _domain_handler(request: Request, exc: VoiceNotesError):
        if exc.status_code >= 500:
            log.error("%s: %s request_id=%s", type(exc).__name__, exc.detail or exc.message, _req_id(request))
        return JSONResponse(status_code=exc.status_code, content=_with_request_id(request, exc.to_payload()))

    @app.exception_handler(StarletteHTTPException)
    async def _http_exc_handler(request: Request, exc: StarletteHTTPException):
        body: Dict[str, Any] = {"error": exc.detail or "HTTP error"}
        return JSONResponse(status_code=exc.status_code, content=_with_request_id(request, body))

    @app.exception_handler(RequestValidationError)
    async def _validation_handler(request: Request, exc: RequestValidationError):
        body: Dict[str, Any] = {"error": "Validation error", "errors": jsonable_encoder(exc.errors())}
        return JSONResponse(status_code=422, content=_with_request_id(request, body))

    @app.exception_handler(Exception)
    async def _generic_handler(request: Request, exc: Exception):
        log.exception("Unhandled error request_id=%s", _req_id(request))
        body: Dict[str, Any] = {"error": "Internal server error"}
        return JSONResponse(status_code=500, content=_with_request_id(request, body))
