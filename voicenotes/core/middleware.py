"""
Application middlewares: request context (id + access log) and CORS.
"""
import logging
import time
import uuid
from typing import Any, Dict

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from voicenotes.core.config import Settings, settings

REQUEST_ID_HEADER = "X-Request-Id"

_access_log = logging.getLogger("voicenotes.request")


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Tags each request with an id (echoed back in `X-Request-Id`) and logs one access line."""

    async def dispatch(self, request: Request, call_next):
        rid = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        request.state.request_id = rid
        started = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            response.headers[REQUEST_ID_HEADER] = rid
            return response
        finally:
            _access_log.info(
                "%s %s -> %s in %dms request_id=%s",
                request.method,
                request.url.path,
                status_code,
                (time.perf_counter() - started) * 1000,
                rid,
            )


def cors_options(cfg: Settings) -> Dict[str, Any]:
    if cfg.cors_allow_any:
        # Any origin is matched by regex; credentials must be off for that
        return dict(allow_origin_regex=".*", allow_methods=["*"], allow_headers=["*"], allow_credentials=False)
    return dict(allow_origins=cfg.cors_origins, allow_methods=["*"], allow_headers=["*"], allow_credentials=True)


def add_middlewares(app: FastAPI) -> None:
    app.add_middleware(CORSMiddleware, **cors_options(settings))
    app.add_middleware(RequestContextMiddleware)
