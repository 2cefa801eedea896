"""Exception handlers rendering the uniform error payload.

Response formatting:
    Every error response body is
    `{"code", "message", "action", "timestamp", "path"}` with the HTTP status
    taken from the classified `ErrorKind`.

Handled exception families:
    - `GatewayError`: already classified (request errors, 501 feature gating).
    - `ProviderError` / `UpstreamHTTPError`: classified by `classify_exception`.
    - Framework validation errors (malformed JSON, wrong field types) and
      framework HTTP errors (unknown route, wrong method): `REQUEST_ERROR`
      with the framework's status.
    - Anything else: `INTERNAL_ERROR` 500, logged with traceback, generic
      message only.
"""

import logging
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.errors import ErrorKind, GatewayError, classify_exception
from app.llm.errors import ProviderError, UpstreamHTTPError


logger = logging.getLogger(__name__)


def error_payload(kind: ErrorKind, message: str, path: str, code: str | None = None) -> dict:
    return {
        "code": code or kind.code,
        "message": message,
        "action": kind.action,
        "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        "path": path,
    }


def error_response(error: GatewayError, request: Request, status_code: int | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code or error.kind.status_code,
        content=error_payload(error.kind, error.message, request.url.path),
    )


async def handle_gateway_error(request: Request, exc: GatewayError) -> JSONResponse:
    return error_response(exc, request)


async def handle_provider_error(request: Request, exc: Exception) -> JSONResponse:
    error = classify_exception(exc)
    logger.warning("Provider failure on %s -> %s: %s", request.url.path, error.kind.code, exc)
    return error_response(error, request)


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = "; ".join(
        f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg', '')}"
        for err in exc.errors()
    )
    error = GatewayError.bad_request(details or "Request xatoligi")
    return error_response(error, request)


async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    error = GatewayError.bad_request(str(exc.detail) if exc.detail else "Request xatoligi")
    return error_response(error, request, status_code=exc.status_code)


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s", request.url.path)
    return error_response(classify_exception(exc), request)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(GatewayError, handle_gateway_error)
    app.add_exception_handler(ProviderError, handle_provider_error)
    app.add_exception_handler(UpstreamHTTPError, handle_provider_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(Exception, handle_unexpected_error)
