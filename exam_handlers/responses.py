from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .errors import HandlerError
from .log import get_logger

logger = get_logger(__name__)

CORS_HEADERS = {
    "Content-Type": "application/json",
    "Access-Control-Allow-Origin": "*",
}

_HTTP_ERROR_CODES = {
    400: "VALIDATION",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
}


# ==================== ENVELOPE ====================

def envelope(status: str, message: Optional[str] = None, data: Any = None, details: Any = None, **extra) -> Dict:
    body = {"status": status}
    if message is not None:
        body["message"] = message
    if data is not None:
        body["data"] = data
    if details is not None:
        body["details"] = details
    body.update(extra)
    return body


def success(data: Any = None, message: Optional[str] = None, status_code: int = 200, **extra) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(envelope("success", message, data, **extra)),
    )


def error(status_code: int, message: str, error_code: str, details: Any = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(envelope("error", message, details=details, error_code=error_code)),
    )


# ==================== EXCEPTION HANDLERS ====================

def _handler_error(request: Request, exc: HandlerError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return error(exc.status_code, exc.message, exc.error_code, exc.details)


def _request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    return error(400, "Invalid request body.", "VALIDATION", exc.errors())


def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    code = _HTTP_ERROR_CODES.get(exc.status_code, "HTTP_ERROR")
    return error(exc.status_code, str(exc.detail), code)


async def _catch_unexpected(request: Request, call_next):
    """Last-resort conversion of uncaught exceptions into a 500 envelope"""
    try:
        return await call_next(request)
    except Exception as exc:
        logger.exception("Unexpected error on %s %s", request.method, request.url.path)
        return error(500, "An unexpected error occurred.", "INTERNAL_ERROR", str(exc))


def create_base_app(title: str, description: str) -> FastAPI:
    """FastAPI app with CORS and the envelope-producing exception handlers"""
    app = FastAPI(title=title, description=description, version="1.0.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(HandlerError, _handler_error)
    app.add_exception_handler(RequestValidationError, _request_validation_error)
    app.add_exception_handler(StarletteHTTPException, _http_error)
    app.middleware("http")(_catch_unexpected)
    return app
