import logging

from fastapi import HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.request_id import request_id_ctx


logger = logging.getLogger(__name__)


class AccountServiceError(Exception):
    """Error de dominio con código y status HTTP asociados"""

    status_code = 500
    code = "INTERNAL_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(AccountServiceError):
    status_code = 400
    code = "VALIDATION_ERROR"


class ConflictError(AccountServiceError):
    status_code = 409
    code = "CONFLICT"


class NotFoundError(AccountServiceError):
    status_code = 404
    code = "NOT_FOUND"


class UnknownAccountError(NotFoundError):
    """Cuenta inexistente al consultar por ID (se responde con 400)"""

    status_code = 400


class UnauthorizedError(AccountServiceError):
    status_code = 401
    code = "UNAUTHORIZED"


class InternalError(AccountServiceError):
    pass


def _get_request_id(request: Request) -> str:
    header_request_id = request.headers.get("X-Request-ID")
    if header_request_id:
        return header_request_id
    ctx_request_id = request_id_ctx.get()
    return ctx_request_id or ""


def account_service_exception_handler(request: Request, exc: AccountServiceError) -> JSONResponse:
    # El detalle de los errores internos queda solo en los logs
    detail = "Error interno del servidor" if isinstance(exc, InternalError) else exc.message
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "detail": detail,
            "code": exc.code,
            "request_id": _get_request_id(request),
        },
    )


def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "detail": exc.detail,
            "code": "HTTP_EXCEPTION",
            "request_id": _get_request_id(request),
        },
    )


def starlette_http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "detail": exc.detail,
            "code": "HTTP_EXCEPTION",
            "request_id": _get_request_id(request),
        },
    )


def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content={
            "detail": jsonable_encoder(exc.errors()),
            "code": "VALIDATION_ERROR",
            "request_id": _get_request_id(request),
        },
    )


def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error", extra={"request_id": _get_request_id(request)})
    return JSONResponse(
        status_code=500,
        content={
            "detail": "Error interno del servidor",
            "code": "INTERNAL_ERROR",
            "request_id": _get_request_id(request),
        },
    )


def register_exception_handlers(app) -> None:
    app.add_exception_handler(AccountServiceError, account_service_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(StarletteHTTPException, starlette_http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
