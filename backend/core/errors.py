"""
Domain errors and the FastAPI handlers that turn them into `{message}` payloads.

- ValidationError         -> 400
- NotFoundError           -> 404
- ConflictError           -> 409
- IngredientNotFoundError -> 400 (aborts a sale, same as insufficient stock)
- InsufficientStockError  -> 400
- anything else           -> 500 with message passthrough
"""

import logging
from decimal import Decimal
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class PosError(Exception):
    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, **extra: Any):
        super().__init__(message)
        self.message = message
        self.extra = extra

    def to_payload(self) -> Dict[str, Any]:
        return {"message": self.message, **self.extra}


class ValidationError(PosError):
    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(PosError):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(PosError):
    status_code = status.HTTP_409_CONFLICT


class IngredientNotFoundError(NotFoundError):
    # A recipe references an inventory name that does not exist; fails the whole sale.
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, ingredient_name: str):
        super().__init__(f"Inventory item {ingredient_name} not found")
        self.ingredient_name = ingredient_name


class InsufficientStockError(PosError):
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, ingredient_name: str, available: Decimal, required: Decimal):
        super().__init__(
            f"Insufficient stock for {ingredient_name}. "
            f"Available: {_fmt(available)}, Required: {_fmt(required)}"
        )
        self.ingredient_name = ingredient_name
        self.available = available
        self.required = required


def _fmt(q: Optional[Decimal]) -> str:
    if q is None:
        return "0"
    q = Decimal(q)
    if q == q.to_integral_value():
        return str(int(q))
    return format(q.normalize(), "f")


# Routes under these prefixes answer with the {success, message} envelope.
_ENVELOPE_PREFIXES = ("/menu", "/kitchen")


def _wants_envelope(request: Request) -> bool:
    return request.url.path.startswith(_ENVELOPE_PREFIXES)


def _error_response(request: Request, status_code: int, payload: Dict[str, Any]) -> JSONResponse:
    if _wants_envelope(request):
        payload = {"success": False, **payload}
    return JSONResponse(status_code=status_code, content=payload)


async def pos_error_handler(request: Request, exc: PosError) -> JSONResponse:
    logger.info("%s %s rejected: %s", request.method, request.url.path, exc.message)
    return _error_response(request, exc.status_code, exc.to_payload())


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return _error_response(request, exc.status_code, {"message": str(exc.detail)})


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    parts = []
    for err in errors:
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    message = "; ".join(parts) or "Invalid request"
    return _error_response(request, status.HTTP_400_BAD_REQUEST, {"message": message})


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("%s %s failed", request.method, request.url.path)
    return _error_response(request, status.HTTP_500_INTERNAL_SERVER_ERROR, {"message": str(exc)})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(PosError, pos_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
