"""
Gestionnaires d'exceptions.
- Erreurs métier du panier (CartError) -> JSON {"detail": ...} avec un code HTTP par type.
- HTTPException conserve la réponse JSON standard.
"""
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
import logging

from glori.cart.errors import (
    CartError,
    FetchFailure,
    ItemNotFound,
    MutationFailure,
    MutationRejected,
    ValidationError,
)

logger = logging.getLogger(__name__)

CART_ERROR_STATUS = (
    (ValidationError, 422),
    (ItemNotFound, 404),
    (MutationRejected, 409),
    (MutationFailure, 502),
    (FetchFailure, 503),
)

def status_for(exc: CartError) -> int:
    for exc_type, status in CART_ERROR_STATUS:
        if isinstance(exc, exc_type):
            return status
    return 400

def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(CartError)
    async def cart_error_handler(request: Request, exc: CartError):
        status = status_for(exc)
        if status >= 500:
            logger.warning("cart error on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=status, content={"detail": str(exc)})

    @app.exception_handler(HTTPException)
    async def http_error_handler(request: Request, exc: HTTPException):
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=exc.headers)
