"""
Gestionnaires d'exceptions.
- HTTPException: corps JSON {"detail"} pour tous les clients API.
- CheckoutError non interceptée par la vue: corps {"error"} avec le message public.
"""
import logging
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from providers_hub.payments.errors import CheckoutError

logger = logging.getLogger(__name__)

def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=exc.headers)

    @app.exception_handler(CheckoutError)
    async def checkout_error_handler(request: Request, exc: CheckoutError):
        if exc.status_code >= 500:
            logger.error("checkout error path=%s: %s", request.url.path, exc)
        return JSONResponse(status_code=exc.status_code, content={"error": exc.public_message})
