"""
Middlewares transverses de l'application.
- register_basic_middlewares: CORS (origines CORS_ORIGINS).
- register_security_middleware: en-têtes de sécurité sur toutes les réponses JSON.
"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from providers_hub.config import CORS_ORIGINS, COOKIE_SECURE

def register_basic_middlewares(app: FastAPI) -> None:
    # allow_credentials est incompatible avec l'origine joker "*"
    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials="*" not in CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

def register_security_middleware(app: FastAPI) -> None:
    @app.middleware("http")
    async def security_headers(request, call_next):
        response = await call_next(request)
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("Referrer-Policy", "no-referrer")
        if COOKIE_SECURE:
            response.headers.setdefault("Strict-Transport-Security", "max-age=63072000; includeSubDomains; preload")
        return response
