"""
Factory d'application pour les entrypoints (providers_hub.asgi, tests).
"""
from fastapi import FastAPI
from .lifespan import lifespan
from .middlewares import register_basic_middlewares, register_security_middleware
from .exceptions import register_exception_handlers
from .routers import register_routers

def create_app() -> FastAPI:
    """
    Construit l'app FastAPI avec le lifespan et enregistre:
      - middlewares CORS et en-têtes de sécurité
      - gestionnaires d'exceptions
      - tous les routers (auth, payments, signup, categories, projects, health)
    """
    app = FastAPI(title="Providers Hub API", lifespan=lifespan)
    register_basic_middlewares(app)
    register_security_middleware(app)
    register_exception_handlers(app)
    register_routers(app)
    return app
