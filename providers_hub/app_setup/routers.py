"""
Registre central des routers (API v1, alias historique du checkout, health).
"""
from fastapi import FastAPI
from providers_hub.auth.views import api_router as auth_api_router
from providers_hub.payments import views as payments_views
from providers_hub.signup import views as signup_views
from providers_hub.categories import views as categories_views
from providers_hub.projects import views as projects_views
from providers_hub.health.router import router as health_router

def register_routers(app: FastAPI) -> None:
    # API v1
    app.include_router(auth_api_router)
    app.include_router(payments_views.router)
    app.include_router(signup_views.router)
    app.include_router(categories_views.router)
    app.include_router(projects_views.router)
    # Chemin historique du checkout (frontend existant)
    app.include_router(payments_views.legacy_router)
    # Health & monitoring
    app.include_router(health_router)
