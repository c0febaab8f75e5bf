import json
import logging
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from providers_hub.utils.rate_limit import optional_rate_limit
from .errors import CheckoutError, CheckoutValidationError, PaymentConfigurationError
from .purchases import PurchaseRequest
from . import service as payments_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/payments", tags=["Payments API"])
# Chemin historique appelé par le frontend existant
legacy_router = APIRouter(tags=["Payments API"])

CHECKOUT_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


def _json(status_code: int, content: Dict[str, Any]) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=content, headers=CORS_HEADERS)


def _error(exc: CheckoutError) -> JSONResponse:
    return _json(exc.status_code, payments_service.error_payload(exc))


# module providers_hub.payments.views
async def create_checkout_session(request: Request) -> JSONResponse:
    """
    Crée une session Stripe Checkout pour un achat (buyer_pro, tokens, seller_plus).
    - Entrée JSON: { "type": "...", "planSlug": "...", "userId": "..." }
    - OPTIONS -> 200 {} (pré-vol), autres méthodes que POST -> 405
    - Configuration Stripe/Supabase vérifiée avant toute lecture du corps
    - Réponses: {"url"} en 200, sinon {"error"} en 400/500; en-têtes CORS sur toutes les réponses
    """
    if request.method == "OPTIONS":
        return _json(200, {})
    if request.method != "POST":
        return _json(405, {"error": "Method not allowed"})

    builder = payments_service.get_checkout_builder()
    if builder is None:
        return _error(PaymentConfigurationError())

    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return _error(CheckoutValidationError("Invalid JSON body"))
    if not isinstance(body, dict):
        return _error(CheckoutValidationError("Invalid JSON body"))

    try:
        purchase = PurchaseRequest.model_validate(body)
    except ValidationError:
        return _error(CheckoutValidationError("Invalid checkout request"))

    try:
        base_url = payments_service.resolve_base_url(request.headers)
        return _json(200, builder.create_checkout_session(purchase, base_url))
    except CheckoutError as e:
        if e.status_code >= 500:
            logger.error("payments.checkout failed type=%s: %s", purchase.type, e)
        return _error(e)
    except Exception:
        logger.exception("Erreur create_checkout_session")
        return _error(CheckoutError())


_rate_limit = [Depends(optional_rate_limit(times=10, seconds=60))]
router.add_api_route(
    "/create-checkout-session",
    create_checkout_session,
    methods=CHECKOUT_METHODS,
    dependencies=_rate_limit,
)
legacy_router.add_api_route(
    "/.netlify/functions/create-checkout-session",
    create_checkout_session,
    methods=CHECKOUT_METHODS,
    dependencies=_rate_limit,
    include_in_schema=False,
)


@router.get("/plans")
def list_plans() -> Dict[str, List[Dict[str, Any]]]:
    """Catalogue des abonnements actifs (tri par prix)."""
    try:
        resolver = payments_service.get_plan_resolver()
    except RuntimeError:
        raise HTTPException(status_code=503, detail="Catalogue indisponible")
    return {"plans": resolver.list_active_plans()}


@router.get("/token-plans")
def list_token_plans() -> Dict[str, List[Dict[str, Any]]]:
    """Packs de tokens actifs (tri par nombre de tokens croissant)."""
    try:
        resolver = payments_service.get_plan_resolver()
    except RuntimeError:
        raise HTTPException(status_code=503, detail="Catalogue indisponible")
    return {"token_plans": resolver.list_token_plans()}
