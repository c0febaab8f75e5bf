"""
Cas d'usage 'payments': orchestre résolution du plan, variante d'achat et passerelle Stripe.
"""
from decimal import Decimal
from typing import Any, Dict, Mapping, Optional
import logging

from providers_hub import config
from providers_hub.infra.supabase_client import get_service_supabase

from .errors import CheckoutError, CheckoutValidationError, PlanNotFoundError, UpstreamError
from .plans import PlanResolver
from .purchases import PurchaseRequest, PurchaseVariant, default_variants
from .repository import PlanStore
from .stripe_client import StripeGateway

logger = logging.getLogger(__name__)


class CheckoutSessionBuilder:
    """
    Construit et soumet une session Checkout pour une demande d'achat.
    - Sans état par requête: passerelle et résolveur sont injectés et réutilisés.
    - Une lecture (plan) puis une écriture (session) par appel, rien n'est rejoué.
    """

    def __init__(
        self,
        gateway: StripeGateway,
        plans: PlanResolver,
        token_price_gbp: Decimal = config.TOKEN_PRICE_GBP,
        seller_plus_slug: str = config.SELLER_PLUS_SLUG,
        variants: Optional[Dict[str, PurchaseVariant]] = None,
    ):
        self._gateway = gateway
        self._plans = plans
        self._variants = variants if variants is not None else default_variants(token_price_gbp, seller_plus_slug)

    def create_checkout_session(self, request: PurchaseRequest, base_url: str) -> Dict[str, str]:
        if not request.type or not request.user_id:
            raise CheckoutValidationError("Missing type or userId")
        variant = self._variants.get(request.type)
        if variant is None:
            raise CheckoutValidationError("Unsupported purchase type")
        variant.validate(request)

        slug = variant.plan_slug(request)
        try:
            plan = self._plans.resolve_plan(variant.plan_kind, slug)
        except PlanNotFoundError as e:
            raise PlanNotFoundError(variant.not_found_message) from e

        spec = variant.build_spec(request, plan, slug, base_url)
        try:
            url = self._gateway.create_checkout_session(spec)
        except Exception as e:
            logger.exception("payments.service.create_checkout_session gateway failed type=%s user_id=%s", request.type, request.user_id)
            raise UpstreamError(str(e)) from e
        logger.info("payments.checkout type=%s user_id=%s slug=%s amount=%s", request.type, request.user_id, slug, spec.line_item.unit_amount)
        return {"url": url}


def resolve_base_url(headers: Mapping[str, str]) -> str:
    """
    Origine utilisée pour les URLs de retour Stripe.
    Ordre: FRONTEND_URL, puis URL (plateforme), puis en-têtes de la requête, puis localhost.
    """
    configured = config.FRONTEND_URL or config.PLATFORM_URL
    if configured:
        return configured.rstrip("/")
    host = headers.get("host")
    if host:
        proto = headers.get("x-forwarded-proto") or "https"
        return f"{proto}://{host}"
    return config.LOCAL_FRONTEND_URL


_builder: Optional[CheckoutSessionBuilder] = None


def get_plan_resolver() -> PlanResolver:
    return PlanResolver(PlanStore(get_service_supabase()))


def get_checkout_builder() -> Optional[CheckoutSessionBuilder]:
    """
    Instance unique par processus, créée à la première requête.
    - None si Stripe ou Supabase (URL + clé service) ne sont pas configurés.
    """
    global _builder
    if not config.payments_configured():
        return None
    if _builder is None:
        _builder = CheckoutSessionBuilder(
            gateway=StripeGateway(config.STRIPE_SECRET_KEY, config.STRIPE_API_VERSION),
            plans=get_plan_resolver(),
            token_price_gbp=config.TOKEN_PRICE_GBP,
            seller_plus_slug=config.SELLER_PLUS_SLUG,
        )
    return _builder


def reset_checkout_builder() -> None:
    global _builder
    _builder = None


def error_payload(exc: CheckoutError) -> Dict[str, Any]:
    return {"error": exc.public_message}
