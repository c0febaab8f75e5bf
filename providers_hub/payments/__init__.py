"""
Module 'payments' (feature-first): point d'entrée public.
Réunit résolution des plans, variantes d'achat, passerelle Stripe et builder de checkout.
"""

from .errors import (
    CheckoutError,
    CheckoutValidationError,
    PlanNotFoundError,
    PaymentConfigurationError,
    UpstreamError,
)
from .plans import (
    PlanKind,
    Plan,
    TokenPlan,
    PlanResolver,
    to_minor_units,
    subscription_amount,
    token_bundle_amount,
    seller_plus_amount,
)
from .purchases import (
    PurchaseRequest,
    LineItem,
    CheckoutSessionSpec,
    PurchaseVariant,
    BuyerProPurchase,
    TokenPurchase,
    SellerPlusPurchase,
    default_variants,
)
from .repository import PlanStore
from .stripe_client import StripeGateway
from .service import CheckoutSessionBuilder, resolve_base_url, get_checkout_builder

__all__ = [
    # errors
    "CheckoutError",
    "CheckoutValidationError",
    "PlanNotFoundError",
    "PaymentConfigurationError",
    "UpstreamError",
    # plans
    "PlanKind",
    "Plan",
    "TokenPlan",
    "PlanResolver",
    "to_minor_units",
    "subscription_amount",
    "token_bundle_amount",
    "seller_plus_amount",
    # purchases
    "PurchaseRequest",
    "LineItem",
    "CheckoutSessionSpec",
    "PurchaseVariant",
    "BuyerProPurchase",
    "TokenPurchase",
    "SellerPlusPurchase",
    "default_variants",
    # infra
    "PlanStore",
    "StripeGateway",
    # services
    "CheckoutSessionBuilder",
    "resolve_base_url",
    "get_checkout_builder",
]
