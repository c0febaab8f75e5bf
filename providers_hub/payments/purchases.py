"""
Types d'achat (union taguée par `type`) et spécification de session Checkout.
Chaque variante possède sa règle de prix, ses URLs de retour et ses métadonnées:
ajouter un type d'achat = ajouter une classe et l'enregistrer dans default_variants().
"""
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from providers_hub.config import BUYER_PRO_SLUG, CHECKOUT_CURRENCY
from .errors import CheckoutValidationError
from .plans import (
    AnyPlan,
    PlanKind,
    seller_plus_amount,
    subscription_amount,
    token_bundle_amount,
    token_bundle_amount_gbp,
)


class PurchaseRequest(BaseModel):
    """Corps JSON du checkout: {type, planSlug?, userId} (noms camelCase côté client)."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore", coerce_numbers_to_str=True)

    type: Optional[str] = None
    plan_slug: Optional[str] = Field(default=None, alias="planSlug")
    user_id: Optional[str] = Field(default=None, alias="userId")


@dataclass(frozen=True)
class LineItem:
    unit_amount: int
    product_name: str
    currency: str = CHECKOUT_CURRENCY
    recurring_interval: Optional[str] = None
    quantity: int = 1

    def to_stripe(self) -> Dict[str, Any]:
        price_data: Dict[str, Any] = {
            "currency": self.currency,
            "unit_amount": self.unit_amount,
            "product_data": {"name": self.product_name},
        }
        if self.recurring_interval:
            price_data["recurring"] = {"interval": self.recurring_interval}
        return {"price_data": price_data, "quantity": self.quantity}


@dataclass(frozen=True)
class CheckoutSessionSpec:
    mode: str
    line_item: LineItem
    success_url: str
    cancel_url: str
    metadata: Dict[str, str] = field(default_factory=dict)

    def to_stripe_params(self) -> Dict[str, Any]:
        return {
            "mode": self.mode,
            "payment_method_types": ["card"],
            "line_items": [self.line_item.to_stripe()],
            "success_url": self.success_url,
            "cancel_url": self.cancel_url,
            "metadata": dict(self.metadata),
        }


class PurchaseVariant:
    """Base commune: les sous-classes fixent type/mode/plan_kind et les règles propres."""
    type: str = ""
    mode: str = "payment"
    plan_kind: PlanKind = PlanKind.SUBSCRIPTION
    not_found_message: str = "Plan not found"
    default_product_name: str = ""
    success_path: str = ""
    cancel_path: str = ""

    def validate(self, request: PurchaseRequest) -> None:
        return None

    def plan_slug(self, request: PurchaseRequest) -> str:
        return request.plan_slug or ""

    def unit_amount(self, plan: AnyPlan) -> int:
        raise NotImplementedError

    def product_name(self, plan: AnyPlan) -> str:
        return plan.name or self.default_product_name

    def recurring_interval(self, plan: AnyPlan) -> Optional[str]:
        return None

    def metadata(self, request: PurchaseRequest, plan: AnyPlan, slug: str) -> Dict[str, str]:
        return {"type": self.type, "user_id": str(request.user_id), "plan_id": plan.id, "plan_slug": slug}

    def build_spec(self, request: PurchaseRequest, plan: AnyPlan, slug: str, base_url: str) -> CheckoutSessionSpec:
        return CheckoutSessionSpec(
            mode=self.mode,
            line_item=LineItem(
                unit_amount=self.unit_amount(plan),
                product_name=self.product_name(plan),
                recurring_interval=self.recurring_interval(plan),
            ),
            success_url=f"{base_url}{self.success_path}",
            cancel_url=f"{base_url}{self.cancel_path}",
            metadata=self.metadata(request, plan, slug),
        )


class BuyerProPurchase(PurchaseVariant):
    type = "buyer_pro"
    mode = "subscription"
    plan_kind = PlanKind.SUBSCRIPTION
    not_found_message = "Buyer Pro plan not found"
    default_product_name = "Buyer Pro Membership"
    success_path = "/plans?status=success"
    cancel_path = "/plans?status=cancelled"

    def plan_slug(self, request: PurchaseRequest) -> str:
        # Le slug client est ignoré: un seul plan Buyer Pro
        return BUYER_PRO_SLUG

    def unit_amount(self, plan) -> int:
        return subscription_amount(plan)

    def recurring_interval(self, plan) -> Optional[str]:
        return plan.billing_interval


class TokenPurchase(PurchaseVariant):
    type = "tokens"
    mode = "payment"
    plan_kind = PlanKind.TOKEN_BUNDLE
    not_found_message = "Token plan not found"
    success_path = "/seller/tokens?status=success"
    cancel_path = "/seller/tokens?status=cancelled"

    def __init__(self, unit_price_gbp: Decimal):
        self.unit_price_gbp = Decimal(str(unit_price_gbp))

    def validate(self, request: PurchaseRequest) -> None:
        if not request.plan_slug:
            raise CheckoutValidationError("planSlug is required for token purchases")

    def unit_amount(self, plan) -> int:
        return token_bundle_amount(plan, self.unit_price_gbp)

    def product_name(self, plan) -> str:
        return f"{plan.tokens} Tokens"

    def metadata(self, request, plan, slug) -> Dict[str, str]:
        meta = super().metadata(request, plan, slug)
        meta["tokens"] = str(plan.tokens)
        meta["amount_gbp"] = str(token_bundle_amount_gbp(plan, self.unit_price_gbp))
        return meta


class SellerPlusPurchase(PurchaseVariant):
    type = "seller_plus"
    mode = "subscription"
    plan_kind = PlanKind.TOKEN_BUNDLE
    not_found_message = "Seller Plus plan not found"
    default_product_name = "Seller Plus"
    success_path = "/seller/dashboard?status=seller_plus_success"
    cancel_path = "/seller/tokens?status=cancelled"

    def __init__(self, default_slug: str):
        self.default_slug = default_slug

    def plan_slug(self, request: PurchaseRequest) -> str:
        return request.plan_slug or self.default_slug

    def unit_amount(self, plan) -> int:
        return seller_plus_amount(plan)

    def recurring_interval(self, plan) -> Optional[str]:
        return "month"

    def metadata(self, request, plan, slug) -> Dict[str, str]:
        return {"type": self.type, "user_id": str(request.user_id), "plan_slug": slug}


def default_variants(token_price_gbp: Decimal, seller_plus_slug: str) -> Dict[str, PurchaseVariant]:
    variants: List[PurchaseVariant] = [
        BuyerProPurchase(),
        TokenPurchase(token_price_gbp),
        SellerPlusPurchase(seller_plus_slug),
    ]
    return {v.type: v for v in variants}
