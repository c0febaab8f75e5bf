"""
Résolution des plans et règles de prix (logique pure + une lecture Supabase).
Les montants sont toujours calculés en pence (unité mineure) sur des Decimal.
"""
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Any, Dict, List, Optional, Union
import logging

from .errors import PlanNotFoundError, UpstreamError
from .repository import PlanStore

logger = logging.getLogger(__name__)

DEFAULT_BILLING_INTERVAL = "month"


class PlanKind(str, Enum):
    SUBSCRIPTION = "subscription"
    TOKEN_BUNDLE = "token_bundle"


# (table, colonnes) par type de plan
PLAN_SOURCES = {
    PlanKind.SUBSCRIPTION: ("plans", "id, name, price_cents, billing_interval"),
    PlanKind.TOKEN_BUNDLE: ("token_plans", "id, name, tokens, price"),
}


@dataclass(frozen=True)
class Plan:
    id: str
    name: Optional[str]
    price_cents: int
    billing_interval: str

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Plan":
        return cls(
            id=str(row.get("id") or ""),
            name=row.get("name") or None,
            price_cents=int(row.get("price_cents") or 0),
            billing_interval=row.get("billing_interval") or DEFAULT_BILLING_INTERVAL,
        )


@dataclass(frozen=True)
class TokenPlan:
    id: str
    name: Optional[str]
    tokens: int
    price: Optional[Decimal] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "TokenPlan":
        price = row.get("price")
        return cls(
            id=str(row.get("id") or ""),
            name=row.get("name") or None,
            tokens=int(row.get("tokens") or 0),
            price=Decimal(str(price)) if price is not None else None,
        )


AnyPlan = Union[Plan, TokenPlan]


def to_minor_units(amount_major: Union[Decimal, int, float, str]) -> int:
    """
    Convertit un montant en livres vers des pence (arrondi half-up).
    - Passe par str() pour éviter les artefacts binaires des floats (49.995 -> 5000).
    """
    pence = Decimal(str(amount_major)) * 100
    return int(pence.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def subscription_amount(plan: Plan) -> int:
    return plan.price_cents or 0


def token_bundle_amount_gbp(plan: TokenPlan, unit_price_gbp: Decimal) -> Decimal:
    return Decimal(plan.tokens) * Decimal(str(unit_price_gbp))


def token_bundle_amount(plan: TokenPlan, unit_price_gbp: Decimal) -> int:
    return to_minor_units(token_bundle_amount_gbp(plan, unit_price_gbp))


def seller_plus_amount(plan: TokenPlan) -> int:
    return to_minor_units(plan.price or 0)


class PlanResolver:
    """
    Cherche un plan actif par slug.
    - PlanNotFoundError si aucune ligne active ne correspond.
    - UpstreamError si Supabase échoue (journalisé ici avec le contexte).
    """

    def __init__(self, store: PlanStore):
        self._store = store

    def resolve_plan(self, kind: PlanKind, slug: str) -> AnyPlan:
        table, columns = PLAN_SOURCES[kind]
        try:
            row = self._store.fetch_active(table, slug, columns)
        except Exception as e:
            logger.exception("payments.plans.resolve_plan failed table=%s slug=%s", table, slug)
            raise UpstreamError(f"Plan lookup failed for {table}/{slug}") from e
        if not row:
            raise PlanNotFoundError()
        if kind is PlanKind.SUBSCRIPTION:
            return Plan.from_row(row)
        return TokenPlan.from_row(row)

    def list_active_plans(self) -> List[Dict[str, Any]]:
        return self._store.list_active("plans", order_by="price_cents")

    def list_token_plans(self) -> List[Dict[str, Any]]:
        return self._store.list_active("token_plans", order_by="tokens")
