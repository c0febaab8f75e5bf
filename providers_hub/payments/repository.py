"""
Accès aux données pour la feature 'payments' (tables plans / token_plans).
"""
from typing import Any, Dict, List, Optional
import logging
from supabase import Client

logger = logging.getLogger(__name__)

# module providers_hub.payments.repository
class PlanStore:
    """
    Lecture seule des plans via un client Supabase injecté (service-role côté serveur).
    - fetch_active: au plus une ligne active pour un slug; None si absente.
    - Les erreurs PostgREST/réseau remontent telles quelles à l'appelant,
      qui doit distinguer "introuvable" de "erreur".
    """

    def __init__(self, client: Client):
        self._client = client

    def fetch_active(self, table: str, slug: str, columns: str) -> Optional[Dict[str, Any]]:
        res = (
            self._client
            .table(table)
            .select(columns)
            .eq("slug", slug)
            .eq("is_active", True)
            .limit(1)
            .execute()
        )
        rows = res.data or []
        return rows[0] if rows else None

    def list_active(self, table: str, columns: str = "*", order_by: Optional[str] = None) -> List[Dict[str, Any]]:
        """Catalogue: toutes les lignes actives, triées si order_by est fourni."""
        try:
            query = self._client.table(table).select(columns).eq("is_active", True)
            if order_by:
                query = query.order(order_by)
            res = query.execute()
            return res.data or []
        except Exception:
            logger.exception("payments.repository.list_active failed table=%s", table)
            return []
