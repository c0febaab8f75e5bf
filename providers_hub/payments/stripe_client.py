"""
Adaptateur Stripe: centralise les appels Checkout et la configuration Stripe.
"""
import logging
from typing import Optional

import stripe

logger = logging.getLogger(__name__)

# module providers_hub.payments.stripe_client
class StripeGateway:
    """
    Passerelle de paiement hébergée (Stripe Checkout).
    - La clé et la version d'API sont passées à chaque appel: pas d'état global stripe.api_key,
      l'instance peut être partagée entre requêtes.
    """

    def __init__(self, api_key: str, api_version: Optional[str] = None):
        if not api_key:
            raise ValueError("api_key is required")
        self._api_key = api_key
        self._api_version = api_version

    def create_checkout_session(self, spec) -> str:
        """
        Crée une session Stripe Checkout à partir d'un CheckoutSessionSpec.
        Retour: l'URL de redirection émise par Stripe, inchangée.
        """
        params = spec.to_stripe_params()
        if self._api_version:
            params["stripe_version"] = self._api_version
        session = stripe.checkout.Session.create(api_key=self._api_key, **params)
        url = getattr(session, "url", None)
        if not url:
            raise RuntimeError(f"Stripe session {getattr(session, 'id', '?')} returned no url")
        logger.info("payments.stripe session created id=%s mode=%s", getattr(session, "id", None), spec.mode)
        return url
