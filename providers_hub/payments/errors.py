"""
Taxonomie des erreurs du checkout.
Chaque erreur porte le code HTTP et le message public renvoyés par la vue ({"error": ...}).
"""


class CheckoutError(Exception):
    status_code = 500
    public_message = "Failed to create checkout session"
    # False: le message reste dans les logs, la réponse garde public_message
    expose_message = True

    def __init__(self, message: str | None = None):
        super().__init__(message or self.public_message)
        if message and self.expose_message:
            self.public_message = message


class CheckoutValidationError(CheckoutError):
    """Champ manquant ou invalide dans la requête (400, non rejoué)."""
    status_code = 400
    public_message = "Invalid checkout request"


class PlanNotFoundError(CheckoutError):
    """Aucun plan actif pour ce slug (400: l'utilisateur doit corriger sa saisie)."""
    status_code = 400
    public_message = "Plan not found"


class PaymentConfigurationError(CheckoutError):
    """Secrets Stripe/Supabase absents du déploiement (500, action opérateur)."""
    status_code = 500
    public_message = "Server payment configuration is missing"


class UpstreamError(CheckoutError):
    """Échec Stripe ou Supabase: journalisé, message générique côté client."""
    status_code = 500
    public_message = "Failed to create checkout session"
    expose_message = False
