"""
Résultats normalisés des appels Supabase Auth (login, inscription, reset).
"""
from dataclasses import dataclass
from typing import Optional, Dict, Any
import logging
from providers_hub.utils.security import determine_role

logger = logging.getLogger(__name__)

AUTH_SERVICE_ERROR = "Authentication service unavailable, please try again"


@dataclass
class AuthResponse:
    success: bool
    user: Optional[Dict[str, Any]] = None
    session: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    # Compte créé, session retenue jusqu'à la confirmation de l'email
    requires_confirmation: bool = False

    @property
    def access_token(self) -> Optional[str]:
        return (self.session or {}).get("access_token")


def build_user_dict(user) -> Dict[str, Any]:
    """Utilisateur marketplace: id, email, nom affiché et rôle client/provider."""
    metadata = getattr(user, "user_metadata", None) or {}
    return {
        "id": getattr(user, "id", None),
        "email": getattr(user, "email", None),
        "name": metadata.get("name"),
        "role": determine_role(metadata),
        "metadata": metadata,
    }


def make_auth_response(res, fallback_error: str = "Invalid credentials") -> AuthResponse:
    token = getattr(getattr(res, "session", None), "access_token", None)
    if not token:
        return AuthResponse(False, error=fallback_error)
    return AuthResponse(True, user=build_user_dict(getattr(res, "user", None)), session={"access_token": token})


def auth_failure(action: str, e: Exception) -> AuthResponse:
    """Erreur inattendue côté GoTrue: détail dans les logs, message générique pour le client."""
    logger.exception("auth.%s failed: %s", action, e)
    return AuthResponse(False, error=AUTH_SERVICE_ERROR)
