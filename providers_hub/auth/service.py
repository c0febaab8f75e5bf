from typing import Optional, Dict, Any
from providers_hub import config
from providers_hub.auth.models import AuthResponse, make_auth_response, auth_failure
from providers_hub.utils.security import determine_role
from providers_hub.utils.validators import email_local_part
from .repository import (
    sign_in_password,
    sign_up_account,
    send_reset_email,
    put_user_password,
    fetch_user,
)

SIGNUP_ROLES = ("client", "provider")
ALREADY_EXISTS_MARKERS = ("already", "registered", "exists", "database error saving new user", "23505")

# --- Cas d'usage Auth exposés ---

def login(email: str, password: str) -> AuthResponse:
    """Connexion:
    - Délègue à supabase.auth.sign_in_with_password via repository
    - Normalise la réponse en AuthResponse
    """
    try:
        email = (email or "").strip()
        res = sign_in_password(email, password)
        return make_auth_response(res, fallback_error="Invalid credentials or email not confirmed")
    except Exception as e:
        return auth_failure("sign_in", e)

def signup(email: str, password: str, name: Optional[str] = None, role: str = "client") -> AuthResponse:
    """Inscription:
    - Injecte name (partie locale de l'email par défaut) et role dans user_metadata
    - Lien de confirmation redirigé vers SIGNUP_REDIRECT_URL
    - Session renvoyée: connexion immédiate; sinon requires_confirmation
    """
    try:
        email = (email or "").strip()
        role = role if role in SIGNUP_ROLES else "client"
        metadata: Dict[str, Any] = {
            "name": (name or "").strip() or email_local_part(email),
            "role": role,
        }

        res = sign_up_account(email, password, metadata, redirect_to=config.SIGNUP_REDIRECT_URL)

        sess = getattr(res, "session", None)
        if sess and getattr(sess, "access_token", None):
            return make_auth_response(res)
        return AuthResponse(True, requires_confirmation=True)
    except Exception as e:
        msg = str(e).lower()
        if any(k in msg for k in ALREADY_EXISTS_MARKERS):
            return AuthResponse(False, error="User already registered")
        return auth_failure("sign_up", e)

def request_password_reset(email: str, redirect_to: str) -> AuthResponse:
    try:
        email = (email or "").strip()
        send_reset_email(email, redirect_to)
        return AuthResponse(True)
    except Exception as e:
        return auth_failure("send_reset_email", e)

def update_password(user_token: str, new_password: str) -> AuthResponse:
    """Mise à jour du mot de passe:
    - PUT GoTrue /auth/v1/user avec le token utilisateur (Bearer)
    - Succès si HTTP 2xx, sinon message d'erreur extrait du corps
    """
    try:
        resp = put_user_password(user_token, new_password)

        if 200 <= resp.status_code < 300:
            return AuthResponse(True)

        msg = None
        try:
            body = resp.json()
            msg = body.get("msg") or body.get("message") or body.get("error_description") or body.get("error")
        except ValueError:
            msg = resp.text

        return AuthResponse(False, error=f"Password update failed: {msg or f'status {resp.status_code}'}")
    except Exception as e:
        return auth_failure("update_password", e)

# --- Intégration sécurité ---

def get_user_from_token(access_token: str) -> Dict[str, Any]:
    """Normalise l'utilisateur de supabase.auth.get_user: {id, email, name, role, metadata, token}."""
    raw = fetch_user(access_token)
    metadata = raw.get("user_metadata") or {}
    return {
        "id": raw.get("id"),
        "email": raw.get("email"),
        "name": metadata.get("name"),
        "role": determine_role(metadata),
        "metadata": metadata,
        "token": access_token,
    }
