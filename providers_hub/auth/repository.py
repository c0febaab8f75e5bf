"""
Accès Supabase Auth (GoTrue) pour la feature 'auth'.
Les exceptions du client remontent: le service les convertit en AuthResponse.
"""
from typing import Any, Dict, Optional
import httpx
from providers_hub import config
from providers_hub.infra.supabase_client import get_supabase

GOTRUE_TIMEOUT_SECONDS = 10


def sign_in_password(email: str, password: str):
    return get_supabase().auth.sign_in_with_password({"email": email, "password": password})


def sign_up_account(email: str, password: str, metadata: Dict[str, Any], redirect_to: Optional[str] = None):
    """Inscription avec user_metadata {name, role}; redirect_to = cible du lien de confirmation."""
    options: Dict[str, Any] = {"data": metadata}
    if redirect_to:
        options["redirect_to"] = redirect_to
    return get_supabase().auth.sign_up({"email": email, "password": password, "options": options})


def send_reset_email(email: str, redirect_to: str) -> None:
    get_supabase().auth.reset_password_for_email(email, options={"redirect_to": redirect_to})


def put_user_password(user_token: str, new_password: str) -> httpx.Response:
    """PUT /auth/v1/user avec le Bearer du lien de reset (le client anon n'a pas de session)."""
    return httpx.put(
        f"{config.SUPABASE_URL.rstrip('/')}/auth/v1/user",
        json={"password": new_password},
        headers={"Authorization": f"Bearer {user_token}", "apikey": config.SUPABASE_ANON_KEY},
        timeout=GOTRUE_TIMEOUT_SECONDS,
    )


def fetch_user(access_token: str) -> Dict[str, Any]:
    """{id, email, user_metadata} du porteur du token; {} si GoTrue ne renvoie personne."""
    user = getattr(get_supabase().auth.get_user(access_token), "user", None)
    if user is None:
        return {}
    if isinstance(user, dict):
        return user
    return {
        "id": getattr(user, "id", None),
        "email": getattr(user, "email", None),
        "user_metadata": getattr(user, "user_metadata", None),
    }
