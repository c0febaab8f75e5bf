from fastapi import APIRouter, HTTPException, Depends, Response
from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional, Dict, Any, Literal

from providers_hub import config
from providers_hub.signup.events import get_auth_notifier
from providers_hub.utils.rate_limit import optional_rate_limit
from providers_hub.utils.validators import validate_password_strength
from providers_hub.utils.security import require_user, set_session_cookie, clear_session_cookie
from .service import (
    login as svc_login,
    signup as svc_signup,
    request_password_reset as svc_request_reset,
    update_password as svc_update_password,
    get_user_from_token as svc_get_user_from_token,
)

# --- API Router (/api/v1/auth) ---

api_router = APIRouter(prefix="/api/v1/auth", tags=["Auth API"])

class LoginRequest(BaseModel):
    email: EmailStr
    password: str

class SignupRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8)
    name: Optional[str] = None
    role: Literal["client", "provider"] = "client"
    @field_validator("password")
    def password_strength(cls, v: str) -> str:
        return validate_password_strength(v)

class CallbackRequest(BaseModel):
    access_token: str = Field(min_length=1)

class ResetEmailRequest(BaseModel):
    email: EmailStr

class UpdatePasswordBody(BaseModel):
    token: str
    new_password: str = Field(min_length=8)
    @field_validator("new_password")
    def password_strength(cls, v: str) -> str:
        return validate_password_strength(v)


def _session_payload(access_token: str, user: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    return {"access_token": access_token, "token_type": "bearer", "user": user}


@api_router.post("/login", dependencies=[Depends(optional_rate_limit(times=5, seconds=60))])
def api_login(req: LoginRequest, response: Response):
    """Connexion (API JSON).
    - Pose le cookie de session (sb_access) et renvoie {access_token, token_type, user}.
    - Publie le signal d'authentification: un wizard d'inscription en attente pour cet email se ferme.
    """
    result = svc_login(req.email, req.password)
    if not result.success:
        raise HTTPException(status_code=401, detail=result.error or "Invalid credentials")

    set_session_cookie(response, result.access_token)
    get_auth_notifier().publish((result.user or {}).get("email") or req.email, result.user)
    return _session_payload(result.access_token, result.user)


@api_router.post("/signup", dependencies=[Depends(optional_rate_limit(times=3, seconds=60))])
def api_signup(req: SignupRequest, response: Response):
    """Inscription (API JSON).
    - Session immédiate: cookie + JSON de session.
    - Confirmation d'email requise: {message, requires_confirmation: true}.
    """
    result = svc_signup(req.email, req.password, req.name, req.role)
    if not result.success:
        raise HTTPException(status_code=400, detail=result.error or "Registration failed")
    if result.access_token:
        set_session_cookie(response, result.access_token)
        return _session_payload(result.access_token, result.user)
    return {
        "message": "Registration successful, please check your email to confirm your account",
        "requires_confirmation": result.requires_confirmation,
    }


@api_router.post("/callback")
def api_auth_callback(req: CallbackRequest, response: Response):
    """Cible du lien de confirmation: valide le token, pose le cookie, publie le signal d'auth."""
    try:
        user = svc_get_user_from_token(req.access_token)
    except Exception:
        raise HTTPException(status_code=401, detail="Invalid or expired confirmation link")
    if not user.get("id"):
        raise HTTPException(status_code=401, detail="Invalid or expired confirmation link")
    set_session_cookie(response, req.access_token)
    public_user = {k: v for k, v in user.items() if k != "token"}
    get_auth_notifier().publish(user.get("email"), public_user)
    return _session_payload(req.access_token, public_user)


@api_router.get("/me")
def api_me(user: Dict[str, Any] = Depends(require_user)):
    """Utilisateur courant (id, email, nom, rôle, metadata)."""
    return {
        "id": user["id"],
        "email": user.get("email"),
        "name": user.get("name"),
        "role": user.get("role"),
        "metadata": user.get("metadata") or {},
    }


@api_router.post("/request-password-reset", dependencies=[Depends(optional_rate_limit(times=3, seconds=60))])
def api_request_reset(req: ResetEmailRequest):
    result = svc_request_reset(req.email, config.RESET_REDIRECT_URL)
    if not result.success:
        raise HTTPException(status_code=400, detail=result.error or "Could not send reset email")
    return {"message": "Password reset email sent"}


@api_router.post("/update-password", dependencies=[Depends(optional_rate_limit(times=3, seconds=60))])
def api_update_password(body: UpdatePasswordBody):
    """Met à jour le mot de passe via GoTrue avec le token du lien de reset."""
    token = (body.token or "").strip()
    if not token:
        raise HTTPException(status_code=400, detail="Missing token")
    result = svc_update_password(token, body.new_password)
    if not result.success:
        raise HTTPException(status_code=400, detail=result.error or "Password update failed")
    return {"message": "Password updated"}


@api_router.post("/logout")
def api_logout(response: Response):
    """Supprime le cookie de session (sb_access)."""
    clear_session_cookie(response)
    return {"message": "Logged out"}
