from typing import Any, Dict

from fastapi import APIRouter, Request

from providers_hub import config
from providers_hub.infra.supabase_client import is_configured as supabase_configured

router = APIRouter(prefix="/health", tags=["Health"])

@router.get("")
def health_root():
    return {"ok": True}

@router.get("/config")
def health_config(request: Request) -> Dict[str, Any]:
    """État de la configuration (sans exposer de secret)."""
    return {
        "payments_configured": config.payments_configured(),
        "supabase_configured": supabase_configured(),
        "rate_limit_enabled": getattr(request.app.state, "rate_limit_enabled", None),
    }
