from typing import List, Optional, Dict, Any
from providers_hub.infra.supabase_client import get_service_supabase
import logging

logger = logging.getLogger(__name__)

# Toutes les requêtes sont bornées par user_id: un acheteur ne voit que ses projets

def list_projects(user_id: str) -> List[dict]:
    try:
        res = (
            get_service_supabase()
            .table("projects")
            .select("*")
            .eq("user_id", user_id)
            .order("created_at", desc=True)
            .execute()
        )
        return res.data or []
    except Exception:
        logger.exception("projects.repository.list_projects failed user_id=%s", user_id)
        return []

def get_project(project_id: str, user_id: str) -> Optional[dict]:
    if not project_id:
        return None
    try:
        res = (
            get_service_supabase()
            .table("projects")
            .select("*")
            .eq("id", project_id)
            .eq("user_id", user_id)
            .limit(1)
            .execute()
        )
        rows = res.data or []
        return rows[0] if rows else None
    except Exception:
        logger.exception("projects.repository.get_project failed id=%s", project_id)
        return None

def create_project(data: Dict[str, Any]) -> Optional[dict]:
    try:
        res = get_service_supabase().table("projects").insert(data).execute()
        rows = getattr(res, "data", None) or []
        return rows[0] if isinstance(rows, list) and rows else None
    except Exception:
        logger.exception("projects.repository.create_project failed user_id=%s", data.get("user_id"))
        return None

def update_project(project_id: str, user_id: str, data: Dict[str, Any]) -> Optional[dict]:
    try:
        res = (
            get_service_supabase()
            .table("projects")
            .update(data)
            .eq("id", project_id)
            .eq("user_id", user_id)
            .execute()
        )
        rows = getattr(res, "data", None) or []
        return rows[0] if isinstance(rows, list) and rows else None
    except Exception:
        logger.exception("projects.repository.update_project failed id=%s data=%s", project_id, data)
        return None

def delete_project(project_id: str, user_id: str) -> bool:
    try:
        res = (
            get_service_supabase()
            .table("projects")
            .delete()
            .eq("id", project_id)
            .eq("user_id", user_id)
            .execute()
        )
        return bool(getattr(res, "data", None))
    except Exception:
        logger.exception("projects.repository.delete_project failed id=%s", project_id)
        return False
