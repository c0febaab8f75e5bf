# module providers_hub.projects.service

from datetime import datetime, timezone
from typing import List, Optional, Dict, Any
from fastapi import HTTPException
from providers_hub.projects import repository as projects_repository
from .models import ProjectStatus
import logging

logger = logging.getLogger(__name__)

STATUSES = {s.value for s in ProjectStatus}


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def create_project(user_id: str, data: Dict[str, Any]) -> dict:
    payload = dict(data)
    payload["user_id"] = user_id
    payload["status"] = payload.get("status") or ProjectStatus.OPEN.value
    if payload.get("deadline") is not None:
        payload["deadline"] = str(payload["deadline"])
    row = projects_repository.create_project(payload)
    if not row:
        raise HTTPException(status_code=500, detail="Failed to create project")
    logger.info("projects.create id=%s user_id=%s", row.get("id"), user_id)
    return row

def list_projects(user_id: str) -> List[dict]:
    return projects_repository.list_projects(user_id)

def get_project(project_id: str, user_id: str) -> dict:
    row = projects_repository.get_project(project_id, user_id)
    if not row:
        raise HTTPException(status_code=404, detail="Project not found")
    return row

def update_project(project_id: str, user_id: str, data: Dict[str, Any]) -> dict:
    changes = {k: v for k, v in data.items() if v is not None}
    if not changes:
        raise HTTPException(status_code=400, detail="No fields to update")
    if "deadline" in changes:
        changes["deadline"] = str(changes["deadline"])
    changes["updated_at"] = _now_iso()
    row = projects_repository.update_project(project_id, user_id, changes)
    if not row:
        raise HTTPException(status_code=404, detail="Project not found")
    return row

def update_status(project_id: str, user_id: str, status: Optional[str]) -> dict:
    status = (status or "").strip().lower()
    if status not in STATUSES:
        raise HTTPException(status_code=400, detail=f"Invalid status, expected one of: {', '.join(sorted(STATUSES))}")
    row = projects_repository.update_project(project_id, user_id, {"status": status, "updated_at": _now_iso()})
    if not row:
        raise HTTPException(status_code=404, detail="Project not found")
    return row

def delete_project(project_id: str, user_id: str) -> bool:
    if not projects_repository.delete_project(project_id, user_id):
        raise HTTPException(status_code=404, detail="Project not found")
    return True
