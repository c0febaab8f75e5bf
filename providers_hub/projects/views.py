from typing import Any, Dict

from fastapi import APIRouter, Depends, status

from providers_hub.utils.security import require_user
from .models import ProjectCreate, ProjectUpdate, StatusUpdate
from . import service as projects_service

router = APIRouter(prefix="/api/v1/projects", tags=["Projects API"])


@router.post("", status_code=status.HTTP_201_CREATED)
def create_project(body: ProjectCreate, user: Dict[str, Any] = Depends(require_user)):
    """Publie un projet acheteur (statut 'open' par défaut)."""
    return projects_service.create_project(user["id"], body.model_dump(mode="json"))


@router.get("")
def list_projects(user: Dict[str, Any] = Depends(require_user)):
    """Projets de l'utilisateur courant, du plus récent au plus ancien."""
    return {"projects": projects_service.list_projects(user["id"])}


@router.get("/{project_id}")
def get_project(project_id: str, user: Dict[str, Any] = Depends(require_user)):
    return projects_service.get_project(project_id, user["id"])


@router.patch("/{project_id}")
def update_project(project_id: str, body: ProjectUpdate, user: Dict[str, Any] = Depends(require_user)):
    return projects_service.update_project(project_id, user["id"], body.model_dump(mode="json", exclude_unset=True))


@router.patch("/{project_id}/status")
def update_project_status(project_id: str, body: StatusUpdate, user: Dict[str, Any] = Depends(require_user)):
    return projects_service.update_status(project_id, user["id"], body.status)


@router.delete("/{project_id}")
def delete_project(project_id: str, user: Dict[str, Any] = Depends(require_user)):
    projects_service.delete_project(project_id, user["id"])
    return {"message": "Project deleted"}
