import logging
from typing import Any, Dict

from fastapi import APIRouter, HTTPException

from . import repository as categories_repo

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/categories", tags=["Categories API"])


def _normalize(row: Dict[str, Any]) -> Dict[str, Any]:
    return {"id": str(row.get("id") or ""), "name": row.get("name") or "", "description": row.get("description")}


@router.get("")
def list_categories() -> Dict[str, Any]:
    """Catégories de services avec leurs sous-catégories, triées par nom."""
    try:
        rows = categories_repo.list_categories()
    except Exception:
        logger.exception("categories.list_categories failed")
        raise HTTPException(status_code=502, detail="Failed to fetch categories")
    categories = []
    for row in rows:
        category = _normalize(row)
        subs = sorted(row.get("subcategories") or [], key=lambda s: (s.get("name") or "").lower())
        category["subcategories"] = [_normalize(s) for s in subs]
        categories.append(category)
    return {"categories": categories}


@router.get("/{category_id}/subcategories")
def list_subcategories(category_id: str) -> Dict[str, Any]:
    try:
        rows = categories_repo.list_subcategories(category_id)
    except Exception:
        logger.exception("categories.list_subcategories failed category_id=%s", category_id)
        raise HTTPException(status_code=502, detail="Failed to fetch subcategories")
    return {"subcategories": [_normalize(r) for r in rows]}
