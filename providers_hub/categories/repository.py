from typing import Any, Dict, List
from providers_hub.infra.supabase_client import get_supabase

CATEGORY_COLUMNS = "id, name, description, subcategories (id, name, description)"

# Les erreurs Supabase remontent: la vue les traduit en 502

def list_categories() -> List[Dict[str, Any]]:
    res = get_supabase().table("categories").select(CATEGORY_COLUMNS).order("name").execute()
    return res.data or []

def list_subcategories(category_id: str) -> List[Dict[str, Any]]:
    res = (
        get_supabase()
        .table("subcategories")
        .select("id, name, description")
        .eq("category_id", category_id)
        .order("name")
        .execute()
    )
    return res.data or []
