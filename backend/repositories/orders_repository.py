from typing import Any, Dict, List, Optional

from config import settings
from supabase_client import get_supabase


def _table():
    return get_supabase().table(settings.orders_table)


def insert_order(record: Dict[str, Any]) -> Dict[str, Any]:
    response = _table().insert(record).execute()
    if not response.data:
        raise RuntimeError("Failed to store order")
    return response.data[0]


def fetch_order(order_id: str) -> Optional[Dict[str, Any]]:
    response = _table().select("*").eq("id", order_id).limit(1).execute()
    items = response.data or []
    return items[0] if items else None


def fetch_orders_by_creator(user_id: str, limit: int) -> List[Dict[str, Any]]:
    response = (
        _table()
        .select("*")
        .eq("created_by", user_id)
        .order("created_at", desc=True)
        .limit(limit)
        .execute()
    )
    return response.data or []


def fetch_orders(status: Optional[str], limit: int) -> List[Dict[str, Any]]:
    query = _table().select("*")
    if status:
        query = query.eq("status", status)
    response = query.order("created_at", desc=True).limit(limit).execute()
    return response.data or []


def update_order(
    order_id: str, updates: Dict[str, Any], expected_status: str
) -> Optional[Dict[str, Any]]:
    response = (
        _table()
        .update(updates)
        .eq("id", order_id)
        .eq("status", expected_status)
        .execute()
    )
    items = response.data or []
    return items[0] if items else None
