"""
Sonde de disponibilité du store Supabase (table du panier).
"""
from typing import Any, Dict
import logging

from glori.config import SUPABASE_URL, CART_TABLE
from glori.infra.supabase_client import get_supabase

logger = logging.getLogger(__name__)

def health_supabase_info() -> Dict[str, Any]:
    info: Dict[str, Any] = {
        "url_set": bool(SUPABASE_URL),
        "table": CART_TABLE,
        "connect_ok": False,
    }
    try:
        get_supabase().table(CART_TABLE).select("id").limit(1).execute()
        info["connect_ok"] = True
    except Exception as e:
        logger.warning("health_supabase_info: probe failed: %s", e)
        info["error"] = type(e).__name__
    return info
