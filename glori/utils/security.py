from fastapi import Request, HTTPException, Depends
from typing import Optional, Dict, Any
import logging

from glori.infra.supabase_client import get_supabase

logger = logging.getLogger(__name__)

COOKIE_NAME = "sb_access"

def extract_token(request: Request) -> Optional[str]:
    # Hybride: priorité au Bearer, fallback cookie
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        token = auth_header[7:].strip()
        if token:
            return token
    return request.cookies.get(COOKIE_NAME) or None

def get_user_from_token(token: str) -> Dict[str, Any]:
    """
    Résout l'utilisateur Supabase associé au jeton.
    Le jeton est conservé pour ouvrir un client RLS au nom de l'utilisateur (requêtes panier).
    """
    res = get_supabase().auth.get_user(token)
    user = getattr(res, "user", None)
    return {
        "id": getattr(user, "id", None),
        "email": getattr(user, "email", None),
        "token": token,
    }

def get_current_user(request: Request) -> Dict[str, Any]:
    token = extract_token(request)
    if not token:
        raise HTTPException(status_code=401, detail="Non authentifié")
    try:
        user = get_user_from_token(token)
    except Exception:
        logger.warning("get_current_user: token rejected by Supabase")
        raise HTTPException(status_code=401, detail="Session expirée, veuillez vous connecter")
    if not user.get("id"):
        raise HTTPException(status_code=401, detail="Session expirée, veuillez vous connecter")
    return user

def require_user(user: Dict[str, Any] = Depends(get_current_user)) -> Dict[str, Any]:
    return user
