"""
Accès aux données 'cart' (une ligne par article, jointure products).
- fetch_cart_documents: lignes d'un propriétaire, jointure products(id, title, photos, price).
- update_cart_document: remplace taille ET quantité (jamais partiel); False si échec, quelle qu'en soit la cause.
- delete_cart_document: supprime la ligne; False si échec.
- insert_cart_document / fetch_product: création d'un article (ajout au panier).
Aucune de ces fonctions ne modifie d'état local: l'appelant refait un fetch après mutation.
"""
from decimal import Decimal
from typing import Any, Dict, List, Optional, Protocol

from starlette.concurrency import run_in_threadpool
from supabase import Client

from glori.config import CART_TABLE, PRODUCTS_TABLE
from glori.infra.supabase_client import get_supabase
from .errors import FetchFailure, ValidationError
from .models import LineItem, check_quantity, check_size
import logging

logger = logging.getLogger(__name__)

CART_SELECT = "id, user_id, product_id, size, quantity, default_price, created_at, products(id, title, photos, price)"


def _client(client: Optional[Client]) -> Client:
    return client if client is not None else get_supabase()


def fetch_cart_documents(owner_id: str, client: Optional[Client] = None) -> List[dict]:
    """
    Récupère les articles d'un utilisateur avec la jointure 'products'.
    - Filtre: eq("user_id", owner_id)
    - Tri: created_at croissant (ordre d'ajout, stable entre deux fetchs)
    - Retour: [] si le panier est vide; FetchFailure si la lecture échoue
    """
    if not owner_id:
        return []
    try:
        res = (
            _client(client)
            .table(CART_TABLE)
            .select(CART_SELECT)
            .eq("user_id", owner_id)
            .order("created_at")
            .execute()
        )
        return res.data or []
    except Exception as e:
        logger.exception("cart.repository.fetch_cart_documents failed owner=%s", owner_id)
        raise FetchFailure("Impossible de charger le panier") from e


def update_cart_document(item_id: str, size: Any, quantity: Any, client: Optional[Client] = None) -> bool:
    """Remplace size et quantity (True si une ligne a été mise à jour)."""
    try:
        check_size(size)
        check_quantity(quantity)
    except ValidationError:
        logger.warning("cart.repository.update_cart_document refused id=%s size=%r quantity=%r", item_id, size, quantity)
        return False
    try:
        res = (
            _client(client)
            .table(CART_TABLE)
            .update({"size": size, "quantity": quantity})
            .eq("id", item_id)
            .execute()
        )
        # Aucune ligne renvoyée: article introuvable (ou masqué par RLS)
        return bool(getattr(res, "data", None))
    except Exception:
        logger.exception("cart.repository.update_cart_document failed id=%s", item_id)
        return False


def delete_cart_document(item_id: str, client: Optional[Client] = None) -> bool:
    try:
        res = (
            _client(client)
            .table(CART_TABLE)
            .delete()
            .eq("id", item_id)
            .execute()
        )
        return bool(getattr(res, "data", None))
    except Exception:
        logger.exception("cart.repository.delete_cart_document failed id=%s", item_id)
        return False


def fetch_product(product_id: str, client: Optional[Client] = None) -> Optional[dict]:
    if not product_id:
        return None
    try:
        res = (
            _client(client)
            .table(PRODUCTS_TABLE)
            .select("id, title, photos, price")
            .eq("id", product_id)
            .single()
            .execute()
        )
        return res.data or None
    except Exception:
        logger.exception("cart.repository.fetch_product failed id=%s", product_id)
        return None


def insert_cart_document(
    owner_id: str,
    product_id: str,
    size: int,
    quantity: int,
    default_price: Decimal,
    client: Optional[Client] = None,
) -> Optional[dict]:
    """
    Insère un article dans le panier et retourne la ligne créée (ou un dict truthy).
    default_price est sérialisé en chaîne '60.00' pour ne pas perdre de précision.
    """
    try:
        res = (
            _client(client)
            .table(CART_TABLE)
            .insert({
                "user_id": owner_id,
                "product_id": product_id,
                "size": size,
                "quantity": quantity,
                "default_price": f"{default_price:.2f}",
            })
            .execute()
        )
        rows = res.data or []
        # Certaines versions de supabase-py ne renvoient pas la ligne
        return rows[0] if isinstance(rows, list) and rows else {"status": "ok"}
    except Exception:
        logger.exception("cart.repository.insert_cart_document failed owner=%s product=%s", owner_id, product_id)
        return None


class CartRepository(Protocol):
    async def fetch_items(self, owner_id: str) -> List[LineItem]:
        ...

    async def update_item(self, item_id: str, size: int, quantity: int) -> bool:
        ...

    async def delete_item(self, item_id: str) -> bool:
        ...


class CartRepositoryClient:
    """
    Implémentation Supabase de CartRepository.
    supabase-py est bloquant: chaque appel est exécuté dans le threadpool de Starlette.
    """

    def __init__(self, client: Optional[Client] = None):
        self.client = client

    async def fetch_items(self, owner_id: str) -> List[LineItem]:
        docs = await run_in_threadpool(fetch_cart_documents, owner_id, self.client)
        items: List[LineItem] = []
        for doc in docs:
            try:
                items.append(LineItem.from_document(doc))
            except (ValidationError, AttributeError, TypeError) as e:
                # Quarantaine: une ligne corrompue ne doit jamais atteindre la tarification
                logger.warning("cart.repository quarantined document id=%s: %s", doc.get("id") if isinstance(doc, dict) else None, e)
        return items

    async def update_item(self, item_id: str, size: int, quantity: int) -> bool:
        return await run_in_threadpool(update_cart_document, item_id, size, quantity, self.client)

    async def delete_item(self, item_id: str) -> bool:
        return await run_in_threadpool(delete_cart_document, item_id, self.client)

    async def get_product(self, product_id: str) -> Optional[Dict[str, Any]]:
        return await run_in_threadpool(fetch_product, product_id, self.client)

    async def add_item(
        self, owner_id: str, product_id: str, size: int, quantity: int, default_price: Decimal
    ) -> bool:
        row = await run_in_threadpool(
            insert_cart_document, owner_id, product_id, size, quantity, default_price, self.client
        )
        return bool(row)
