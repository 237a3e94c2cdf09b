"""Couche service du panier.
Rôles:
- Construire, par requête, un view-model branché sur le client Supabase de l'utilisateur (RLS).
- Enchaîner les cas d'usage comme le fait la page panier: charger, ajuster via une session
  d'ajustement, supprimer, ajouter un parfum.
- Sérialiser l'état (articles, totaux de ligne, récapitulatif, notifications) pour l'API.
"""
from typing import Any, Dict, Optional
import logging

from glori.config import BASE_URL, CART_MAX_QUANTITY
from glori.infra.supabase_client import get_user_supabase
from .errors import FETCH_ERROR, GENERIC_ERROR, FetchFailure, ItemNotFound, MutationFailure
from .models import check_quantity, check_size, to_decimal
from .pricing import format_money, size_label
from .repository import CartRepositoryClient
from .view_model import CartViewModel

logger = logging.getLogger(__name__)


def build_view_model(user: Dict[str, Any]) -> CartViewModel:
    token = user.get("token")
    client = get_user_supabase(token) if token else None
    return CartViewModel(CartRepositoryClient(client), str(user.get("id") or ""))


async def load_cart(user: Dict[str, Any], view_model: Optional[CartViewModel] = None) -> CartViewModel:
    """Charge le panier; FetchFailure si la lecture échoue (erreur réessayable)."""
    vm = view_model or build_view_model(user)
    if not await vm.refresh():
        raise FetchFailure(vm.error or FETCH_ERROR)
    return vm


async def adjust_item(user: Dict[str, Any], item_id: str, size: Any, quantity: Any) -> CartViewModel:
    """
    Ajuste taille et quantité d'un article en passant par une session d'ajustement.
    - ItemNotFound si l'article n'est pas dans le panier courant.
    - ValidationError si taille/quantité hors plage (le repository n'est pas appelé).
    - MutationFailure si le store refuse la mise à jour (cause non discriminée).
    """
    vm = await load_cart(user)
    session = vm.open_adjustment(item_id)
    session.set_size(size)
    session.set_quantity(quantity)
    if not await session.commit():
        raise MutationFailure(session.error or GENERIC_ERROR)
    return vm


async def remove_item(user: Dict[str, Any], item_id: str) -> CartViewModel:
    vm = await load_cart(user)
    if not await vm.request_delete(item_id):
        raise MutationFailure(GENERIC_ERROR)
    return vm


async def add_item(user: Dict[str, Any], product_id: str, size: Any = 50, quantity: Any = 1) -> CartViewModel:
    """
    Ajoute un parfum au panier puis recharge.
    Le prix de base (50 ml) est lu dans le catalogue et mémorisé sur la ligne (default_price).
    """
    check_size(size)
    check_quantity(quantity, CART_MAX_QUANTITY)
    vm = build_view_model(user)
    repository = vm.repository
    product = await repository.get_product(product_id)
    if not product:
        raise ItemNotFound(f"Parfum {product_id} introuvable")
    price = to_decimal(product.get("price") or 0)
    if not await repository.add_item(vm.owner_id, str(product_id), size, quantity, price):
        raise MutationFailure(GENERIC_ERROR)
    await load_cart(user, vm)
    vm.notify("success", f"{product.get('title') or 'Parfum'} ajouté au panier")
    return vm


def product_link(product_id: str) -> str:
    """Lien public de la fiche parfum (action « copier le lien » du panier)."""
    return f"{BASE_URL}/perfumes/{product_id}"


def serialize_cart(vm: CartViewModel) -> Dict[str, Any]:
    summary = vm.summary
    items = []
    for item, total in vm.rows():
        items.append({
            "id": item.id,
            "product_id": item.product.id,
            "title": item.title,
            "photos": list(item.product.photos),
            "size": item.size,
            "size_label": size_label(item.size),
            "quantity": item.quantity,
            "base_price": format_money(item.base_price),
            "line_total": format_money(total),
        })
    return {
        "state": vm.state.value,
        "empty": vm.is_empty,
        "item_count": vm.item_count,
        "error": vm.error,
        "items": items,
        "summary": {
            "subtotal": format_money(summary.subtotal),
            "shipping": format_money(summary.shipping),
            "tax": format_money(summary.tax),
            "grand_total": format_money(summary.grand_total),
        },
        "notifications": [n.model_dump() for n in vm.notifications],
    }
