# module glori.cart.views

"""Endpoints de l'user story Panier.
- GET /api/v1/cart: articles, totaux de ligne et récapitulatif de commande.
- POST /api/v1/cart/items: ajoute un parfum (taille, quantité).
- PUT /api/v1/cart/items/{item_id}: ajuste taille ET quantité (session d'ajustement).
- DELETE /api/v1/cart/items/{item_id}: retire l'article.
- GET /api/v1/cart/items/{item_id}/link: lien de partage de la fiche parfum.
Sécurité:
- require_user: toutes les routes sont scopées sur l'utilisateur connecté.
- optional_rate_limit: limite la fréquence des mutations.
Les erreurs métier (CartError) sont converties en JSON par les gestionnaires d'exceptions.
"""
from typing import Any, Dict
from fastapi import APIRouter, Depends
from pydantic import BaseModel
import logging

from glori.utils.security import require_user
from glori.utils.rate_limit import optional_rate_limit
from glori.cart import service as cart_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/cart", tags=["Cart API"])


class AddItemRequest(BaseModel):
    product_id: str
    size: int = 50
    quantity: int = 1


class AdjustItemRequest(BaseModel):
    size: int
    quantity: int


@router.get("")
async def get_cart(user: Dict[str, Any] = Depends(require_user)):
    """Panier de l'utilisateur; `empty` se base sur le nombre d'articles, pas sur le sous-total."""
    vm = await cart_service.load_cart(user)
    return cart_service.serialize_cart(vm)


@router.post("/items", status_code=201, dependencies=[Depends(optional_rate_limit(times=20, seconds=60))])
async def add_cart_item(req: AddItemRequest, user: Dict[str, Any] = Depends(require_user)):
    vm = await cart_service.add_item(user, req.product_id, req.size, req.quantity)
    return cart_service.serialize_cart(vm)


@router.put("/items/{item_id}", dependencies=[Depends(optional_rate_limit(times=20, seconds=60))])
async def adjust_cart_item(item_id: str, req: AdjustItemRequest, user: Dict[str, Any] = Depends(require_user)):
    """Ajuste un article puis renvoie le panier rechargé (jamais de patch local)."""
    vm = await cart_service.adjust_item(user, item_id, req.size, req.quantity)
    logger.info("cart item adjusted id=%s size=%s quantity=%s", item_id, req.size, req.quantity)
    return cart_service.serialize_cart(vm)


@router.delete("/items/{item_id}", dependencies=[Depends(optional_rate_limit(times=20, seconds=60))])
async def delete_cart_item(item_id: str, user: Dict[str, Any] = Depends(require_user)):
    vm = await cart_service.remove_item(user, item_id)
    logger.info("cart item deleted id=%s", item_id)
    return cart_service.serialize_cart(vm)


@router.get("/items/{item_id}/link")
async def cart_item_link(item_id: str, user: Dict[str, Any] = Depends(require_user)):
    vm = await cart_service.load_cart(user)
    item = vm.find_item(item_id)
    return {"url": cart_service.product_link(item.product.id)}
