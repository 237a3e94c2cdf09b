"""
Politique tarifaire du panier (pure: pas de DB, pas d'état caché).
- line_total: prix de base * quantité + supplément de taille.
- order_summary: somme des lignes + frais de port et taxes appliqués une fois par commande.
"""
from decimal import Decimal
from typing import Any, Dict, Iterable, Optional

from glori.config import CART_SHIPPING, CART_TAX
from .errors import ValidationError
from .models import LineItem, OrderSummary, check_quantity, check_size, to_decimal

SIZE_SURCHARGES: Dict[int, Decimal] = {
    50: Decimal("0"),
    100: Decimal("50"),
    200: Decimal("100"),
}

CENT = Decimal("0.01")


def surcharge(size: Any) -> Decimal:
    return SIZE_SURCHARGES[check_size(size)]


def line_total(base_price: Any, size: Any, quantity: Any) -> Decimal:
    """
    Total d'une ligne: base_price * quantity + surcharge(size).
    - size ∈ {50, 100, 200}, sinon ValidationError.
    - quantity entier > 0, sinon ValidationError.
    """
    extra = surcharge(size)
    qty = check_quantity(quantity)
    return to_decimal(base_price) * qty + extra


def order_summary(
    items: Iterable[LineItem],
    shipping: Optional[Decimal] = None,
    tax: Optional[Decimal] = None,
) -> OrderSummary:
    """
    Récapitulatif de commande recalculé de zéro (jamais patché incrémentalement).
    - line_totals dans l'ordre du fetch.
    - Panier vide: subtotal 0, récapitulatif bien formé, item_count == 0.
    """
    shipping = CART_SHIPPING if shipping is None else to_decimal(shipping)
    tax = CART_TAX if tax is None else to_decimal(tax)
    totals = tuple(line_total(it.base_price, it.size, it.quantity) for it in items)
    subtotal = sum(totals, Decimal("0"))
    return OrderSummary(
        line_totals=totals,
        subtotal=subtotal,
        shipping=shipping,
        tax=tax,
        grand_total=subtotal + shipping + tax,
        item_count=len(totals),
    )


def format_money(value: Any) -> str:
    """Montant affiché à deux décimales ('338.64')."""
    return str(to_decimal(value).quantize(CENT))


def size_label(size: Any) -> str:
    """Libellé de taille tel qu'affiché dans le tableau du panier: '100 (+$50)'."""
    extra = surcharge(size)
    if not extra:
        return str(size)
    return f"{size} (+${extra})"


__all__ = [
    "SIZE_SURCHARGES",
    "ValidationError",
    "surcharge",
    "line_total",
    "order_summary",
    "format_money",
    "size_label",
]
