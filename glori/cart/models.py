# module glori.cart.models
"""
Modèles du panier.
- ProductSnapshot: instantané lecture seule du parfum joint au fetch (titre, photos, prix).
- LineItem: un parfum à une taille donnée, dans une quantité, appartenant à un utilisateur.
- OrderSummary: dérivé, jamais persisté, recalculé intégralement à chaque fetch.
- AdjustmentCandidate: brouillon d'une édition en cours (copie, jamais une référence).
"""
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, StrictInt, field_validator
from pydantic import ValidationError as PydanticValidationError

from .errors import ValidationError

ALLOWED_SIZES: Tuple[int, ...] = (50, 100, 200)


def to_decimal(value: Any) -> Decimal:
    """
    Convertit un montant (str|int|float|Decimal) en Decimal.
    - Les floats passent par str() pour éviter les artefacts binaires (80.1 -> Decimal('80.1')).
    - Lève ValidationError si la valeur n'est pas un nombre.
    """
    if isinstance(value, bool):
        raise ValidationError(f"Montant invalide: {value!r}")
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        value = str(value)
    try:
        result = Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(f"Montant invalide: {value!r}")
    if not result.is_finite():
        raise ValidationError(f"Montant invalide: {value!r}")
    return result


def check_size(size: Any) -> int:
    if isinstance(size, bool) or not isinstance(size, int) or size not in ALLOWED_SIZES:
        raise ValidationError(f"Taille invalide: {size!r} (attendu: 50, 100 ou 200)")
    return size


def check_quantity(quantity: Any, maximum: Optional[int] = None) -> int:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
        raise ValidationError(f"Quantité invalide: {quantity!r} (entier positif attendu)")
    if maximum is not None and quantity > maximum:
        raise ValidationError(f"Quantité invalide: {quantity!r} (maximum {maximum})")
    return quantity


class ProductSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    title: str = ""
    photos: Tuple[str, ...] = ()
    price: Optional[Decimal] = None

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, v: Any) -> str:
        return str(v) if v is not None else v

    @field_validator("photos", mode="before")
    @classmethod
    def _photos_tuple(cls, v: Any) -> Tuple[str, ...]:
        return tuple(v or ())

    @field_validator("price", mode="before")
    @classmethod
    def _price_decimal(cls, v: Any) -> Optional[Decimal]:
        return None if v is None else to_decimal(v)


class LineItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    owner_id: str
    product: ProductSnapshot
    # Stricts: "100" ou True venant du store ne sont jamais convertis
    size: StrictInt
    quantity: StrictInt = Field(ge=1)
    base_price: Decimal

    @field_validator("id", "owner_id", mode="before")
    @classmethod
    def _stringify(cls, v: Any) -> str:
        return str(v) if v is not None else v

    @field_validator("size")
    @classmethod
    def _size_in_enum(cls, v: int) -> int:
        if v not in ALLOWED_SIZES:
            raise ValueError(f"size must be one of {ALLOWED_SIZES}")
        return v

    @field_validator("base_price", mode="before")
    @classmethod
    def _base_price_decimal(cls, v: Any) -> Decimal:
        return to_decimal(v)

    @property
    def title(self) -> str:
        return self.product.title

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "LineItem":
        """
        Construit un LineItem depuis une ligne Supabase `cart` jointe à `products`.
        - La jointure peut revenir en dict (many-to-one) ou en liste d'un élément.
        - default_price (prix à 50 ml mémorisé à l'ajout) fait foi; sinon prix du produit.
        - Lève ValidationError si la ligne viole l'intégrité (taille hors énumération, etc.).
        """
        product = doc.get("products")
        if isinstance(product, list):
            product = product[0] if product else None
        if not product:
            product = {"id": doc.get("product_id")}
        elif not isinstance(product, dict):
            raise ValidationError(f"Article {doc.get('id')!r} invalide: jointure products inattendue")
        base_price = doc.get("default_price")
        if base_price is None:
            base_price = product.get("price")
        try:
            return cls(
                id=doc.get("id"),
                owner_id=doc.get("user_id"),
                product=product,
                size=doc.get("size"),
                quantity=doc.get("quantity"),
                base_price=base_price,
            )
        except PydanticValidationError as e:
            raise ValidationError(f"Article {doc.get('id')!r} invalide: {e.errors()[0].get('msg')}") from e


class OrderSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    line_totals: Tuple[Decimal, ...] = ()
    subtotal: Decimal
    shipping: Decimal
    tax: Decimal
    grand_total: Decimal
    item_count: int = 0

    @property
    def is_empty(self) -> bool:
        # Le nombre d'articles fait foi, jamais le sous-total
        return self.item_count == 0


class AdjustmentCandidate(BaseModel):
    model_config = ConfigDict(frozen=True)

    item_id: str
    item_title: str = ""
    size: int
    quantity: int
