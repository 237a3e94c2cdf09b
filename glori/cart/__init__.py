"""
Module 'cart' (feature-first): point d'entrée public.
Réunit la politique tarifaire, le client repository Supabase, le view-model et la session d'ajustement.
"""

from .errors import (
    CartError,
    ValidationError,
    MutationFailure,
    FetchFailure,
    MutationRejected,
    ItemNotFound,
)
from .models import ProductSnapshot, LineItem, OrderSummary, AdjustmentCandidate, ALLOWED_SIZES
from .pricing import SIZE_SURCHARGES, surcharge, line_total, order_summary, format_money, size_label
from .repository import CartRepository, CartRepositoryClient
from .session import AdjustmentSession
from .view_model import CartState, CartViewModel, Notification

__all__ = [
    # errors
    "CartError",
    "ValidationError",
    "MutationFailure",
    "FetchFailure",
    "MutationRejected",
    "ItemNotFound",
    # models
    "ProductSnapshot",
    "LineItem",
    "OrderSummary",
    "AdjustmentCandidate",
    "ALLOWED_SIZES",
    # pricing
    "SIZE_SURCHARGES",
    "surcharge",
    "line_total",
    "order_summary",
    "format_money",
    "size_label",
    # repository / view-model
    "CartRepository",
    "CartRepositoryClient",
    "AdjustmentSession",
    "CartState",
    "CartViewModel",
    "Notification",
]
