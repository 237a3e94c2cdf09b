"""
View-model du panier de l'utilisateur courant.

Possède exclusivement la liste d'articles et le récapitulatif de commande:
- refresh(): Loading -> Ready (ou Failed), réentrant à chaque invalidation.
- request_adjust / request_delete: délèguent au repository puis refont un fetch complet
  (jamais de patch optimiste local); en cas d'échec l'état reste strictement inchangé.
- Un compteur d'époque monotone remplace le booléen global d'invalidation: un fetch
  dont l'époque (ou le propriétaire) n'est plus courant(e) à sa résolution est ignoré.
- adjustment: None tant qu'aucune fenêtre d'ajustement n'est ouverte.
"""
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, List, Optional, Tuple
import logging

from pydantic import BaseModel, ConfigDict

from .errors import FETCH_ERROR, GENERIC_ERROR, FetchFailure, ItemNotFound, MutationRejected
from .models import LineItem, OrderSummary, check_quantity, check_size
from .pricing import order_summary
from .repository import CartRepository
from .session import AdjustmentSession

logger = logging.getLogger(__name__)


class CartState(str, Enum):
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


class Notification(BaseModel):
    """Message destiné à l'utilisateur (équivalent d'un toast)."""

    model_config = ConfigDict(frozen=True)

    level: str
    message: str


class CartViewModel:
    def __init__(
        self,
        repository: CartRepository,
        owner_id: str,
        notifier: Optional[Callable[[Notification], None]] = None,
        shipping: Optional[Decimal] = None,
        tax: Optional[Decimal] = None,
    ):
        self.repository = repository
        self.owner_id = owner_id
        self.notifier = notifier
        self.shipping = shipping
        self.tax = tax
        self.state = CartState.LOADING
        self.epoch = 0
        self.items: Tuple[LineItem, ...] = ()
        self.summary: OrderSummary = order_summary((), shipping, tax)
        self.error: Optional[str] = None
        self.adjustment: Optional[AdjustmentSession] = None
        self.notifications: List[Notification] = []
        self._mutating = False

    # --- Lecture ---

    @property
    def item_count(self) -> int:
        return self.summary.item_count

    @property
    def is_empty(self) -> bool:
        return self.state is CartState.READY and self.summary.is_empty

    @property
    def accepts_mutations(self) -> bool:
        return self.state is CartState.READY and not self._mutating

    def rows(self) -> List[Tuple[LineItem, Decimal]]:
        """Couples (article, total de ligne) dans l'ordre du fetch."""
        return list(zip(self.items, self.summary.line_totals))

    def find_item(self, item_id: str) -> LineItem:
        for item in self.items:
            if item.id == item_id:
                return item
        raise ItemNotFound(f"Article {item_id} absent du panier")

    def notify(self, level: str, message: str) -> None:
        notification = Notification(level=level, message=message)
        self.notifications.append(notification)
        if self.notifier is not None:
            self.notifier(notification)

    # --- Chargement ---

    def _is_stale(self, epoch: int, owner_id: str) -> bool:
        return epoch != self.epoch or owner_id != self.owner_id

    def _fetch_failed(self, epoch: int, owner_id: str, message: str) -> bool:
        if self._is_stale(epoch, owner_id):
            logger.info("Discarding stale cart fetch failure epoch=%s current=%s", epoch, self.epoch)
            return False
        # Jamais de données périmées présentées comme courantes
        self.items = ()
        self.summary = order_summary((), self.shipping, self.tax)
        self.state = CartState.FAILED
        self.error = message
        self.notify("error", FETCH_ERROR)
        return False

    async def refresh(self) -> bool:
        """
        Invalide l'état courant et recharge toute la liste.
        Retourne True si ce fetch a été appliqué (état Ready).
        """
        self.epoch += 1
        epoch, owner_id = self.epoch, self.owner_id
        self.state = CartState.LOADING
        logger.debug("cart refresh started owner=%s epoch=%s", owner_id, epoch)
        try:
            items = await self.repository.fetch_items(owner_id)
        except FetchFailure as e:
            return self._fetch_failed(epoch, owner_id, str(e) or FETCH_ERROR)
        except Exception:
            # Toute erreur de lecture est traitée comme un échec réessayable
            logger.exception("cart refresh failed owner=%s epoch=%s", owner_id, epoch)
            return self._fetch_failed(epoch, owner_id, FETCH_ERROR)
        if self._is_stale(epoch, owner_id):
            logger.info("Discarding stale cart fetch epoch=%s current=%s", epoch, self.epoch)
            return False
        self.items = tuple(items)
        self.summary = order_summary(self.items, self.shipping, self.tax)
        self.error = None
        self.state = CartState.READY
        logger.debug("cart ready owner=%s epoch=%s items=%s", owner_id, epoch, len(self.items))
        return True

    async def switch_owner(self, owner_id: str) -> bool:
        """Changement de compte: tout fetch encore en vol pour l'ancien propriétaire sera ignoré."""
        self.owner_id = owner_id
        if self.adjustment is not None:
            self.adjustment.closed = True
        self.adjustment = None
        return await self.refresh()

    # --- Mutations ---

    def _ensure_accepting(self) -> None:
        if self.state is CartState.FAILED:
            raise MutationRejected("Le panier n'a pas pu être chargé, veuillez le recharger")
        if self.state is not CartState.READY:
            raise MutationRejected("Le panier est en cours de chargement")
        if self._mutating:
            raise MutationRejected("Une modification du panier est déjà en cours")

    def _title_of(self, item_id: str) -> str:
        try:
            return self.find_item(item_id).title or "l'article"
        except ItemNotFound:
            return "l'article"

    async def _mutate(self, call: Callable[[], Any], item_id: str, action: str) -> bool:
        self._mutating = True
        try:
            ok = await call()
        except Exception:
            logger.exception("cart %s failed id=%s", action, item_id)
            ok = False
        finally:
            self._mutating = False
        return bool(ok)

    async def request_adjust(self, item_id: str, size: int, quantity: int) -> bool:
        self._ensure_accepting()
        check_size(size)
        check_quantity(quantity)
        title = self._title_of(item_id)
        ok = await self._mutate(
            lambda: self.repository.update_item(item_id, size, quantity), item_id, "adjust"
        )
        if not ok:
            logger.warning("cart adjust not applied id=%s size=%s quantity=%s", item_id, size, quantity)
            self.notify("error", GENERIC_ERROR)
            return False
        await self.refresh()
        self.notify("success", f"{title} ajusté avec succès")
        return True

    async def request_delete(self, item_id: str) -> bool:
        self._ensure_accepting()
        title = self._title_of(item_id)
        ok = await self._mutate(lambda: self.repository.delete_item(item_id), item_id, "delete")
        if not ok:
            logger.warning("cart delete not applied id=%s", item_id)
            self.notify("error", GENERIC_ERROR)
            return False
        await self.refresh()
        self.notify("success", f"{title} supprimé du panier")
        return True

    # --- Fenêtre d'ajustement ---

    def open_adjustment(self, item_id: str) -> AdjustmentSession:
        """Remplace toute session ouverte par une session neuve (aucune fuite de brouillon)."""
        item = self.find_item(item_id)
        if self.adjustment is not None:
            self.adjustment.closed = True
        self.adjustment = AdjustmentSession(self, item)
        return self.adjustment

    def close_adjustment(self, session: Optional[AdjustmentSession] = None) -> None:
        if session is None or self.adjustment is session:
            self.adjustment = None