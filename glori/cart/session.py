"""
Session d'ajustement: brouillon d'une seule édition (taille/quantité) dans une fenêtre modale.
- Construite à partir d'une copie de l'article: l'article persisté n'est jamais modifié avant commit.
- commit(): envoie taille ET quantité ensemble; échec => la fenêtre reste ouverte, brouillon conservé.
- cancel(): abandonne le brouillon sans rien toucher côté persistance.
Les erreurs de validation s'arrêtent ici et n'atteignent jamais le repository.
"""
from decimal import Decimal
from typing import Any, Optional
import logging

from glori.config import CART_MAX_QUANTITY
from .errors import GENERIC_ERROR, MutationRejected, ValidationError
from .models import AdjustmentCandidate, LineItem, check_quantity, check_size
from .pricing import line_total

logger = logging.getLogger(__name__)


class AdjustmentSession:
    def __init__(self, view_model: Any, item: LineItem, max_quantity: int = CART_MAX_QUANTITY):
        self.view_model = view_model
        self.max_quantity = max_quantity
        self.base_price = item.base_price
        self.candidate = AdjustmentCandidate(
            item_id=item.id,
            item_title=item.title,
            size=item.size,
            quantity=item.quantity,
        )
        self.busy = False
        self.closed = False
        self.error: Optional[str] = None

    @property
    def is_open(self) -> bool:
        return not self.closed

    @property
    def preview_total(self) -> Decimal:
        """Total de ligne qu'aurait l'article avec le brouillon courant."""
        return line_total(self.base_price, self.candidate.size, self.candidate.quantity)

    def _ensure_editable(self) -> None:
        if self.closed:
            raise MutationRejected("La fenêtre d'ajustement est fermée")
        if self.busy:
            raise MutationRejected("Ajustement en cours, veuillez patienter")

    def set_size(self, size: Any) -> None:
        self._ensure_editable()
        self.candidate = self.candidate.model_copy(update={"size": check_size(size)})

    def set_quantity(self, quantity: Any) -> None:
        self._ensure_editable()
        self.candidate = self.candidate.model_copy(
            update={"quantity": check_quantity(quantity, self.max_quantity)}
        )

    def _fail(self, message: str) -> bool:
        self.error = message
        self.view_model.notify("error", message)
        return False

    async def commit(self) -> bool:
        """
        Valide le brouillon via view_model.request_adjust.
        - Ignoré si la session est fermée ou déjà occupée (contrôles désactivés côté UI).
        - Succès: ferme la session.
        - Échec: session ouverte, brouillon intact pour réessayer sans ressaisie.
        """
        if self.closed or self.busy:
            return False
        candidate = self.candidate
        try:
            check_size(candidate.size)
            check_quantity(candidate.quantity)
        except ValidationError as e:
            return self._fail(str(e))

        self.busy = True
        self.error = None
        try:
            ok = await self.view_model.request_adjust(candidate.item_id, candidate.size, candidate.quantity)
        except (ValidationError, MutationRejected) as e:
            logger.info("adjustment commit refused id=%s: %s", candidate.item_id, e)
            ok = False
            self.error = str(e)
            self.view_model.notify("error", str(e))
        finally:
            self.busy = False

        if not ok:
            if self.error is None:
                # Le view-model a déjà notifié l'utilisateur
                self.error = GENERIC_ERROR
            return False
        self.closed = True
        self.view_model.close_adjustment(self)
        return True

    def cancel(self) -> None:
        self.closed = True
        self.view_model.close_adjustment(self)
