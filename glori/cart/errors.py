"""
Taxonomie d'erreurs du panier.
- ValidationError: taille/quantité hors énumération ou hors plage (jamais corrigée silencieusement).
- MutationFailure: update/delete non abouti, cause non discriminée (introuvable, transport, permission).
- FetchFailure: lecture du panier impossible; l'état reste interactif et l'utilisateur peut réessayer.
- MutationRejected: mutation demandée pendant un chargement ou une mutation en cours.
- ItemNotFound: ouverture d'un ajustement pour un article absent de la liste courante.
"""


class CartError(Exception):
    """Base des erreurs métier du panier."""


class ValidationError(CartError, ValueError):
    pass


class MutationFailure(CartError):
    pass


class FetchFailure(CartError):
    pass


class MutationRejected(CartError):
    pass


class ItemNotFound(CartError, LookupError):
    pass


# Messages affichés à l'utilisateur
GENERIC_ERROR = "Oups ! Une erreur est survenue, veuillez recharger la page et réessayer."
FETCH_ERROR = "Impossible de charger le panier, veuillez réessayer."
