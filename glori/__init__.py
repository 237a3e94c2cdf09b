"""
Glori: backend du panier (tarification, ajustement et suppression des articles).
"""
