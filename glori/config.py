# glori.config
from decimal import Decimal, InvalidOperation
from pathlib import Path
import os
from dotenv import load_dotenv

# Calculer le chemin du projet puis charger .env de manière explicite
BASE_DIR = Path(__file__).resolve().parent.parent
ENV_PATH = BASE_DIR / ".env"
load_dotenv(dotenv_path=ENV_PATH, override=True)

"""
Configuration centrale du backend panier.

- Charge le fichier .env à la racine du projet (BASE_DIR/.env)
- Normalise et expose les URLs/clés Supabase
- Expose la politique tarifaire de la commande (frais de port, taxes) et les bornes de l'UI d'édition
"""

def _clean_env(v: str) -> str:
    """
    Nettoie une valeur d'environnement:
    - supprime les espaces et guillemets (simples, doubles) et backticks
    - retourne toujours une chaîne (jamais None)
    """
    return (v or "").strip().strip("'").strip('"').strip("`")

def _decimal_env(name: str, default: str) -> Decimal:
    raw = _clean_env(os.getenv(name) or default)
    try:
        return Decimal(raw)
    except InvalidOperation:
        raise RuntimeError(f"{name} invalide: {raw!r}")

# Supabase: URL et clé anon
# - SUPABASE_URL peut être fourni sans schéma: on préfixe en https:// si nécessaire
SUPABASE_URL = _clean_env(os.getenv("SUPABASE_URL") or "")
SUPABASE_ANON = _clean_env(os.getenv("SUPABASE_ANON_KEY") or "")

if SUPABASE_URL and not SUPABASE_URL.startswith("http"):
    SUPABASE_URL = "https://" + SUPABASE_URL
if SUPABASE_URL.endswith("/"):
    SUPABASE_URL = SUPABASE_URL.rstrip("/")

# Tables du panier (document par article) et du catalogue joint au fetch
CART_TABLE = _clean_env(os.getenv("CART_TABLE") or "cart")
PRODUCTS_TABLE = _clean_env(os.getenv("PRODUCTS_TABLE") or "products")

# Frais appliqués une seule fois par commande, quel que soit le nombre d'articles
CART_SHIPPING = _decimal_env("CART_SHIPPING", "24.55")
CART_TAX = _decimal_env("CART_TAX", "14.09")

# Borne du sélecteur de quantité dans la fenêtre d'ajustement (aucune borne côté serveur)
CART_MAX_QUANTITY = int(os.getenv("CART_MAX_QUANTITY", "5"))

# Cookies / CORS / hôtes
COOKIE_SECURE = (os.getenv("COOKIE_SECURE", "false").lower() == "true")
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
ALLOWED_HOSTS = [h.strip() for h in os.getenv("ALLOWED_HOSTS", "localhost,127.0.0.1").split(",") if h.strip()]

# Origine publique de la boutique (liens de partage des parfums)
BASE_URL = _clean_env(os.getenv("BASE_URL") or "http://localhost:8000").rstrip("/")
