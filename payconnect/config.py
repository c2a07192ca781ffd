# payconnect.config
from pathlib import Path
import os
from dotenv import load_dotenv

# Calculer le chemin du projet puis charger .env de manière explicite
BASE_DIR = Path(__file__).resolve().parent.parent
ENV_PATH = BASE_DIR / ".env"
load_dotenv(dotenv_path=ENV_PATH, override=True)

"""
Configuration centrale du connecteur de paiement.

- Charge le fichier .env à la racine du projet (BASE_DIR/.env)
- Normalise et expose les URLs/secrets du backend commerce, PayPal et Stripe
- Fournit l'URL de retour marchand utilisée après un paiement abouti
"""

def _clean_env(v: str) -> str:
    """
    Nettoie une valeur d'environnement:
    - supprime les espaces et guillemets (simples, doubles) et backticks
    - retourne toujours une chaîne (jamais None)
    """
    return (v or "").strip().strip("'").strip('"').strip("`")

def _clean_url(v: str) -> str:
    """Préfixe https:// si le schéma manque et retire le '/' final."""
    url = _clean_env(v)
    if url and not url.startswith("http"):
        url = "https://" + url
    return url.rstrip("/")

# Backend commerce: API, OAuth et sessions
# - Les URLs peuvent parfois être sans schéma: on préfixe en https:// si nécessaire
COMMERCE_API_URL = _clean_url(os.getenv("COMMERCE_API_URL") or "")
COMMERCE_AUTH_URL = _clean_url(os.getenv("COMMERCE_AUTH_URL") or "")
COMMERCE_SESSION_URL = _clean_url(os.getenv("COMMERCE_SESSION_URL") or "")
COMMERCE_PROJECT_KEY = _clean_env(os.getenv("COMMERCE_PROJECT_KEY") or "")
COMMERCE_CLIENT_ID = _clean_env(os.getenv("COMMERCE_CLIENT_ID") or "")
COMMERCE_CLIENT_SECRET = _clean_env(os.getenv("COMMERCE_CLIENT_SECRET") or "")
COMMERCE_TIMEOUT_SECONDS = float(os.getenv("COMMERCE_TIMEOUT_SECONDS", "10"))

# PayPal: identifiant client public et environnement (sandbox | live)
PAYPAL_CLIENT_ID = _clean_env(os.getenv("PAYPAL_CLIENT_ID") or "")
PAYPAL_ENVIRONMENT = _clean_env(os.getenv("PAYPAL_ENVIRONMENT") or "sandbox").lower()

# Interface de paiement par défaut si la session n'en fournit pas
PAYMENT_INTERFACE = _clean_env(os.getenv("PAYMENT_INTERFACE") or "paypal")

# Page de confirmation côté boutique
MERCHANT_RETURN_URL = _clean_env(os.getenv("MERCHANT_RETURN_URL") or "")

# Stripe: clé publique utilisée pour confirmer les intents côté client
STRIPE_PUBLISHABLE_KEY = _clean_env(os.getenv("STRIPE_PUBLISHABLE_KEY") or "")

# CORS: la boutique appelle le connecteur depuis un autre domaine
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
ALLOWED_HOSTS = [h.strip() for h in os.getenv("ALLOWED_HOSTS", "localhost,127.0.0.1").split(",") if h.strip()]
