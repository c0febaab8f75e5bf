# providers_hub.config
from decimal import Decimal
from pathlib import Path
import os
from dotenv import load_dotenv

# Calculer le chemin du projet puis charger .env de manière explicite
BASE_DIR = Path(__file__).resolve().parent.parent
ENV_PATH = BASE_DIR / ".env"
load_dotenv(dotenv_path=ENV_PATH, override=False)

"""
Configuration centrale du backend Providers Hub.

- Charge le fichier .env à la racine du projet (BASE_DIR/.env)
- Normalise et expose les secrets/URLs (Supabase, Stripe), sécurité cookies, CORS
- Fournit les constantes métier du checkout (prix du token, slug Seller Plus, devise)
- Fournit les paramètres du wizard d'inscription (timeout de confirmation, redirections)
"""

def _clean_env(v: str) -> str:
    """
    Nettoie une valeur d'environnement:
    - supprime les espaces et guillemets (simples, doubles) et backticks
    - retourne toujours une chaîne (jamais None)
    """
    return (v or "").strip().strip("'").strip('"').strip("`")

# Supabase: URL et clés (anon/service-role)
# - VITE_SUPABASE_URL est accepté pour partager le .env avec le frontend
SUPABASE_URL = _clean_env(os.getenv("SUPABASE_URL") or os.getenv("VITE_SUPABASE_URL") or "")
SUPABASE_ANON_KEY = _clean_env(os.getenv("SUPABASE_ANON_KEY") or os.getenv("VITE_SUPABASE_ANON_KEY") or "")
SUPABASE_SERVICE_KEY = _clean_env(
    os.getenv("SUPABASE_SERVICE_ROLE_KEY") or os.getenv("SUPABASE_SERVICE_KEY") or ""
)

if SUPABASE_URL and not SUPABASE_URL.startswith("http"):
    SUPABASE_URL = "https://" + SUPABASE_URL
if SUPABASE_URL.endswith("/"):
    SUPABASE_URL = SUPABASE_URL.rstrip("/")

# Stripe: clé secrète et version d'API figée
STRIPE_SECRET_KEY = _clean_env(os.getenv("STRIPE_SECRET_KEY") or "")
STRIPE_API_VERSION = _clean_env(os.getenv("STRIPE_API_VERSION") or "2024-06-20")

# Origine du frontend pour les redirections Stripe.
# URL est posée par la plateforme d'hébergement; FRONTEND_URL la surcharge.
FRONTEND_URL = _clean_env(os.getenv("FRONTEND_URL") or "")
PLATFORM_URL = _clean_env(os.getenv("URL") or "")
LOCAL_FRONTEND_URL = "http://localhost:5173"

# Checkout: devise unique et règles de prix
CHECKOUT_CURRENCY = "gbp"
TOKEN_PRICE_GBP = Decimal(_clean_env(os.getenv("TOKEN_PRICE_GBP") or "5"))
BUYER_PRO_SLUG = "buyer-pro"
SELLER_PLUS_SLUG = _clean_env(os.getenv("SELLER_PLUS_SLUG") or "seller-plus")

# Wizard d'inscription
SIGNUP_CONFIRMATION_TIMEOUT_SECONDS = float(os.getenv("SIGNUP_CONFIRMATION_TIMEOUT_SECONDS", "300"))
SIGNUP_WIZARD_RETENTION_SECONDS = float(os.getenv("SIGNUP_WIZARD_RETENTION_SECONDS", "900"))
# Wizard ouvert sans activité: fermé et retiré du registre au-delà de ce délai
SIGNUP_WIZARD_IDLE_SECONDS = float(os.getenv("SIGNUP_WIZARD_IDLE_SECONDS", "1800"))

# URLs de redirection post-actions auth (lien de confirmation, lien de reset)
SIGNUP_REDIRECT_URL = os.getenv("SIGNUP_REDIRECT_URL", f"{FRONTEND_URL or LOCAL_FRONTEND_URL}/auth/callback")
RESET_REDIRECT_URL = os.getenv("RESET_REDIRECT_URL", f"{FRONTEND_URL or LOCAL_FRONTEND_URL}/reset-password")

# Cookies / CORS
COOKIE_SECURE = (os.getenv("COOKIE_SECURE", "false").lower() == "true")
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

LOG_LEVEL = os.getenv("LOG_LEVEL", "info")


def payments_configured() -> bool:
    """Stripe et Supabase (service-role) doivent être présents pour accepter un checkout."""
    return bool(STRIPE_SECRET_KEY) and bool(SUPABASE_URL and SUPABASE_SERVICE_KEY)
