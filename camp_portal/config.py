"""
Centralised configuration constants and environment helpers.
"""

import os
import sys

from dotenv import load_dotenv

load_dotenv()

# ── Session / identity ───────────────────────────────────────────────
SESSION_STORAGE_KEY = "vitaminDUser"
TERRITORY_DELIMITER = ","

# Literal some directory rows carry instead of a real key.
PLACEHOLDER_ID = "undefined"
FALLBACK_EMAIL_DOMAIN = os.getenv("FALLBACK_EMAIL_DOMAIN", "company.com")

# ── Remote authentication service ────────────────────────────────────
AUTH_SERVICE_URL = os.getenv("AUTH_SERVICE_URL", "")
AUTH_SERVICE_TIMEOUT_SECONDS = 10

# ── Messaging ────────────────────────────────────────────────────────
DEFAULT_COUNTRY_CODE = "+91"
MESSAGE_LINK_SCHEME = "whatsapp"
ORGANIZATION_NAME = os.getenv("ORGANIZATION_NAME", "Pulse Pharmaceuticals")

# ── Consent documents ────────────────────────────────────────────────
CONSENT_STORAGE_DIR = os.getenv("CONSENT_STORAGE_DIR", "consent_forms")
CONSENT_PATH_PREFIX = "consents"
MAX_CONSENT_FILE_BYTES = 5 * 1024 * 1024
ALLOWED_CONSENT_TYPES = {
    "image/jpeg", "image/png", "image/jpg", "application/pdf",
}

# ── API server ───────────────────────────────────────────────────────
SECRET_KEY = os.getenv("JWT_SECRET_KEY", "dev-secret-key-change-in-production")
TOKEN_EXPIRY_HOURS = 24


def get_env(name: str) -> str:
    """Return an environment variable or exit with an error message."""
    value = os.getenv(name)
    if not value:
        print(f"ERROR: env var {name} is not set", file=sys.stderr)
        sys.exit(1)
    return value
