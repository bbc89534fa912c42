#!/usr/bin/env python3
"""
Generate a secret key for JWT tokens and a starter .env file body.
Run this and copy the output to your .env file.
"""

import secrets

ENV_TEMPLATE = """\
JWT_SECRET_KEY={secret_key}
DB_URI=sqlite:///camp_portal.db
AUTH_SERVICE_URL=
CONSENT_STORAGE_DIR=consent_forms
AUTO_INIT_DB=1"""

if __name__ == "__main__":
    print("=" * 60)
    print("Camp Portal .env Generator")
    print("=" * 60)
    print("\nGenerating a secure random JWT key...\n")

    print(ENV_TEMPLATE.format(secret_key=secrets.token_hex(32)))
    print("\n" + "=" * 60)
    print("Copy the lines above to your .env file and fill in AUTH_SERVICE_URL")
    print("=" * 60)
