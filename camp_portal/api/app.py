"""
Flask application factory and server entry-point.
"""

import os
import sys
import traceback

from flask import Flask
from flask_cors import CORS

from camp_portal.auth_service import issue_session as remote_issue_session
from camp_portal.blob_store import init_blob_store
from camp_portal.config import AUTH_SERVICE_URL, MAX_CONSENT_FILE_BYTES, TOKEN_EXPIRY_HOURS
from camp_portal.database import init_engine, init_schema
from camp_portal.api.routes import register_routes


def create_app(engine=None, blob_store=None, issue_session=None):
    """Build and return a fully configured Flask application.

    Collaborators not passed in are created from the environment.
    """
    app = Flask(__name__)
    # Leave headroom above the consent limit so oversize files get a JSON 400.
    app.config["MAX_CONTENT_LENGTH"] = MAX_CONSENT_FILE_BYTES * 2
    CORS(app)

    # ── Initialise shared resources ──────────────────────────────────
    try:
        if engine is None:
            print("[init] Initializing database connection...")
            engine = init_engine()
            if os.getenv("AUTO_INIT_DB") == "1":
                init_schema(engine)
                print("[init] Schema ensured.")

        if blob_store is None:
            blob_store = init_blob_store()

        if issue_session is None:
            issue_session = remote_issue_session
            if not AUTH_SERVICE_URL:
                print("[init] AUTH_SERVICE_URL not set; BE logins use directory identities")

        print("[init] ✓ API server ready")
    except Exception as e:
        print(f"[FATAL] Failed to initialize: {e}", file=sys.stderr)
        traceback.print_exc()
        sys.exit(1)

    # ── Register routes ──────────────────────────────────────────────
    register_routes(app, engine, blob_store, issue_session)

    return app


def main():
    """Run the development server."""
    print("=" * 60)
    print("Vitamin D Camp Portal – REST API Server")
    print("=" * 60)

    app = create_app()

    host = os.getenv("API_HOST", "0.0.0.0")
    port = int(os.getenv("API_PORT", "8000"))
    debug = os.getenv("FLASK_ENV") == "development"

    print(f"\n[server] Starting Flask API on {host}:{port}")
    print(f"[server] Debug mode: {debug}")
    print(f"[server] CORS enabled: True")
    print(f"[server] Session expiry: {TOKEN_EXPIRY_HOURS} hours")
    print("\nAPI Endpoints:")
    print(f"  - POST http://{host}:{port}/api/auth/login")
    print(f"  - POST http://{host}:{port}/api/auth/link")
    print(f"  - GET  http://{host}:{port}/api/user/profile")
    print(f"  - GET  http://{host}:{port}/api/doctors")
    print(f"  - POST http://{host}:{port}/api/doctors")
    print(f"  - POST http://{host}:{port}/api/camps")
    print(f"  - POST http://{host}:{port}/api/auth/logout")
    print(f"  - GET  http://{host}:{port}/health")
    print("\n" + "=" * 60)

    app.run(host=host, port=port, debug=debug, threaded=True)


if __name__ == "__main__":
    main()
