"""
Flask route handlers for the REST API.
"""

import sys
import traceback
from datetime import datetime, timedelta

from flask import request, jsonify
from sqlalchemy import text
from werkzeug.exceptions import HTTPException

from camp_portal.camps import create_camp
from camp_portal.config import TOKEN_EXPIRY_HOURS
from camp_portal.doctors import add_doctor
from camp_portal.errors import CampValidationError, InvalidLink, NotFound, OutOfScope, StoreError
from camp_portal.identity import decode_login_link, encode_login_link, resolve_identity
from camp_portal.models import STATUS_SCHEDULED, ConsentFile
from camp_portal.scope import list_eligible_doctors
from camp_portal.session_store import IdentityStore
from camp_portal.api.auth import (
    sessions,
    cleanup_expired_sessions,
    close_session,
    identity_store,
    open_session,
    token_required,
)

HTTP_ERRORS = {
    404: "Endpoint not found",
    405: "Method not allowed",
    413: "Upload too large",
    500: "Internal server error",
}


def _relogin():
    close_session(request.token)
    return jsonify({"error": "Session data unreadable. Please login again."}), 401


def _warning_json(warning):
    if warning is None:
        return None
    return {"code": warning.code, "message": warning.message}


def register_routes(app, engine, blob_store, issue_session):
    """Register all API routes on the Flask *app*."""

    # ── Health / info ────────────────────────────────────────────────

    @app.route("/", methods=["GET"])
    def index():
        return jsonify({
            "service": "Vitamin D Camp Portal API",
            "version": "1.0.0",
            "status": "running",
            "endpoints": {
                "auth": "/api/auth/login",
                "link": "/api/auth/link",
                "doctors": "/api/doctors",
                "camps": "/api/camps",
                "logout": "/api/auth/logout",
                "health": "/health",
            },
        })

    @app.route("/health", methods=["GET"])
    def health():
        checks = {"database": False, "consent_storage": blob_store is not None}
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            checks["database"] = True
        except Exception as e:
            print(f"[WARN] Health check could not reach DB: {e}", file=sys.stderr)

        all_healthy = all(checks.values())
        return jsonify({
            "status": "healthy" if all_healthy else "unhealthy",
            "checks": checks,
            "active_sessions": len(sessions),
        }), 200 if all_healthy else 503

    # ── Auth ─────────────────────────────────────────────────────────

    @app.route("/api/auth/login", methods=["POST"])
    def login():
        if not request.is_json:
            return jsonify({"error": "Content-Type must be application/json"}), 400

        data = request.json if isinstance(request.json, dict) else {}
        encoded = data.get("data")
        try:
            if encoded:
                external_id = decode_login_link(encoded)
            else:
                external_id = data.get("imacx_id")
                external_id = external_id.strip() if isinstance(external_id, str) else ""
                if not external_id:
                    return jsonify({"error": "imacx_id is required"}), 400

            cleanup_expired_sessions()
            storage = {}
            identity = resolve_identity(
                engine, external_id, store=IdentityStore(storage), issue_session=issue_session,
            )
            token = open_session(storage, identity)

            return jsonify({
                "success": True,
                "token": token,
                "user": identity.to_dict(),
                "message": f"Welcome back, {identity.display_name or identity.external_id}!",
                "expires_at": (datetime.utcnow() + timedelta(hours=TOKEN_EXPIRY_HOURS)).isoformat(),
            }), 200

        except InvalidLink as e:
            return jsonify({"error": str(e)}), 400
        except NotFound as e:
            return jsonify({"error": f"Authentication failed: {str(e)}"}), 401
        except StoreError as e:
            print(f"[ERROR] Directory unavailable during login: {e}", file=sys.stderr)
            return jsonify({"error": str(e)}), 502
        except Exception as e:
            print(f"[ERROR] Login error: {e}", file=sys.stderr)
            traceback.print_exc()
            return jsonify({"error": "Internal server error during login"}), 500

    @app.route("/api/auth/link", methods=["POST"])
    def login_link():
        data = request.get_json(silent=True) or {}
        try:
            encoded = encode_login_link(str(data.get("imacx_id") or ""))
        except ValueError as e:
            return jsonify({"error": str(e)}), 400
        return jsonify({
            "success": True,
            "data": encoded,
            "link": f"/auth?data={encoded}",
        }), 200

    @app.route("/api/auth/logout", methods=["POST"])
    @token_required
    def logout():
        identity_store().clear()
        close_session(request.token)
        return jsonify({"success": True, "message": "You have been logged out successfully."}), 200

    @app.route("/api/user/profile", methods=["GET"])
    @token_required
    def get_profile():
        identity = identity_store().read()
        if identity is None:
            return _relogin()
        session_data = request.session_data
        return jsonify({
            "success": True,
            "user": identity.to_dict(),
            "session": {
                "created_at": session_data["created_at"].isoformat(),
                "last_activity": session_data["last_activity"].isoformat(),
            },
        }), 200

    # ── Doctors ──────────────────────────────────────────────────────

    @app.route("/api/doctors", methods=["GET"])
    @token_required
    def get_doctors():
        identity = identity_store().read()
        if identity is None:
            return _relogin()
        try:
            listing = list_eligible_doctors(engine, identity)
        except StoreError as e:
            print(f"[ERROR] Doctor listing failed: {e}", file=sys.stderr)
            return jsonify({"success": False, "error": "Error fetching doctors", "details": str(e)}), 502

        return jsonify({
            "success": True,
            "role": identity.role,
            "scope": listing.scope_description,
            "count": len(listing.doctors),
            "doctors": [d.to_dict() for d in listing.doctors],
            "warning": _warning_json(listing.warning),
        }), 200

    @app.route("/api/doctors", methods=["POST"])
    @token_required
    def post_doctor():
        if not request.is_json:
            return jsonify({"error": "Content-Type must be application/json"}), 400
        try:
            doctor = add_doctor(engine, request.json)
        except CampValidationError as e:
            return jsonify({"success": False, "error": str(e)}), 400
        except StoreError as e:
            return jsonify({"success": False, "error": f"Failed to add doctor: {e}"}), 502
        return jsonify({"success": True, "doctor": doctor.to_dict()}), 201

    # ── Camps ────────────────────────────────────────────────────────

    @app.route("/api/camps", methods=["POST"])
    @token_required
    def post_camp():
        identity = identity_store().read()
        if identity is None:
            return _relogin()

        form = request.get_json(silent=True) if request.is_json else request.form
        form = form or {}
        consent = None
        upload = request.files.get("consent_file")
        if upload is not None and upload.filename:
            consent = ConsentFile(
                filename=upload.filename,
                content_type=upload.mimetype or "",
                data=upload.read(),
            )

        try:
            result = create_camp(
                engine, blob_store, identity,
                doctor_id=form.get("doctor_id"),
                camp_date=form.get("camp_date"),
                whatsapp_number=form.get("whatsapp_number"),
                consent=consent,
            )
        except CampValidationError as e:
            return jsonify({"success": False, "error": str(e)}), 400
        except OutOfScope as e:
            return jsonify({"success": False, "error": str(e)}), 403
        except StoreError as e:
            print(f"[ERROR] Camp creation error: {e}", file=sys.stderr)
            return jsonify({"success": False, "error": "Error creating camp", "details": str(e)}), 502
        except Exception as e:
            print(f"[ERROR] Camp creation error: {e}", file=sys.stderr)
            traceback.print_exc()
            return jsonify({"success": False, "error": "Error creating camp", "details": str(e)}), 500

        camp = result.camp
        return jsonify({
            "success": True,
            "camp": camp.to_dict(),
            "notify_url": result.notify_url,
            "warnings": result.warnings,
            "message": (
                "Camp scheduled successfully."
                if camp.status == STATUS_SCHEDULED
                else "Camp created and active! Redirecting to patient registration..."
            ),
        }), 201

    # ── Error handlers ───────────────────────────────────────────────

    @app.errorhandler(HTTPException)
    def http_error(e):
        error = HTTP_ERRORS.get(e.code, e.name)
        return jsonify({"error": error, "message": e.description}), e.code
