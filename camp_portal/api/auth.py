"""
JWT session tokens and the per-session identity slot for the Flask API.

Each login opens a session entry keyed by its token. The entry owns the
storage dict whose ``vitaminDUser`` slot holds the resolved identity, so
signing out is just dropping the entry.
"""

import uuid
from datetime import datetime, timedelta
from functools import wraps
from typing import Dict, Any, Optional

import jwt
from flask import request, jsonify

from camp_portal.config import SECRET_KEY, TOKEN_EXPIRY_HOURS
from camp_portal.models import Identity
from camp_portal.session_store import IdentityStore

# {token: {"storage": {slot: json}, "created_at": datetime, "last_activity": datetime}}
sessions: Dict[str, Dict[str, Any]] = {}


def generate_token(identity: Identity) -> str:
    """Generate a JWT token for a resolved identity."""
    issued = datetime.utcnow()
    payload = {
        "sub": identity.id,
        "role": identity.role,
        "imacx_id": identity.external_id,
        "jti": uuid.uuid4().hex,
        "iat": issued,
        "exp": issued + timedelta(hours=TOKEN_EXPIRY_HOURS),
    }
    return jwt.encode(payload, SECRET_KEY, algorithm="HS256")


def verify_token(token: str) -> Optional[Dict[str, Any]]:
    """Decoded claims of *token*, or None when it is expired or tampered with."""
    try:
        return jwt.decode(token, SECRET_KEY, algorithms=["HS256"])
    except jwt.InvalidTokenError:
        return None


def open_session(storage: Dict[str, str], identity: Identity) -> str:
    """Register a session around an already-written storage slot."""
    token = generate_token(identity)
    now = datetime.utcnow()
    sessions[token] = {
        "storage": storage,
        "created_at": now,
        "last_activity": now,
    }
    return token


def close_session(token: str) -> bool:
    """Drop the session for *token*; False when it was already gone."""
    return sessions.pop(token, None) is not None


def identity_store() -> IdentityStore:
    """The identity slot of the current request's session."""
    return IdentityStore(request.session_data["storage"])


def _request_token() -> Optional[str]:
    header = request.headers.get("Authorization")
    if header is not None:
        scheme, _, token = header.partition(" ")
        if scheme.lower() != "bearer" or not token.strip():
            raise ValueError("Invalid authorization header format")
        return token.strip()
    return request.args.get("token") or None


def token_required(f):
    """Reject the request unless it carries a live session token.

    The token comes from ``Authorization: Bearer <token>`` or the ``token``
    query parameter. On success ``request.session_data`` and ``request.token``
    are set and the session's activity clock is bumped.
    """
    @wraps(f)
    def decorated(*args, **kwargs):
        try:
            token = _request_token()
        except ValueError as e:
            return jsonify({"error": str(e)}), 401
        if not token:
            return jsonify({"error": "Authentication token is missing"}), 401

        if verify_token(token) is None:
            close_session(token)
            return jsonify({"error": "Invalid or expired token"}), 401

        session_data = sessions.get(token)
        if session_data is None:
            return jsonify({"error": "Session not found. Please login again."}), 401

        session_data["last_activity"] = datetime.utcnow()
        request.session_data = session_data
        request.token = token
        return f(*args, **kwargs)

    return decorated


def cleanup_expired_sessions(now: Optional[datetime] = None) -> int:
    """Drop sessions idle for longer than TOKEN_EXPIRY_HOURS; returns how many."""
    cutoff = (now or datetime.utcnow()) - timedelta(hours=TOKEN_EXPIRY_HOURS)
    stale = [tok for tok, data in sessions.items() if data["last_activity"] < cutoff]
    for tok in stale:
        close_session(tok)
    if stale:
        print(f"[cleanup] Removed {len(stale)} idle session(s)")
    return len(stale)
