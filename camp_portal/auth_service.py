"""
Client for the remote authentication service that issues server sessions.

The call is best-effort: every failure is reported as a SessionResult and
never raised, so the caller can fall back to a directory-only identity.
"""

import json
import time
from typing import Optional

import requests

from camp_portal.config import AUTH_SERVICE_URL, AUTH_SERVICE_TIMEOUT_SECONDS
from camp_portal.models import RemoteSession, SessionResult

TIMEOUT = "timeout"
SERVICE_ERROR = "service_error"


def parse_session_payload(payload) -> RemoteSession:
    """Extract the session principal from a service response body."""
    if not isinstance(payload, dict):
        raise ValueError("Invalid session response")
    session = payload.get("session")
    if not isinstance(session, dict):
        raise ValueError("Invalid session response")
    user = session.get("user")
    if not isinstance(user, dict) or not user.get("id"):
        raise ValueError("Invalid session response")
    return RemoteSession(
        token=str(session.get("access_token") or ""),
        principal_id=str(user["id"]),
        principal_email=user.get("email"),
    )


def _read_body(response, deadline: float) -> bytes:
    """Read the streamed body, raising requests.Timeout once *deadline* passes."""
    chunks = []
    for chunk in response.iter_content(chunk_size=8192):
        if time.monotonic() > deadline:
            raise requests.Timeout("Response body not received in time")
        chunks.append(chunk)
    return b"".join(chunks)


def issue_session(external_id: str, url: Optional[str] = None,
                  timeout: float = AUTH_SERVICE_TIMEOUT_SECONDS) -> SessionResult:
    """POST *external_id* to the authentication service and return the outcome.

    *timeout* bounds the whole exchange: the connect and each socket read use
    it as their limit, and the body is streamed so a trickling response is
    cut off once the overall deadline passes.
    """
    url = AUTH_SERVICE_URL if url is None else url
    if not url:
        return SessionResult(failure=SERVICE_ERROR, detail="Authentication service URL is not configured")

    deadline = time.monotonic() + timeout
    try:
        response = requests.post(url, json={"imacx_id": external_id}, timeout=timeout, stream=True)
        try:
            if time.monotonic() > deadline:
                raise requests.Timeout("Response headers not received in time")
            body = _read_body(response, deadline)
        finally:
            response.close()
    except requests.Timeout:
        return SessionResult(failure=TIMEOUT, detail=f"No response within {timeout}s")
    except requests.RequestException as e:
        return SessionResult(failure=SERVICE_ERROR, detail=str(e))

    try:
        payload = json.loads(body)
    except ValueError:
        payload = None

    if not response.ok:
        message = payload.get("error") if isinstance(payload, dict) else None
        return SessionResult(
            failure=SERVICE_ERROR,
            detail=message or f"Authentication failed (HTTP {response.status_code})",
        )

    try:
        session = parse_session_payload(payload)
    except ValueError as e:
        return SessionResult(failure=SERVICE_ERROR, detail=str(e))
    return SessionResult(session=session)
