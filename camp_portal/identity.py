"""
Identity resolution at login: external ID -> role, canonical identity, territories.

Employees (BE) live in the single-row employee directory and get their
canonical id from the remote authentication service when it answers.
Managers (BM) have one manager-directory row per supervised territory; the
rows are aggregated into a single identity.
"""

import base64
import binascii
import sys
import uuid
from datetime import datetime, timezone
from typing import Callable, List, Optional

from camp_portal.auth_service import issue_session as default_issue_session
from camp_portal.config import FALLBACK_EMAIL_DOMAIN, PLACEHOLDER_ID, TERRITORY_DELIMITER
from camp_portal.directory import fetch_employee, fetch_manager_rows
from camp_portal.errors import InvalidLink, NotFound
from camp_portal.models import (
    ROLE_EMPLOYEE,
    ROLE_MANAGER,
    EmployeeRow,
    Identity,
    ManagerRow,
    SessionResult,
)
from camp_portal.session_store import IdentityStore

IssueSession = Callable[[str], SessionResult]

# Characters atob() skips when decoding.
_LINK_WHITESPACE = dict.fromkeys(map(ord, " \t\n\f\r"))


# ── Auto-login links ─────────────────────────────────────────────────

def encode_login_link(external_id: str) -> str:
    """Encode an external ID into the ``data`` parameter of an auto-login link."""
    external_id = external_id.strip()
    if not external_id:
        raise ValueError("IMACX ID is required")
    return base64.b64encode(external_id.encode("utf-8")).decode("ascii")


def decode_login_link(encoded: str) -> str:
    """Decode a ``data`` link parameter back into the external ID.

    Accepts what a browser's ``atob`` accepts: ASCII whitespace is ignored
    and trailing ``=`` padding may be omitted.
    """
    if not isinstance(encoded, str):
        raise InvalidLink("Invalid or corrupted link.")
    compact = encoded.translate(_LINK_WHITESPACE)
    if len(compact) % 4 == 1:
        raise InvalidLink("Invalid or corrupted link.")
    compact += "=" * (-len(compact) % 4)
    try:
        decoded = base64.b64decode(compact, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError, ValueError) as e:
        raise InvalidLink("Invalid or corrupted link.") from e
    if not decoded:
        raise InvalidLink("Invalid or corrupted link.")
    return decoded


# ── Identity builders ────────────────────────────────────────────────

def _placeholder_email(external_id: str) -> str:
    return f"{external_id}@{FALLBACK_EMAIL_DOMAIN}"


def employee_identity(row: EmployeeRow, result: SessionResult,
                      resolved_at: Optional[datetime] = None) -> Identity:
    """Build an employee identity; a failed remote session falls back to the directory row."""
    if result.ok:
        identity_id = result.session.principal_id
        email = result.session.principal_email or row.email or _placeholder_email(row.external_id)
    else:
        print(
            f"[WARN] Session service unavailable ({result.failure}: {result.detail}); "
            f"using directory identity for {row.external_id}",
            file=sys.stderr,
        )
        identity_id = _directory_key(row.key)
        email = row.email or _placeholder_email(row.external_id)

    return Identity(
        id=identity_id,
        role=ROLE_EMPLOYEE,
        external_id=row.external_id,
        own_territory=row.territory,
        managed_territories=None,
        display_name=row.display_name,
        contact_phone=row.phone,
        email=email,
        resolved_at=resolved_at or datetime.now(timezone.utc),
    )


def _directory_key(key: Optional[str]) -> str:
    """A missing or placeholder directory key is replaced by a fresh UUID."""
    if not key or key == PLACEHOLDER_ID:
        return str(uuid.uuid4())
    return key


def manager_identity(rows: List[ManagerRow], resolved_at: Optional[datetime] = None) -> Identity:
    """Aggregate the ordered manager-directory rows into one identity."""
    first = rows[0]
    # Duplicates are kept; the scope filter collapses them.
    managed = TERRITORY_DELIMITER.join(
        r.subordinate_territory for r in rows
        if r.subordinate_territory and r.subordinate_territory.strip()
    )
    return Identity(
        id=_directory_key(first.key),
        role=ROLE_MANAGER,
        external_id=first.external_id,
        own_territory=first.own_territory,
        managed_territories=managed,
        display_name=first.display_name,
        contact_phone=first.phone,
        email=first.email or _placeholder_email(first.external_id),
        resolved_at=resolved_at or datetime.now(timezone.utc),
    )


# ── Resolution ───────────────────────────────────────────────────────

def resolve_identity(engine, external_id: str, store: Optional[IdentityStore] = None,
                     issue_session: IssueSession = default_issue_session) -> Identity:
    """Resolve *external_id* to an Identity and persist it into *store*.

    Raises NotFound when neither directory knows the ID. Directory errors
    propagate as StoreError; only the remote session step falls back.
    """
    employee = fetch_employee(engine, external_id)
    if employee is not None:
        print(f"[auth] {external_id} is BE, requesting server session")
        identity = employee_identity(employee, issue_session(external_id))
    else:
        managers = fetch_manager_rows(engine, external_id)
        if not managers:
            raise NotFound("Invalid IMACX ID - User not found in any table")
        identity = manager_identity(managers)
        print(
            f"[auth] {external_id} is BM with {len(managers)} directory row(s), "
            f"id={identity.id}"
        )

    if store is not None:
        store.write(identity)
    return identity
