"""
Camp creation: status derivation, consent upload and doctor notification.
"""

import sys
import uuid
from datetime import date
from typing import Optional, Union

from sqlalchemy import text
from werkzeug.utils import secure_filename

from camp_portal.config import (
    ALLOWED_CONSENT_TYPES,
    CONSENT_PATH_PREFIX,
    MAX_CONSENT_FILE_BYTES,
)
from camp_portal.directory import fetch_doctor, store_errors, update_doctor_whatsapp
from camp_portal.errors import CampValidationError, StoreError
from camp_portal.messaging import build_message_link
from camp_portal.models import (
    STATUS_ACTIVE,
    STATUS_SCHEDULED,
    Camp,
    CampResult,
    ConsentFile,
    Identity,
)
from camp_portal.scope import ensure_in_scope

_EXTENSION_BY_TYPE = {
    "application/pdf": "pdf",
    "image/png": "png",
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
}


def determine_camp_status(camp_date: date, today: Optional[date] = None) -> str:
    """``scheduled`` for dates after today, ``active`` for today or earlier."""
    today = today or date.today()
    return STATUS_SCHEDULED if camp_date > today else STATUS_ACTIVE


def parse_camp_date(value: Union[str, date, None]) -> date:
    if isinstance(value, date):
        return value
    if not value or not str(value).strip():
        raise CampValidationError("Please select a doctor and camp date.")
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError as e:
        raise CampValidationError(f"Invalid camp date '{value}', expected YYYY-MM-DD.") from e


def validate_consent_file(consent: ConsentFile) -> None:
    if consent.content_type not in ALLOWED_CONSENT_TYPES:
        raise CampValidationError("Only JPG, PNG, and PDF files are allowed")
    if consent.size > MAX_CONSENT_FILE_BYTES:
        raise CampValidationError("File size must be less than 5MB")


def consent_path(camp_id: str, consent: ConsentFile) -> str:
    """Storage path of a camp's consent form, named after the camp."""
    name = secure_filename(consent.filename or "")
    ext = name.rsplit(".", 1)[-1].lower() if "." in name else _EXTENSION_BY_TYPE[consent.content_type]
    return f"{CONSENT_PATH_PREFIX}/{camp_id}.{ext}"


# ── Store writes ─────────────────────────────────────────────────────

def insert_camp(engine, camp: Camp) -> str:
    sql = text("""
        INSERT INTO camps (id, user_id, doctor_id, camp_date, status, total_patients)
        VALUES (:id, :user_id, :doctor_id, :camp_date, :status, :total_patients)
    """)
    with store_errors("Camp insert"):
        with engine.begin() as conn:
            conn.execute(sql, {
                "id": camp.id,
                "user_id": camp.user_id,
                "doctor_id": camp.doctor_id,
                "camp_date": camp.camp_date.isoformat(),
                "status": camp.status,
                "total_patients": camp.total_patients,
            })
    return camp.id


def set_consent_path(engine, camp_id: str, path: str) -> None:
    sql = text("UPDATE camps SET consent_form_url = :path WHERE id = :id")
    with store_errors("Camp update"):
        with engine.begin() as conn:
            conn.execute(sql, {"path": path, "id": camp_id})


# ── Use case ─────────────────────────────────────────────────────────

def create_camp(engine, blob_store, identity: Identity, doctor_id: str,
                camp_date: Union[str, date], whatsapp_number: Optional[str] = None,
                consent: Optional[ConsentFile] = None, today: Optional[date] = None) -> CampResult:
    """Create a camp for *identity* with a doctor from its territory scope.

    The WhatsApp number update is best-effort; the camp insert, consent
    upload and consent path update abort the operation when they fail.
    """
    if not doctor_id or not str(doctor_id).strip():
        raise CampValidationError("Please select a doctor and camp date.")
    camp_day = parse_camp_date(camp_date)
    if consent is not None:
        validate_consent_file(consent)

    doctor = fetch_doctor(engine, doctor_id)
    if doctor is None:
        raise CampValidationError(f"Doctor {doctor_id} does not exist.")
    ensure_in_scope(identity, doctor)

    warnings = []
    whatsapp_number = (whatsapp_number or "").strip() or None
    if whatsapp_number:
        try:
            update_doctor_whatsapp(engine, doctor.id, whatsapp_number)
        except StoreError as e:
            print(f"[WARN] Failed to update doctor's WhatsApp number: {e}", file=sys.stderr)
            warnings.append(str(e))

    camp = Camp(
        id=str(uuid.uuid4()),
        user_id=identity.id,
        doctor_id=doctor.id,
        camp_date=camp_day,
        status=determine_camp_status(camp_day, today),
    )
    insert_camp(engine, camp)
    print(f"[camp] Created camp {camp.id} ({camp.status}) for doctor {doctor.id} by {identity.id}")

    if consent is not None:
        path = blob_store.upload(
            consent_path(camp.id, consent), consent.data,
            content_type=consent.content_type, overwrite=True,
        )
        set_consent_path(engine, camp.id, path)
        camp.consent_form_url = path

    notify_url = build_message_link(
        whatsapp_number or doctor.whatsapp_number or doctor.phone, doctor.name, camp_day,
    )
    return CampResult(camp=camp, notify_url=notify_url, warnings=warnings)
