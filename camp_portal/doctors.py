"""
Doctor addition.
"""

import uuid
from typing import Any, Mapping

from sqlalchemy import text

from camp_portal.directory import doctor_from_row, store_errors
from camp_portal.errors import CampValidationError
from camp_portal.models import Doctor

REQUIRED_FIELDS = (
    ("imacx_code", "IMACX Code"),
    ("name", "Doctor name"),
    ("phone", "Phone number"),
)
OPTIONAL_FIELDS = (
    "specialty", "clinic_name", "clinic_address", "city",
    "whatsapp_number", "territory", "employee_code",
)


def _form_value(form: Mapping[str, Any], name: str):
    for key, value in form.items():
        if key.lower().replace(" ", "_") == name:
            value = "" if value is None else str(value).strip()
            return value or None
    return None


def add_doctor(engine, form: Mapping[str, Any]) -> Doctor:
    """Insert a doctor from form data; empty fields are stored as NULL."""
    row = {}
    for name, label in REQUIRED_FIELDS:
        value = _form_value(form, name)
        if not value:
            raise CampValidationError(f"{label} is required.")
        row[name] = value
    for name in OPTIONAL_FIELDS:
        row[name] = _form_value(form, name)
    row["id"] = str(uuid.uuid4())
    row["is_selected_by_marketing"] = False

    columns = ", ".join(row)
    values = ", ".join(f":{c}" for c in row)
    sql = text(f"INSERT INTO doctors ({columns}) VALUES ({values})")
    with store_errors("Doctor insert"):
        with engine.begin() as conn:
            conn.execute(sql, row)

    print(f"[doctor] Added doctor {row['id']} ({row['name']})")
    return doctor_from_row(row)
