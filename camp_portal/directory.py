"""
Directory access: employee, manager and doctor lookups.

Rows leave this module as dataclasses from ``camp_portal.models``; column
casing and blank values are normalised here so callers never see raw rows.
"""

from contextlib import contextmanager
from typing import Any, List, Mapping, Optional, Sequence

from sqlalchemy import bindparam, text
from sqlalchemy.exc import SQLAlchemyError

from camp_portal.errors import StoreError
from camp_portal.models import Doctor, EmployeeRow, ManagerRow

DOCTOR_COLUMNS = (
    "id, imacx_code, name, specialty, clinic_name, clinic_address, city, "
    "phone, whatsapp_number, territory, employee_code, is_selected_by_marketing"
)


@contextmanager
def store_errors(action: str):
    """Re-raise driver errors as StoreError carrying the store's message."""
    try:
        yield
    except SQLAlchemyError as e:
        detail = getattr(e, "orig", None) or e
        raise StoreError(f"{action} failed: {detail}") from e


def _field(row: Mapping[str, Any], name: str) -> Any:
    if name in row:
        return row[name]
    for key in row.keys():
        if key.lower().replace(" ", "_") == name:
            return row[key]
    return None


def _clean(value: Any) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _employee_from_row(row: Mapping[str, Any]) -> EmployeeRow:
    return EmployeeRow(
        key=_clean(_field(row, "id")),
        external_id=str(_field(row, "imacx_id")),
        territory=_clean(_field(row, "territory")),
        display_name=_clean(_field(row, "name")),
        phone=_clean(_field(row, "phone")),
        email=_clean(_field(row, "email")),
    )


def _manager_from_row(row: Mapping[str, Any]) -> ManagerRow:
    return ManagerRow(
        key=_clean(_field(row, "id")),
        external_id=str(_field(row, "imacx_id")),
        own_territory=_clean(_field(row, "territory")),
        subordinate_territory=_clean(_field(row, "beterritory")),
        display_name=_clean(_field(row, "name")),
        phone=_clean(_field(row, "phone")),
        email=_clean(_field(row, "email")),
    )


def doctor_from_row(row: Mapping[str, Any]) -> Doctor:
    return Doctor(
        id=str(_field(row, "id")),
        name=str(_field(row, "name") or ""),
        territory=_clean(_field(row, "territory")),
        eligible=bool(_field(row, "is_selected_by_marketing")),
        imacx_code=_clean(_field(row, "imacx_code")),
        specialty=_clean(_field(row, "specialty")),
        clinic_name=_clean(_field(row, "clinic_name")),
        clinic_address=_clean(_field(row, "clinic_address")),
        city=_clean(_field(row, "city")),
        phone=_clean(_field(row, "phone")),
        whatsapp_number=_clean(_field(row, "whatsapp_number")),
        employee_code=_clean(_field(row, "employee_code")),
    )


# ── Identity directories ─────────────────────────────────────────────

def fetch_employee(engine, external_id: str) -> Optional[EmployeeRow]:
    """Return the employee-directory row for *external_id*, or None."""
    sql = text("""
        SELECT id, imacx_id, territory, name, phone, email
        FROM users
        WHERE imacx_id = :external_id
    """)
    with store_errors("Employee directory lookup"):
        with engine.connect() as conn:
            rows = conn.execute(sql, {"external_id": external_id}).mappings().fetchmany(2)

    if len(rows) > 1:
        raise StoreError(f"Employee directory holds more than one row for '{external_id}'.")
    return _employee_from_row(rows[0]) if rows else None


def fetch_manager_rows(engine, external_id: str) -> List[ManagerRow]:
    """Return every manager-directory row for *external_id*, ascending by key."""
    sql = text("""
        SELECT id, imacx_id, territory, beterritory, name, phone, email
        FROM usersbm
        WHERE imacx_id = :external_id
        ORDER BY id ASC
    """)
    with store_errors("Manager directory lookup"):
        with engine.connect() as conn:
            rows = conn.execute(sql, {"external_id": external_id}).mappings().all()
    return [_manager_from_row(r) for r in rows]


# ── Doctor directory ─────────────────────────────────────────────────

def fetch_eligible_doctors(engine, territories: Sequence[str]) -> List[Doctor]:
    """Eligible doctors whose territory is one of *territories*, by name."""
    if not territories:
        return []
    sql = text(f"""
        SELECT {DOCTOR_COLUMNS}
        FROM doctors
        WHERE is_selected_by_marketing = :eligible
          AND territory IN :territories
        ORDER BY name ASC
    """).bindparams(bindparam("territories", expanding=True))
    with store_errors("Doctor lookup"):
        with engine.connect() as conn:
            rows = conn.execute(
                sql, {"eligible": True, "territories": list(territories)},
            ).mappings().all()
    return [doctor_from_row(r) for r in rows]


def fetch_doctor(engine, doctor_id: str) -> Optional[Doctor]:
    sql = text(f"SELECT {DOCTOR_COLUMNS} FROM doctors WHERE id = :id")
    with store_errors("Doctor lookup"):
        with engine.connect() as conn:
            row = conn.execute(sql, {"id": doctor_id}).mappings().first()
    return doctor_from_row(row) if row else None


def update_doctor_whatsapp(engine, doctor_id: str, whatsapp_number: str) -> None:
    sql = text("UPDATE doctors SET whatsapp_number = :number WHERE id = :id")
    with store_errors("Doctor update"):
        with engine.begin() as conn:
            conn.execute(sql, {"number": whatsapp_number, "id": doctor_id})
