"""
Unit tests for doctor addition.
"""

import pytest
from sqlalchemy import text

from camp_portal.directory import fetch_doctor
from camp_portal.doctors import add_doctor
from camp_portal.errors import CampValidationError


def test_add_doctor_stores_blanks_as_null(engine):
    doctor = add_doctor(engine, {
        "imacx_code": "DR9", "name": " Dr Kapoor ", "phone": "9800000000",
        "clinic_name": "", "Territory": "north", "Employee Code": "E-12",
    })

    stored = fetch_doctor(engine, doctor.id)
    assert stored.name == "Dr Kapoor"
    assert stored.clinic_name is None
    assert stored.territory == "north"
    assert stored.employee_code == "E-12"
    assert stored.eligible is False


@pytest.mark.parametrize("missing, label", [
    ("imacx_code", "IMACX Code"),
    ("name", "Doctor name"),
    ("phone", "Phone number"),
])
def test_add_doctor_requires_fields(engine, missing, label):
    form = {"imacx_code": "DR9", "name": "Dr Kapoor", "phone": "9800000000"}
    form[missing] = "  "
    with pytest.raises(CampValidationError, match=label):
        add_doctor(engine, form)
    with engine.connect() as conn:
        assert conn.execute(text("SELECT COUNT(*) FROM doctors")).scalar() == 0
