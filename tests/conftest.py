"""
Shared fixtures: an in-memory SQLite store with the portal schema.
"""

import pytest
from sqlalchemy import create_engine, text
from sqlalchemy.pool import StaticPool

from camp_portal.database import init_schema
from camp_portal.models import RemoteSession, SessionResult


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    init_schema(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def add_rows(engine):
    """Insert dict rows into a table: add_rows("users", {...}, {...})."""
    def _add(table, *rows):
        with engine.begin() as conn:
            for row in rows:
                cols = ", ".join(row)
                params = ", ".join(f":{c}" for c in row)
                conn.execute(text(f"INSERT INTO {table} ({cols}) VALUES ({params})"), row)
    return _add


@pytest.fixture
def directory(add_rows):
    """A small directory: one BE in north, one BM over north/south, doctors in three territories."""
    add_rows(
        "users",
        {"id": "u-1", "imacx_id": "BE100", "territory": "north",
         "name": "Asha Rao", "phone": "9000000001", "email": "asha@example.com"},
    )
    add_rows(
        "usersbm",
        {"id": "m-2", "imacx_id": "BM200", "territory": "bm1", "beterritory": "south",
         "name": "Vikram Shah", "phone": "9000000002", "email": None},
        {"id": "m-1", "imacx_id": "BM200", "territory": "bm1", "beterritory": "north",
         "name": "Vikram Shah", "phone": "9000000002", "email": None},
    )
    add_rows(
        "doctors",
        {"id": "d-1", "imacx_code": "DR1", "name": "Dr Zaveri", "phone": "9811111111",
         "territory": "north", "is_selected_by_marketing": True},
        {"id": "d-2", "imacx_code": "DR2", "name": "Dr Bose", "phone": "9822222222",
         "territory": "north", "is_selected_by_marketing": True},
        {"id": "d-3", "imacx_code": "DR3", "name": "Dr Menon", "phone": "+447700900000",
         "territory": "south", "is_selected_by_marketing": True},
        {"id": "d-4", "imacx_code": "DR4", "name": "Dr Iyer", "phone": "9844444444",
         "territory": "east", "is_selected_by_marketing": True},
        {"id": "d-5", "imacx_code": "DR5", "name": "Dr Anand", "phone": "9855555555",
         "territory": "north", "is_selected_by_marketing": False},
    )


@pytest.fixture
def session_down():
    """issue_session stand-in for an unreachable authentication service."""
    calls = []

    def _issue(external_id):
        calls.append(external_id)
        return SessionResult(failure="timeout", detail="No response within 10s")

    _issue.calls = calls
    return _issue


@pytest.fixture
def session_up():
    def _issue(external_id):
        return SessionResult(session=RemoteSession(
            token="tok", principal_id=f"auth-{external_id}", principal_email=f"{external_id}@auth.example",
        ))
    return _issue
