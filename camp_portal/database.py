"""
Database engine initialisation and schema bootstrap.
"""

import sys

from sqlalchemy import create_engine, text

from camp_portal.config import get_env

SCHEMA_STATEMENTS = (
    """
    CREATE TABLE IF NOT EXISTS users (
        id VARCHAR(64) PRIMARY KEY,
        imacx_id VARCHAR(64) NOT NULL,
        territory VARCHAR(128),
        name VARCHAR(255),
        phone VARCHAR(32),
        email VARCHAR(255)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS usersbm (
        id VARCHAR(64) PRIMARY KEY,
        imacx_id VARCHAR(64) NOT NULL,
        territory VARCHAR(128),
        beterritory VARCHAR(128),
        name VARCHAR(255),
        phone VARCHAR(32),
        email VARCHAR(255)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS doctors (
        id VARCHAR(64) PRIMARY KEY,
        imacx_code VARCHAR(64) NOT NULL,
        name VARCHAR(255) NOT NULL,
        specialty VARCHAR(255),
        clinic_name VARCHAR(255),
        clinic_address VARCHAR(512),
        city VARCHAR(128),
        phone VARCHAR(32) NOT NULL,
        whatsapp_number VARCHAR(32),
        territory VARCHAR(128),
        employee_code VARCHAR(64),
        is_selected_by_marketing BOOLEAN NOT NULL DEFAULT FALSE
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS camps (
        id VARCHAR(64) PRIMARY KEY,
        user_id VARCHAR(64) NOT NULL,
        doctor_id VARCHAR(64) NOT NULL,
        camp_date DATE NOT NULL,
        status VARCHAR(32) NOT NULL,
        total_patients INTEGER NOT NULL DEFAULT 0,
        consent_form_url VARCHAR(512)
    )
    """,
)


def init_engine():
    """Create a SQLAlchemy engine and verify the connection."""
    db_uri = get_env("DB_URI")
    engine = create_engine(db_uri, echo=False, future=True)
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except Exception as e:
        print("ERROR: could not connect to DB:", e, file=sys.stderr)
        sys.exit(1)
    print("[init] Connected to DB.")
    return engine


def init_schema(engine) -> None:
    """Create the directory and camp tables when they do not exist yet."""
    with engine.begin() as conn:
        for stmt in SCHEMA_STATEMENTS:
            conn.execute(text(stmt))
