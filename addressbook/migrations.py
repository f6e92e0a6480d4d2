# addressbook/migrations.py
import logging
from typing import Iterable

from sqlalchemy.engine import Connection, Engine

log = logging.getLogger(__name__)


def _pragma_table_info(conn: Connection, table: str) -> set[str]:
    rows = conn.exec_driver_sql(f"PRAGMA table_info({table})").all()
    # row tuple: (cid, name, type, notnull, dflt_value, pk)
    return {r[1] for r in rows}


def _has_table(conn: Connection, table: str) -> bool:
    r = conn.exec_driver_sql(
        "SELECT name FROM sqlite_master WHERE type='table' AND name=?",
        (table,),
    ).fetchone()
    return bool(r)


def _ensure_columns(conn: Connection, table: str, needed: Iterable[tuple[str, str]]) -> list[str]:
    if not _has_table(conn, table):
        return []
    existing = _pragma_table_info(conn, table)
    added = []
    for name, ddl in needed:
        if name not in existing:
            conn.exec_driver_sql(f"ALTER TABLE {table} ADD COLUMN {name} {ddl}")
            added.append(name)
    return added


def run_migrations(engine: Engine) -> None:
    """Idempotent, SQLite-only migrations. Safe to run at every startup."""
    if engine.url.get_backend_name() != "sqlite":
        return

    with engine.begin() as conn:
        if not _has_table(conn, "contacts"):
            return

        # early databases only had name / phone_number / email / created_at
        added = _ensure_columns(conn, "contacts", [
            ("address", "VARCHAR(255)"),
            ("is_favorite", "BOOLEAN NOT NULL DEFAULT 0"),
            ("updated_at", "DATETIME"),
        ])
        if added:
            log.info("contacts: added columns %s", ", ".join(added))

        if "updated_at" in added:
            conn.exec_driver_sql("UPDATE contacts SET updated_at = created_at WHERE updated_at IS NULL")

        # same names SQLAlchemy gives the model's unique indexes, so these
        # are no-ops on a database created by create_all()
        conn.exec_driver_sql(
            "CREATE UNIQUE INDEX IF NOT EXISTS ix_contacts_email ON contacts(email)"
        )
        conn.exec_driver_sql(
            "CREATE UNIQUE INDEX IF NOT EXISTS ix_contacts_phone_number ON contacts(phone_number)"
        )
