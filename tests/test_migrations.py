import pytest
from sqlalchemy import create_engine, inspect
from sqlalchemy.exc import IntegrityError

from addressbook.migrations import run_migrations


@pytest.fixture()
def legacy_engine(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'legacy.db'}")
    with engine.begin() as conn:
        conn.exec_driver_sql(
            "CREATE TABLE contacts ("
            " id INTEGER PRIMARY KEY AUTOINCREMENT,"
            " name VARCHAR(255) NOT NULL,"
            " phone_number VARCHAR(20) NOT NULL,"
            " email VARCHAR(255) NOT NULL,"
            " created_at DATETIME NOT NULL)"
        )
        conn.exec_driver_sql(
            "INSERT INTO contacts (name, phone_number, email, created_at)"
            " VALUES ('Ana', '+14155552671', 'ana@x.com', '2024-01-01 00:00:00')"
        )
    yield engine
    engine.dispose()


def test_adds_missing_columns_and_backfills(legacy_engine):
    run_migrations(legacy_engine)

    columns = {c["name"] for c in inspect(legacy_engine).get_columns("contacts")}
    assert {"address", "is_favorite", "updated_at"} <= columns

    with legacy_engine.connect() as conn:
        row = conn.exec_driver_sql("SELECT is_favorite, updated_at, created_at FROM contacts").one()
    assert row[0] == 0
    assert row[1] == row[2]


def test_creates_unique_indexes(legacy_engine):
    run_migrations(legacy_engine)

    with pytest.raises(IntegrityError):
        with legacy_engine.begin() as conn:
            conn.exec_driver_sql(
                "INSERT INTO contacts (name, phone_number, email, created_at)"
                " VALUES ('Ana 2', '+14155550000', 'ana@x.com', '2024-01-02 00:00:00')"
            )


def test_is_idempotent(legacy_engine):
    run_migrations(legacy_engine)
    run_migrations(legacy_engine)

    names = {ix["name"] for ix in inspect(legacy_engine).get_indexes("contacts")}
    assert {"ix_contacts_email", "ix_contacts_phone_number"} <= names


def test_skips_databases_without_contacts_table(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'empty.db'}")
    run_migrations(engine)
    assert inspect(engine).get_table_names() == []
    engine.dispose()


def test_app_startup_on_fresh_database(app):
    indexes = {ix["name"]: ix for ix in inspect(app.state.engine).get_indexes("contacts")}
    assert indexes["ix_contacts_email"]["unique"]
    assert indexes["ix_contacts_phone_number"]["unique"]
