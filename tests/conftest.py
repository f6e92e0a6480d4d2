from pathlib import Path
import os

# addressbook.main builds a module-level app on import; keep it off the disk
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ENV", "test")

import pytest
from fastapi.testclient import TestClient

from addressbook.config import Settings
from addressbook.main import create_app
from addressbook.models import Contact


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    return Settings(
        DATABASE_URL=f"sqlite:///{tmp_path / 'test.db'}",
        ENV="test",
        SECRET_KEY="test-secret-key-for-pytest",
        LOG_LEVEL="DEBUG",
        PHONE_DEFAULT_REGION=None,
        STATIC_DIR=str(tmp_path / "no-static"),
    )


@pytest.fixture()
def app(settings: Settings):
    app = create_app(settings)
    yield app
    app.state.engine.dispose()


@pytest.fixture()
def client(app):
    with TestClient(app) as client:
        yield client


@pytest.fixture()
def db(app):
    session = app.state.session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def make_contact(db):
    def _make_contact(
        name: str = "Ana",
        email: str = "ana@x.com",
        phone_number: str = "+14155552671",
        address: str | None = None,
        is_favorite: bool = False,
    ) -> Contact:
        contact = Contact(
            name=name,
            email=email,
            phone_number=phone_number,
            address=address,
            is_favorite=is_favorite,
        )
        db.add(contact)
        db.commit()
        return contact

    return _make_contact
