import os
import sys
from pathlib import Path

# Settings are read at import time
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["EMAIL_USE_CELERY"] = "false"
os.environ["ENVIRONMENT"] = "test"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ.pop("SMTP_HOST", None)

# Make the backend directory importable
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from tests.utils import auth_headers, create_user, make_event
from vendor_market.core.roles import Role
from vendor_market.db import get_session
from vendor_market.main import app
from vendor_market.services.email import EmailResult
from vendor_market.services.storage import LocalStorage, get_storage


@pytest.fixture
def engine():
    test_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(test_engine)
    yield test_engine
    SQLModel.metadata.drop_all(test_engine)


@pytest.fixture
def session(engine):
    with Session(engine) as db_session:
        yield db_session


@pytest.fixture
def storage(tmp_path):
    return LocalStorage(tmp_path / "storage")


@pytest.fixture
def sent_emails(monkeypatch):
    """Capture outgoing email instead of sending it."""
    outbox = []

    def fake_send_email(to, subject, html, text, from_address=None):
        outbox.append({"to": to, "subject": subject, "html": html, "text": text})
        return EmailResult(success=True, message_id=f"test-{len(outbox)}")

    monkeypatch.setattr("vendor_market.services.notifications.send_email", fake_send_email)
    return outbox


@pytest.fixture
def client(engine, storage, sent_emails):
    def override_get_session():
        with Session(engine) as db_session:
            yield db_session

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_storage] = lambda: storage
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def organizer(session):
    return create_user(session, "organizer@example.com", Role.ORGANIZER)


@pytest.fixture
def admin(session):
    return create_user(session, "admin@example.com", Role.ADMIN)


@pytest.fixture
def vendor_user(session):
    return create_user(session, "vendor@example.com", Role.VENDOR)


@pytest.fixture
def organizer_headers(organizer):
    return auth_headers(organizer)


@pytest.fixture
def admin_headers(admin):
    return auth_headers(admin)


@pytest.fixture
def vendor_headers(vendor_user):
    return auth_headers(vendor_user)


@pytest.fixture
def active_event(session):
    return make_event(session)
