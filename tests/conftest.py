import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DEBUG", "false")
os.environ.setdefault("SQL_ECHO", "false")
os.environ.setdefault("AUTO_CREATE_DB", "false")
os.environ.setdefault("EMAIL_BACKEND", "disabled")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import sys
from pathlib import Path

project_root = Path(__file__).resolve().parents[1]
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

import app.models  # noqa: F401

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine

from app.core.config import settings
from app.core.security import CredentialIssuer


class RecordingNotifier:
    def __init__(self):
        self.sent = []

    def send_email_verification(self, *, to_email: str, verification_link: str) -> None:
        self.sent.append((to_email, verification_link))


@pytest.fixture()
def engine():
    return create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )


@pytest.fixture()
def db_session(engine):
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        yield session


@pytest.fixture()
def issuer():
    return CredentialIssuer("test-secret-key")


@pytest.fixture()
def notifier():
    return RecordingNotifier()


@pytest.fixture()
def service(db_session, issuer, notifier):
    from app.services.account_lifecycle import AccountLifecycleService

    return AccountLifecycleService(db_session, issuer=issuer, notifier=notifier, settings=settings)


@pytest.fixture()
def sent_emails(monkeypatch):
    from app.services.email_service import EmailService

    sent = []

    def fake_send_email_verification(*, to_email: str, verification_link: str) -> bool:
        sent.append((to_email, verification_link))
        return True

    monkeypatch.setattr(EmailService, "send_email_verification", fake_send_email_verification)
    return sent


@pytest.fixture()
def client(engine, db_session, sent_emails):
    from app.main import app
    from app.core.database import get_session

    def get_session_override():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = get_session_override
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
