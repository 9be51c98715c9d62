import os
from datetime import datetime, timedelta

# Configuration is read at import time
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["EMAIL_ENABLED"] = "false"
os.environ["WHATSAPP_ENABLED"] = "false"
os.environ["ENABLE_REAL_PAYMENTS"] = "false"
os.environ["SUPABASE_JWT_SECRET"] = "test-jwt-secret"
os.environ.pop("PAYMENT_CALLBACK_SECRET", None)
os.environ.pop("REDIS_URL", None)

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from juris import rate_limiter  # noqa: E402
from juris.auth import get_current_firm  # noqa: E402
from juris.database import Base, get_db  # noqa: E402
from juris.main import app  # noqa: E402
from juris.models import Case, Client, Profile  # noqa: E402

FIRM_ID = "0b7a1c52-4a8e-4f0e-9d6b-3f1f5f6a7c01"


@pytest.fixture
def db_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def firm(db_session):
    """A premium firm with an active subscription paid well ahead"""
    profile = Profile(
        id=FIRM_ID,
        firm_name="Cabinet Diop & Associés",
        email="contact@cabinet-diop.sn",
        phone="+221771234567",
        subscription_plan="premium",
        subscription_status="active",
        subscription_started_at=datetime.utcnow() - timedelta(days=10),
        subscription_expires_at=datetime.utcnow() + timedelta(days=20),
    )
    db_session.add(profile)
    db_session.commit()
    db_session.refresh(profile)
    return profile


@pytest.fixture
def basic_firm(db_session, firm):
    firm.subscription_plan = "basic"
    db_session.commit()
    return firm


@pytest.fixture
def no_redis(monkeypatch):
    """Rate limiting falls back to the in-memory counters"""
    monkeypatch.setattr(rate_limiter, "get_redis_client", lambda: None)
    rate_limiter.memory_cache.clear()
    yield
    rate_limiter.memory_cache.clear()


@pytest.fixture
def api_client(db_session, firm, no_redis):
    """Authenticated test client acting as the seeded firm"""

    def override_get_db():
        yield db_session

    def override_current_firm():
        return db_session.query(Profile).filter(Profile.id == FIRM_ID).first()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_current_firm] = override_current_firm
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def anonymous_client(db_session, no_redis):
    """Test client going through the real bearer token verification"""

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def law_client(db_session, firm):
    client = Client(
        firm_id=firm.id,
        first_name="Awa",
        last_name="Ndiaye",
        email="awa.ndiaye@example.sn",
        phone="+221770000001",
    )
    db_session.add(client)
    db_session.commit()
    db_session.refresh(client)
    return client


@pytest.fixture
def case(db_session, firm, law_client):
    case = Case(
        firm_id=firm.id,
        client_id=law_client.id,
        case_number=f"CASE-{datetime.utcnow().year}-0001",
        title="Litige commercial Ndiaye c/ SONATEL",
        hourly_rate=30000,
    )
    db_session.add(case)
    db_session.commit()
    db_session.refresh(case)
    return case


@pytest.fixture
def sent_emails(monkeypatch):
    """Capture outgoing emails instead of calling Resend"""
    sent = []

    async def fake_send_email(to, subject, mjml_content, from_address=None):
        sent.append({"to": to, "subject": subject, "content": mjml_content})
        return {"id": f"email_{len(sent)}"}

    monkeypatch.setattr("juris.email_service.send_email", fake_send_email)
    return sent
