"""
Shared test setup: an in-memory database, a fresh OTP ledger and a recording
SMS client for every test
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("RATE_LIMIT_ENABLED", "true")
os.environ.setdefault("SMS_BACKEND", "twilio")

from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from nco_search.database import Base, get_db
from nco_search.auth.auth_handler import AuthHandler
from nco_search.models.user import User
from nco_search.services.otp_service import InMemoryOTPStore, get_otp_store
from nco_search.services.rate_limiter import limiter, otp_rate_limiter
from nco_search.services.sms_service import SMSDeliveryError, get_sms_client
from main import app

# Test database setup
SQLALCHEMY_DATABASE_URL = "sqlite://"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

ADMIN_PHONE = "9000000001"
ENUMERATOR_PHONE = "8925341040"
INACTIVE_PHONE = "7000000002"

def override_get_db():
    try:
        db = TestingSessionLocal()
        yield db
    finally:
        db.close()

class FakeSMSClient:
    """Records every message instead of sending it"""

    is_configured = True

    def __init__(self):
        self.sent = []
        self.error = None

    async def send_otp(self, phone: str, code: str) -> str:
        if self.error is not None:
            raise self.error
        self.sent.append((phone, code))
        return f"SM{len(self.sent)}"

    def fail_with(self, message: str, provider_code: int = None):
        self.error = SMSDeliveryError(message, provider_code)

    def last_code(self, phone: str) -> str:
        for sent_phone, code in reversed(self.sent):
            if sent_phone == phone:
                return code
        raise AssertionError(f"No OTP was sent to {phone}")

@pytest.fixture
def otp_store():
    return InMemoryOTPStore()

@pytest.fixture
def sms_client():
    return FakeSMSClient()

@pytest.fixture
def session_factory():
    return TestingSessionLocal

@pytest.fixture(autouse=True)
def setup_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    db.add_all([
        User(phone=ADMIN_PHONE, name="Test Admin", role="ADMIN", is_active=True),
        User(phone=ENUMERATOR_PHONE, name="Test Enumerator", role="ENUMERATOR", is_active=True),
        User(phone=INACTIVE_PHONE, name="Inactive Enumerator", role="ENUMERATOR", is_active=False),
    ])
    db.commit()
    db.close()
    yield
    Base.metadata.drop_all(bind=engine)

@pytest.fixture
def db_session():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()

@pytest.fixture
def client(otp_store, sms_client):
    limiter.reset()
    otp_rate_limiter.reset()
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_otp_store] = lambda: otp_store
    app.dependency_overrides[get_sms_client] = lambda: sms_client
    yield TestClient(app)
    app.dependency_overrides.clear()

def make_token(phone: str, role: str, name: str, **kwargs) -> str:
    user = SimpleNamespace(phone=phone, role=role, name=name)
    return AuthHandler().create_session_token(user, **kwargs)

@pytest.fixture
def admin_headers():
    return {"Authorization": f"Bearer {make_token(ADMIN_PHONE, 'ADMIN', 'Test Admin')}"}

@pytest.fixture
def enumerator_headers():
    return {"Authorization": f"Bearer {make_token(ENUMERATOR_PHONE, 'ENUMERATOR', 'Test Enumerator')}"}
