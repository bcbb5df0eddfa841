"""
Shared test fixtures: SQLite test database, test client, auth helpers,
and a ready-to-quote assessment.
"""

import os
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

# Settings are read at import, so the environment goes first
os.environ["JWT_SECRET"] = "test-secret-key-for-testing-only"
os.environ["DATABASE_URL"] = "sqlite:///./test.db"
os.environ["ADMIN_EMAILS"] = "admin@nxtkonekt.com"

from backend.config import settings
from backend.database import Base, get_db
from backend.main import app


TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(autouse=True)
def setup_database():
    """Create all tables before each test, drop after."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def upload_dir(tmp_path, monkeypatch):
    """Uploads and PDFs go to a per-test directory."""
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(tmp_path / "uploads"))
    return tmp_path / "uploads"


@pytest.fixture
def client():
    """FastAPI test client."""
    return TestClient(app)


@pytest.fixture
def db():
    """Direct database session for test setup/assertions."""
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


def register(client, email, password="strongpassword123", **extra):
    response = client.post("/api/auth/register", json={"email": email, "password": password, **extra})
    assert response.status_code == 200, response.text
    return response.json()


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers(client):
    """Register a partner with an organization and return auth headers."""
    headers = bearer(register(client, "partner@wireless.com", firstName="Pat", lastName="Partner")["access_token"])
    resp = client.post("/api/organizations/", json={"name": "Wireless Partners LLC"}, headers=headers)
    assert resp.status_code == 200
    return headers


@pytest.fixture
def other_headers(client):
    """A second partner, for ownership checks."""
    return bearer(register(client, "other@wireless.com")["access_token"])


@pytest.fixture
def admin_headers(client):
    """Register the configured admin email and return auth headers."""
    return bearer(register(client, "admin@nxtkonekt.com", firstName="Ada", lastName="Admin")["access_token"])


def sample_assessment(**overrides):
    """Steps 1-3 filled in for a primary fixed wireless install with antenna."""
    data = {
        "serviceType": "site-assessment",
        "salesExecutiveName": "Jane Seller",
        "salesExecutiveEmail": "jane@wireless.com",
        "salesExecutivePhone": "555-0100",
        "customerCompanyName": "Acme Dental",
        "customerContactName": "Dr. Smile",
        "customerEmail": "office@acmedental.com",
        "customerPhone": "555-0199",
        "siteAddress": "12 Main St, Springfield",
        "industry": "Healthcare",
        "buildingType": "office",
        "coverageArea": 2500,
        "floors": 1,
        "routerCount": 2,
        "connectionUsage": "primary",
        "lowSignalAntennaCable": "yes",
        "cableFootage": "50",
    }
    data.update(overrides)
    return data


@pytest.fixture
def assessment(client, auth_headers):
    """A complete assessment owned by the auth_headers partner."""
    resp = client.post("/api/assessments/", json=sample_assessment(), headers=auth_headers)
    assert resp.status_code == 200, resp.text
    return resp.json()


@pytest.fixture
def quote(client, auth_headers, assessment):
    """A generated quote for the complete assessment."""
    resp = client.post(f"/api/assessments/{assessment['id']}/quote", headers=auth_headers)
    assert resp.status_code == 200, resp.text
    return resp.json()


@pytest.fixture
def assessment_data():
    """Builder for complete assessment payloads: assessment_data(floors=3)."""
    return sample_assessment
