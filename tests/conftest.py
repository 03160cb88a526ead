"""
Pytest configuration and fixtures for the MPI Builder API tests.
"""

import os
import shutil
import tempfile

import pytest
from fastapi.testclient import TestClient

# Set test environment variables before importing the app
_TMP_DIR = tempfile.mkdtemp(prefix="mpi_test_")
os.environ["DATABASE_URL"] = f"sqlite:///{_TMP_DIR}/test.db"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["JWT_SECRET"] = "test-secret-key"
os.environ["ADMIN_SIGNUP_KEY"] = "test-admin-key"
os.environ["LOG_LEVEL"] = "WARNING"

from database import Base, SessionLocal, engine  # noqa: E402
from main import app  # noqa: E402

ADMIN_KEY = "test-admin-key"
PASSWORD = "password123"


@pytest.fixture(scope="session", autouse=True)
def _cleanup_tmp_dir():
    yield
    engine.dispose()
    shutil.rmtree(_TMP_DIR, ignore_errors=True)


@pytest.fixture(autouse=True)
def fresh_db():
    """Every test starts from empty tables."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def client():
    """Create a test client for the FastAPI app."""
    return TestClient(app)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


def auth(token):
    return {"Authorization": f"Bearer {token}"}


def signup_engineer(client, email="eng@example.com", full_name="Eve Engineer", title="Process Engineer"):
    response = client.post(
        "/api/auth/signup",
        json={"fullName": full_name, "email": email, "password": PASSWORD, "title": title},
    )
    assert response.status_code == 201, response.text
    return response.json()


def signup_admin(client, email="admin@example.com", full_name="Ada Admin"):
    response = client.post(
        "/api/auth/admin-signup",
        json={"email": email, "password": PASSWORD, "adminKey": ADMIN_KEY, "fullName": full_name},
    )
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
def engineer(client):
    """Signed-up engineer: {token, user, userType}."""
    return signup_engineer(client)


@pytest.fixture
def engineer_headers(engineer):
    return auth(engineer["token"])


@pytest.fixture
def other_engineer_headers(client):
    return auth(signup_engineer(client, email="other@example.com", full_name="Oscar Other")["token"])


@pytest.fixture
def admin_headers(client):
    return auth(signup_admin(client)["token"])


@pytest.fixture
def company(client, engineer_headers):
    """An active customer company named Acme."""
    response = client.post(
        "/api/customer-companies",
        json={"companyName": "Acme", "city": "Austin", "state": "TX"},
        headers=engineer_headers,
    )
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
def form(client, admin_headers):
    response = client.post(
        "/api/admin/forms",
        json={"formId": "FORM-001", "formRev": "Rev A", "description": "Traveler form"},
        headers=admin_headers,
    )
    assert response.status_code == 201, response.text
    return response.json()


def mpi_payload(company_id, **overrides):
    payload = {
        "customerCompanyId": company_id,
        "jobNumber": "U000001",
        "mpiNumber": "MPI-000001",
        "customerAssemblyName": "Controller Board",
        "assemblyRev": "B",
        "drawingName": "CB-100",
        "drawingRev": "3",
        "assemblyQuantity": 25,
        "kitReceivedDate": "2026-01-15",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def make_mpi(client, engineer_headers, company):
    """Factory: create an MPI for the default engineer and return its JSON."""
    def _make(headers=None, **overrides):
        response = client.post(
            "/api/mpi",
            json=mpi_payload(company["id"], **overrides),
            headers=headers or engineer_headers,
        )
        assert response.status_code == 201, response.text
        return response.json()
    return _make
