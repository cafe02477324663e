"""
Shared fixtures: an app on in-memory SQLite, its test client, and helpers
for creating logged-in patients and doctors.
"""
import pytest

from emergency_id import create_app
from emergency_id.config import TestConfig
from emergency_id.extensions import db

from .helpers import FULL_PROFILE, PASSWORD, bearer


@pytest.fixture
def app():
    app = create_app(TestConfig)
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def register(client):
    def _register(email, password=PASSWORD, role=None, **extra):
        body = {"email": email, "password": password, **extra}
        if role is not None:
            body["role"] = role
        return client.post("/api/auth/register", json=body)
    return _register


@pytest.fixture
def login(client):
    def _login(email, password=PASSWORD):
        return client.post("/api/auth/login", json={"email": email, "password": password})
    return _login


@pytest.fixture
def patient_token(register, login):
    assert register("a@x.com", role="patient").status_code == 201
    return login("a@x.com").get_json()["token"]


@pytest.fixture
def doctor_token(register, login):
    resp = register("doc@x.com", role="doctor", doctorCode=TestConfig.DOCTOR_SECRET_CODE)
    assert resp.status_code == 201
    return login("doc@x.com").get_json()["token"]


@pytest.fixture
def finalized_profile(client, patient_token):
    resp = client.post("/api/patient/profile", json=FULL_PROFILE, headers=bearer(patient_token))
    assert resp.status_code == 200
    return resp.get_json()["patient"]
