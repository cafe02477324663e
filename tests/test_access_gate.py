"""Authentication and role checks applied to protected routes."""
from datetime import datetime, timedelta, timezone

import pytest

from emergency_id.extensions import db
from emergency_id.models import User
from emergency_id.services import get_services

from .helpers import bearer

DOCTOR_LOOKUP = "/api/doctor/patient/EMG-1-A"


@pytest.mark.parametrize("path,method", [
    ("/api/patient/profile", "get"),
    ("/api/patient/profile", "post"),
    ("/api/patient/access-log", "get"),
    (DOCTOR_LOOKUP, "get"),
    ("/api/doctor/resolve-qr", "post"),
])
def test_missing_token(client, path, method):
    resp = getattr(client, method)(path)
    assert resp.status_code == 401
    assert resp.get_json()["code"] == "authentication_required"


def test_empty_bearer_value(client):
    resp = client.get("/api/patient/profile", headers={"Authorization": "Bearer "})
    assert resp.status_code == 401
    assert resp.get_json()["code"] == "authentication_required"


def test_garbage_token(client):
    resp = client.get("/api/patient/profile", headers=bearer("not.a.token"))
    assert resp.status_code == 401
    assert resp.get_json()["code"] == "token_invalid"


def test_bare_token_accepted(client, patient_token):
    resp = client.get("/api/patient/profile", headers={"Authorization": patient_token})
    assert resp.status_code == 200


def test_expired_token(app, client, patient_token):
    with app.app_context():
        user = User.query.filter_by(email="a@x.com").one()
        stale = get_services().tokens.issue(
            user.id, user.role, user.email,
            now=datetime.now(timezone.utc) - timedelta(days=8),
        )
    resp = client.get("/api/patient/profile", headers=bearer(stale))
    assert resp.status_code == 401
    assert resp.get_json()["code"] == "token_expired"


def test_token_for_deleted_account(app, client, patient_token):
    with app.app_context():
        db.session.delete(User.query.filter_by(email="a@x.com").one())
        db.session.commit()
    resp = client.get("/api/patient/profile", headers=bearer(patient_token))
    assert resp.status_code == 401
    assert resp.get_json()["code"] == "authentication_required"


def test_patient_cannot_use_doctor_lookup(client, patient_token):
    resp = client.get(DOCTOR_LOOKUP, headers=bearer(patient_token))
    assert resp.status_code == 403
    assert resp.get_json()["code"] == "authorization_denied"


def test_doctor_cannot_touch_patient_profile(client, doctor_token):
    assert client.get("/api/patient/profile", headers=bearer(doctor_token)).status_code == 403
    resp = client.post("/api/patient/profile", json={}, headers=bearer(doctor_token))
    assert resp.status_code == 403
    assert resp.get_json()["code"] == "authorization_denied"
