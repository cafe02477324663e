import base64
import json
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from emergency_id.qr import build_payload, extract_public_id, render_data_url

PNG_MAGIC = b"\x89PNG\r\n\x1a\n"


def _profile(**overrides):
    values = dict(public_patient_id="EMG-1700000000000-AB12CD", full_name="Ada Lovelace",
                  blood_type="O+", emergency_contact_phone="555-0100")
    values.update(overrides)
    return SimpleNamespace(**values)


def test_payload_fields():
    at = datetime(2025, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    payload = build_payload(_profile(), at)
    assert payload == {
        "patientId": "EMG-1700000000000-AB12CD",
        "name": "Ada Lovelace",
        "bloodType": "O+",
        "emergencyPhone": "555-0100",
        "generatedAt": "2025-01-02T03:04:05Z",
    }


def test_render_produces_png_data_url():
    url = render_data_url(build_payload(_profile()))
    prefix = "data:image/png;base64,"
    assert url.startswith(prefix)
    assert base64.b64decode(url[len(prefix):]).startswith(PNG_MAGIC)


def test_generated_at_is_utc_with_z_suffix():
    naive = build_payload(_profile(), datetime(2025, 1, 2, 3, 4, 5))
    offset = build_payload(_profile(), datetime(2025, 1, 2, 5, 4, 5, tzinfo=timezone(timedelta(hours=2))))
    assert naive["generatedAt"] == offset["generatedAt"] == "2025-01-02T03:04:05Z"


@pytest.mark.parametrize("text,expected", [
    (json.dumps({"patientId": "EMG-1700000000000-AB12CD", "name": "Ada"}), "EMG-1700000000000-AB12CD"),
    ("Patient: EMG-1700000000000-ZZ9 call 555", "EMG-1700000000000-ZZ9"),
    ("  EMG-42-X  ", "EMG-42-X"),
    (json.dumps({"patientId": "not-an-id"}), None),
    ("hello world", None),
    ("EMG-1700000000000-AB12cd", None),
    ("xEMG-1700000000000-AB12", None),
    ("id: EMG-1700000000000-AB12, ward 3", "EMG-1700000000000-AB12"),
    (json.dumps(["EMG-1-A"]), "EMG-1-A"),
])
def test_extract_public_id(text, expected):
    assert extract_public_id(text) == expected
