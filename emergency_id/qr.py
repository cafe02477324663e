"""QR artifacts for patient profiles and parsing of scanned QR text."""
from __future__ import annotations

import io
import json
import re
from base64 import b64encode
from datetime import datetime, timezone

import qrcode
from qrcode.constants import ERROR_CORRECT_M

from .models import isoformat_utc

PUBLIC_ID_PATTERN = re.compile(r"\bEMG-\d+-[A-Z0-9]+\b")


def build_payload(profile, generated_at: datetime | None = None) -> dict:
    generated_at = generated_at or datetime.now(timezone.utc)
    return {
        "patientId": profile.public_patient_id,
        "name": profile.full_name or None,
        "bloodType": profile.blood_type,
        "emergencyPhone": profile.emergency_contact_phone,
        "generatedAt": isoformat_utc(generated_at),
    }


def render_data_url(payload: dict) -> str:
    """Encode ``payload`` as JSON in a PNG QR code, returned as a data URL."""
    qr = qrcode.QRCode(error_correction=ERROR_CORRECT_M, box_size=8, border=4)
    qr.add_data(json.dumps(payload, separators=(",", ":")))
    qr.make(fit=True)
    img = qr.make_image(fill_color="black", back_color="white")
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return "data:image/png;base64," + b64encode(buf.getvalue()).decode("utf-8")


def extract_public_id(qr_text: str) -> str | None:
    """
    Pull the public patient id out of scanned QR text.

    The JSON payload written by ``render_data_url`` is tried first; any other
    text is searched for something shaped like an ``EMG-...`` id.
    """
    text = qr_text.strip()
    try:
        data = json.loads(text)
    except ValueError:
        data = None
    if isinstance(data, dict) and isinstance(data.get("patientId"), str):
        candidate = data["patientId"].strip()
        if PUBLIC_ID_PATTERN.fullmatch(candidate):
            return candidate
    match = PUBLIC_ID_PATTERN.search(text)
    return match.group(0) if match else None
