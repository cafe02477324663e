# emergency_id/routes/patient.py
from flask import Blueprint, g, request

from ..auth import require_auth
from ..models import ROLE_PATIENT
from ..schemas import ProfileInSchema
from ..services import get_services
from .auth import load_json

patient_bp = Blueprint("patient", __name__, url_prefix="/api/patient")


def _is_draft() -> bool:
    return request.args.get("draft", "").strip().lower() in ("1", "true", "yes")


@patient_bp.get("/profile")
@require_auth(ROLE_PATIENT)
def get_profile():
    profile = get_services().profiles.get_own(g.current_user.id)
    return {"success": True, "patient": profile.to_dict() if profile else None}, 200


@patient_bp.post("/profile")
@require_auth(ROLE_PATIENT)
def save_profile():
    """
    Create or update the caller's emergency profile and regenerate its QR code.
    ``?draft=true`` allows a partial save that stays hidden from doctors.
    """
    draft = _is_draft()
    data = load_json(ProfileInSchema(), partial=draft)
    profile = get_services().profiles.save_own(
        g.current_user.id,
        data.get("personalInfo"),
        data.get("medicalInfo"),
        data.get("emergencyContact"),
        finalize=not draft,
    )
    message = "Draft saved" if draft else "Profile saved"
    return {"success": True, "message": message, "patient": profile.to_dict()}, 200


@patient_bp.get("/access-log")
@require_auth(ROLE_PATIENT)
def access_log():
    """Doctor lookups of the caller's profile, newest first."""
    services = get_services()
    profile = services.profiles.get_own(g.current_user.id)
    if profile is None:
        return {"success": True, "entries": []}, 200
    try:
        limit = min(max(int(request.args.get("limit", 100)), 1), 500)
    except ValueError:
        limit = 100
    entries = services.audit.list_for_patient(profile.public_patient_id, limit)
    return {"success": True, "entries": [e.to_dict() for e in entries]}, 200
