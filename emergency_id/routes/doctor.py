# emergency_id/routes/doctor.py
from flask import Blueprint, g, request

from ..auth import require_auth
from ..errors import NotFound, ValidationError
from ..models import OUTCOME_GRANTED, OUTCOME_NOT_FOUND, ROLE_DOCTOR, isoformat_utc
from ..qr import extract_public_id
from ..schemas import QrResolveSchema
from ..services import Origin, get_services
from .auth import load_json

doctor_bp = Blueprint("doctor", __name__, url_prefix="/api/doctor")


def _client_ip() -> str | None:
    forwarded = request.headers.get("X-Forwarded-For", "")
    if forwarded:
        return forwarded.split(",")[0].strip() or request.remote_addr
    return request.remote_addr


def _origin() -> Origin:
    return Origin(
        ip_address=_client_ip(),
        user_agent=request.headers.get("User-Agent"),
        purpose=request.args.get("purpose") or None,
        location=request.args.get("location") or None,
    )


@doctor_bp.get("/patient/<public_patient_id>")
@require_auth(ROLE_DOCTOR)
def lookup_patient(public_patient_id):
    """
    Emergency lookup by public patient id. Only finalized profiles are
    visible; every attempt is written to the access log.
    """
    services = get_services()
    public_patient_id = public_patient_id.strip()
    profile = services.profiles.find_by_public_id(public_patient_id)

    if profile is None:
        if services.settings.audit_failed_lookups:
            services.audit.record(public_patient_id, g.current_user, OUTCOME_NOT_FOUND, _origin())
        raise NotFound("Patient not found")

    entry = services.audit.record(public_patient_id, g.current_user, OUTCOME_GRANTED, _origin())
    return {
        "success": True,
        "patient": profile.to_dict(),
        "accessTime": isoformat_utc(entry.accessed_at),
    }, 200


@doctor_bp.post("/resolve-qr")
@require_auth(ROLE_DOCTOR)
def resolve_qr():
    """Turn scanned QR text into a public patient id."""
    data = load_json(QrResolveSchema())
    public_patient_id = extract_public_id(data["qrData"])
    if public_patient_id is None:
        raise ValidationError("Could not extract a patient id from the QR data")
    return {"success": True, "publicPatientId": public_patient_id}, 200
