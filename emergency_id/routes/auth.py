# emergency_id/routes/auth.py
from flask import Blueprint, g, request
from marshmallow import ValidationError as SchemaError
import structlog

from ..auth import require_auth
from ..errors import ValidationError
from ..schemas import LoginSchema, RegisterSchema
from ..services import get_services

auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")
log = structlog.get_logger(__name__)


def load_json(schema, **kwargs):
    """Validate the JSON body against ``schema`` or raise ValidationError."""
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        raise ValidationError("JSON object body required")
    try:
        return schema.load(body, **kwargs)
    except SchemaError as e:
        raise ValidationError("Invalid payload", e.messages)


@auth_bp.post("/register")
def register():
    """Create a patient or doctor account; doctors must present the registration code."""
    data = load_json(RegisterSchema())
    user = get_services().accounts.register(
        data["email"], data["password"], data["role"], data.get("doctor_code")
    )
    return {"success": True, "message": "Account created", "user": user.to_public()}, 201


@auth_bp.post("/login")
def login():
    data = load_json(LoginSchema())
    services = get_services()
    user = services.accounts.authenticate(data["email"], data["password"])
    token = services.tokens.issue(user.id, user.role, user.email)
    return {"success": True, "token": token, "user": user.to_public()}, 200


@auth_bp.post("/logout")
@require_auth()
def logout():
    """
    Acknowledge a logout. Tokens are not revoked server-side; the client
    discards its copy and the token lapses at its expiry.
    """
    log.info("logout", user_id=g.current_user.id)
    return {"success": True, "message": "Logged out"}, 200
