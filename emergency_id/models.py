# emergency_id/models.py
from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import event

from .extensions import db

ROLE_PATIENT = "patient"
ROLE_DOCTOR = "doctor"
ROLES = (ROLE_PATIENT, ROLE_DOCTOR)

OUTCOME_GRANTED = "granted"
OUTCOME_NOT_FOUND = "not_found"


def uid(prefix: str) -> str:
    """Generate a short unique id with a prefix."""
    return f"{prefix}_{uuid4().hex[:12]}"


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def isoformat_utc(value: datetime) -> str:
    """ISO 8601 in UTC with a trailing Z; naive values are taken as UTC."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value.isoformat() + "Z"


class User(db.Model):
    __tablename__ = "user"

    id = db.Column(db.String, primary_key=True, default=lambda: uid("usr"))
    email = db.Column(db.String, unique=True, index=True, nullable=False)
    password_hash = db.Column(db.String, nullable=False)
    role = db.Column(db.String, nullable=False, default=ROLE_PATIENT)
    created_at = db.Column(db.DateTime, default=utcnow)

    profile = db.relationship("PatientProfile", back_populates="owner", uselist=False)

    def to_public(self):
        return {"email": self.email, "role": self.role}


class PatientProfile(db.Model):
    __tablename__ = "patient_profile"

    id = db.Column(db.String, primary_key=True, default=lambda: uid("pat"))
    owner_user_id = db.Column(db.String, db.ForeignKey("user.id"), unique=True, nullable=False)
    public_patient_id = db.Column(db.String, unique=True, index=True, nullable=False)

    first_name = db.Column(db.String)
    last_name = db.Column(db.String)
    date_of_birth = db.Column(db.Date)
    blood_type = db.Column(db.String)

    allergies = db.Column(db.JSON, nullable=False, default=list)
    conditions = db.Column(db.JSON, nullable=False, default=list)
    medications = db.Column(db.JSON, nullable=False, default=list)

    emergency_contact_name = db.Column(db.String)
    emergency_contact_phone = db.Column(db.String)
    emergency_contact_relationship = db.Column(db.String)

    qr_image = db.Column(db.Text)
    finalized = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow)

    owner = db.relationship("User", back_populates="profile")

    REQUIRED_FIELDS = {
        "first_name": "personalInfo.firstName",
        "last_name": "personalInfo.lastName",
        "date_of_birth": "personalInfo.dateOfBirth",
        "blood_type": "personalInfo.bloodType",
        "emergency_contact_name": "emergencyContact.name",
        "emergency_contact_phone": "emergencyContact.phone",
    }

    def missing_required_fields(self) -> list[str]:
        return [label for attr, label in self.REQUIRED_FIELDS.items()
                if getattr(self, attr) in (None, "")]

    @property
    def full_name(self) -> str:
        return " ".join(p for p in (self.first_name, self.last_name) if p)

    def to_dict(self):
        return {
            "id": self.id,
            "publicPatientId": self.public_patient_id,
            "personalInfo": {
                "firstName": self.first_name,
                "lastName": self.last_name,
                "dateOfBirth": self.date_of_birth.isoformat() if self.date_of_birth else None,
                "bloodType": self.blood_type,
            },
            "medicalInfo": {
                "allergies": list(self.allergies or []),
                "conditions": list(self.conditions or []),
                "medications": list(self.medications or []),
            },
            "emergencyContact": {
                "name": self.emergency_contact_name,
                "phone": self.emergency_contact_phone,
                "relationship": self.emergency_contact_relationship,
            },
            "qrImage": self.qr_image,
            "finalized": self.finalized,
            "updatedAt": isoformat_utc(self.updated_at) if self.updated_at else None,
        }


class AccessLogEntry(db.Model):
    __tablename__ = "access_log_entry"

    id = db.Column(db.String, primary_key=True, default=lambda: uid("log"))
    public_patient_id = db.Column(db.String, index=True, nullable=False)
    accessed_by_user_id = db.Column(db.String, index=True, nullable=False)
    accessed_by_email = db.Column(db.String, nullable=False)
    accessed_at = db.Column(db.DateTime, index=True, default=utcnow, nullable=False)
    outcome = db.Column(db.String, nullable=False)
    ip_address = db.Column(db.String)
    user_agent = db.Column(db.String)
    purpose = db.Column(db.String)
    location = db.Column(db.String)

    def to_dict(self):
        return {
            "id": self.id,
            "publicPatientId": self.public_patient_id,
            "accessedByEmail": self.accessed_by_email,
            "accessTime": isoformat_utc(self.accessed_at),
            "outcome": self.outcome,
            "ipAddress": self.ip_address,
            "purpose": self.purpose,
            "location": self.location,
        }


class AuditLogImmutable(RuntimeError):
    """Raised when something tries to rewrite or remove an audit entry."""


@event.listens_for(AccessLogEntry, "before_update")
def _refuse_audit_update(mapper, connection, target):
    raise AuditLogImmutable(f"access log entry {target.id} is append-only")


@event.listens_for(AccessLogEntry, "before_delete")
def _refuse_audit_delete(mapper, connection, target):
    raise AuditLogImmutable(f"access log entry {target.id} is append-only")
