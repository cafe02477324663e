import secrets
import string
import time
from datetime import datetime

import structlog
from sqlalchemy.exc import IntegrityError

from ..errors import StoreUnavailable, ValidationError
from ..extensions import db
from ..models import PatientProfile, utcnow
from ..qr import build_payload, render_data_url

log = structlog.get_logger(__name__)

SUFFIX_ALPHABET = string.ascii_uppercase + string.digits

PERSONAL_FIELDS = {
    "firstName": "first_name",
    "lastName": "last_name",
    "dateOfBirth": "date_of_birth",
    "bloodType": "blood_type",
}
MEDICAL_FIELDS = {
    "allergies": "allergies",
    "conditions": "conditions",
    "medications": "medications",
}
CONTACT_FIELDS = {
    "name": "emergency_contact_name",
    "phone": "emergency_contact_phone",
    "relationship": "emergency_contact_relationship",
}


def generate_public_id(suffix_length: int = 6) -> str:
    """``EMG-<epoch millis>-<random uppercase alphanumerics>``."""
    suffix = "".join(secrets.choice(SUFFIX_ALPHABET) for _ in range(suffix_length))
    return f"EMG-{int(time.time() * 1000)}-{suffix}"


def _apply(profile, section: dict | None, mapping: dict) -> None:
    for key, attr in mapping.items():
        if section and key in section:
            setattr(profile, attr, section[key])


class ProfileStore:
    """One emergency profile per patient account."""

    # create conflicts are retried this many times before giving up
    max_attempts = 3

    def get_own(self, user_id: str) -> PatientProfile | None:
        return PatientProfile.query.filter_by(owner_user_id=user_id).first()

    def find_by_public_id(self, public_patient_id: str) -> PatientProfile | None:
        return PatientProfile.query.filter_by(
            public_patient_id=public_patient_id, finalized=True
        ).first()

    def save_own(self, user_id: str, personal_info: dict | None, medical_info: dict | None,
                 emergency_contact: dict | None, finalize: bool = True,
                 now: datetime | None = None) -> PatientProfile:
        """
        Create or update the caller's profile.

        Sections are merged key by key, so a draft save only touches the
        fields it carries. With ``finalize`` every required field must be
        present after the merge; otherwise nothing is written.
        """
        for attempt in range(1, self.max_attempts + 1):
            profile = self.get_own(user_id)
            created = profile is None
            if created:
                profile = PatientProfile(owner_user_id=user_id,
                                         public_patient_id=generate_public_id(),
                                         allergies=[], conditions=[], medications=[])
                db.session.add(profile)

            _apply(profile, personal_info, PERSONAL_FIELDS)
            _apply(profile, medical_info, MEDICAL_FIELDS)
            _apply(profile, emergency_contact, CONTACT_FIELDS)

            missing = profile.missing_required_fields()
            if finalize and missing:
                db.session.rollback()
                raise ValidationError(
                    "Please fill in all required fields",
                    details={field: ["Missing data for required field."] for field in missing},
                )

            saved_at = now or utcnow()
            profile.finalized = bool(profile.finalized) or finalize
            profile.updated_at = saved_at
            profile.qr_image = render_data_url(build_payload(profile, saved_at))

            try:
                db.session.commit()
            except IntegrityError:
                # concurrent first save for this user, or a public id collision
                db.session.rollback()
                log.warning("profile_upsert_conflict", user_id=user_id, attempt=attempt)
                continue

            log.info("profile_saved", user_id=user_id, created=created,
                     public_patient_id=profile.public_patient_id,
                     finalized=profile.finalized)
            return profile

        raise StoreUnavailable("Could not save profile, please retry")
