from dataclasses import dataclass

import structlog

from ..extensions import db
from ..models import AccessLogEntry, User

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class Origin:
    """Where a lookup came from, as seen by the HTTP layer."""

    ip_address: str | None = None
    user_agent: str | None = None
    purpose: str | None = None
    location: str | None = None


class AuditLog:
    """Append-only record of doctor lookups."""

    def record(self, public_patient_id: str, user: User, outcome: str,
               origin: Origin | None = None) -> AccessLogEntry:
        origin = origin or Origin()
        entry = AccessLogEntry(
            public_patient_id=public_patient_id,
            accessed_by_user_id=user.id,
            accessed_by_email=user.email,
            outcome=outcome,
            ip_address=origin.ip_address,
            user_agent=origin.user_agent,
            purpose=origin.purpose,
            location=origin.location,
        )
        db.session.add(entry)
        db.session.commit()
        log.info("patient_lookup", public_patient_id=public_patient_id,
                 doctor_id=user.id, outcome=outcome, ip=origin.ip_address)
        return entry

    def list_for_patient(self, public_patient_id: str, limit: int = 100) -> list[AccessLogEntry]:
        return (AccessLogEntry.query
                .filter_by(public_patient_id=public_patient_id)
                .order_by(AccessLogEntry.accessed_at.desc(), AccessLogEntry.id.desc())
                .limit(limit)
                .all())
