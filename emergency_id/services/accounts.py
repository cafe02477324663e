import hmac

import structlog
from sqlalchemy.exc import IntegrityError

from ..config import Settings
from ..errors import DuplicateEmail, InvalidCredentials, InvalidDoctorCode, ValidationError, WeakPassword
from ..extensions import db
from ..models import ROLE_DOCTOR, ROLE_PATIENT, ROLES, User
from ..passwords import BCRYPT_MAX_BYTES, PasswordHasher

log = structlog.get_logger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


class AccountService:
    """Credential store: registration and password login."""

    def __init__(self, settings: Settings, hasher: PasswordHasher):
        self.settings = settings
        self.hasher = hasher

    def register(self, email: str, password: str, role: str = ROLE_PATIENT,
                 doctor_code: str | None = None) -> User:
        role = role or ROLE_PATIENT
        if role not in ROLES:
            raise ValidationError("Invalid payload", {"role": [f"Must be one of: {', '.join(ROLES)}."]})

        minimum = self.settings.min_password_length
        if len(password) < minimum:
            raise WeakPassword(f"Password must be at least {minimum} characters long")
        if len(password.encode("utf-8")) > BCRYPT_MAX_BYTES:
            raise WeakPassword(f"Password must be at most {BCRYPT_MAX_BYTES} bytes long")

        if role == ROLE_DOCTOR and not self._doctor_code_matches(doctor_code):
            log.warning("doctor_registration_rejected", email=email)
            raise InvalidDoctorCode()

        email = normalize_email(email)
        if User.query.filter_by(email=email).first():
            raise DuplicateEmail()

        user = User(email=email, password_hash=self.hasher.hash(password), role=role)
        db.session.add(user)
        try:
            db.session.commit()
        except IntegrityError:
            # lost a race against a concurrent registration for this email
            db.session.rollback()
            raise DuplicateEmail()

        log.info("user_registered", user_id=user.id, email=email, role=role)
        return user

    def authenticate(self, email: str, password: str) -> User:
        user = User.query.filter_by(email=normalize_email(email)).first()
        if user is None:
            self.hasher.burn(password)
            log.info("login_failed", email=email)
            raise InvalidCredentials()
        if not self.hasher.verify(user.password_hash, password):
            log.info("login_failed", email=email)
            raise InvalidCredentials()
        log.info("login_succeeded", user_id=user.id, role=user.role)
        return user

    def _doctor_code_matches(self, supplied: str | None) -> bool:
        if not supplied:
            return False
        return hmac.compare_digest(supplied.encode("utf-8"),
                                   self.settings.doctor_secret_code.encode("utf-8"))
