import os
from dataclasses import dataclass
from datetime import timedelta


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


INSECURE_JWT_SECRET = "change-me-in-prod"
INSECURE_DOCTOR_CODE = "DOC_2025"


class Config:
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///emergency_id.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Token signing; the defaults are for local development only
    JWT_SECRET = os.getenv("JWT_SECRET", INSECURE_JWT_SECRET)
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
    TOKEN_LIFETIME_DAYS = int(os.getenv("TOKEN_LIFETIME_DAYS", "7"))

    DOCTOR_SECRET_CODE = os.getenv("DOCTOR_SECRET_CODE", INSECURE_DOCTOR_CODE)
    MIN_PASSWORD_LENGTH = int(os.getenv("MIN_PASSWORD_LENGTH", "6"))
    BCRYPT_LOG_ROUNDS = int(os.getenv("BCRYPT_LOG_ROUNDS", "10"))
    AUDIT_FAILED_LOOKUPS = _env_bool("AUDIT_FAILED_LOOKUPS", True)

    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    LOG_FORMAT = os.getenv("LOG_FORMAT", "console")


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    JWT_SECRET = "test-secret-key-with-enough-length-for-hs256"
    DOCTOR_SECRET_CODE = "DOC_TEST"
    BCRYPT_LOG_ROUNDS = 4
    AUDIT_FAILED_LOOKUPS = True
    LOG_LEVEL = "WARNING"


@dataclass(frozen=True)
class Settings:
    """Immutable view of the configuration handed to every service."""

    jwt_secret: str
    jwt_algorithm: str
    token_lifetime: timedelta
    doctor_secret_code: str
    min_password_length: int
    bcrypt_log_rounds: int
    audit_failed_lookups: bool

    @classmethod
    def from_mapping(cls, config) -> "Settings":
        return cls(
            jwt_secret=config["JWT_SECRET"],
            jwt_algorithm=config.get("JWT_ALGORITHM", "HS256"),
            token_lifetime=timedelta(days=int(config.get("TOKEN_LIFETIME_DAYS", 7))),
            doctor_secret_code=config["DOCTOR_SECRET_CODE"],
            min_password_length=int(config.get("MIN_PASSWORD_LENGTH", 6)),
            bcrypt_log_rounds=int(config.get("BCRYPT_LOG_ROUNDS", 10)),
            audit_failed_lookups=bool(config.get("AUDIT_FAILED_LOOKUPS", True)),
        )

    def insecure_defaults(self) -> list[str]:
        """Names of settings still carrying their development defaults."""
        found = []
        if self.jwt_secret == INSECURE_JWT_SECRET:
            found.append("JWT_SECRET")
        if self.doctor_secret_code == INSECURE_DOCTOR_CODE:
            found.append("DOCTOR_SECRET_CODE")
        return found
