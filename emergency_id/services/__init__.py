from dataclasses import dataclass

from flask import current_app

from ..config import Settings
from ..passwords import PasswordHasher
from ..tokens import TokenService
from .accounts import AccountService
from .audit import AuditLog, Origin
from .profiles import ProfileStore

EXTENSION_KEY = "emergency_id"

__all__ = ["Services", "build_services", "get_services", "Origin"]


@dataclass(frozen=True)
class Services:
    settings: Settings
    hasher: PasswordHasher
    tokens: TokenService
    accounts: AccountService
    profiles: ProfileStore
    audit: AuditLog


def build_services(settings: Settings) -> Services:
    hasher = PasswordHasher(rounds=settings.bcrypt_log_rounds)
    return Services(
        settings=settings,
        hasher=hasher,
        tokens=TokenService(settings.jwt_secret, settings.token_lifetime, settings.jwt_algorithm),
        accounts=AccountService(settings, hasher),
        profiles=ProfileStore(),
        audit=AuditLog(),
    )


def get_services() -> Services:
    """Services bound to the running app."""
    return current_app.extensions[EXTENSION_KEY]
