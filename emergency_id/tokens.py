"""Signed bearer tokens (HS256 JWT) carrying user id, role and email."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt

from .errors import TokenExpired, TokenInvalid
from .models import ROLES


@dataclass(frozen=True)
class TokenClaims:
    user_id: str
    role: str
    email: str
    issued_at: datetime
    expires_at: datetime


class TokenService:
    def __init__(self, secret: str, lifetime: timedelta, algorithm: str = "HS256"):
        self.secret = secret
        self.lifetime = lifetime
        self.algorithm = algorithm

    def issue(self, user_id: str, role: str, email: str, now: datetime | None = None) -> str:
        issued_at = (now or datetime.now(timezone.utc)).replace(microsecond=0)
        payload = {
            "sub": user_id,
            "role": role,
            "email": email,
            "iat": issued_at,
            "exp": issued_at + self.lifetime,
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> TokenClaims:
        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"require": ["sub", "exp", "iat"]},
            )
        except jwt.ExpiredSignatureError:
            raise TokenExpired()
        except jwt.InvalidTokenError:
            raise TokenInvalid()

        role = payload.get("role")
        if role not in ROLES or not isinstance(payload.get("email"), str):
            raise TokenInvalid()

        return TokenClaims(
            user_id=payload["sub"],
            role=role,
            email=payload["email"],
            issued_at=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
            expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
        )
