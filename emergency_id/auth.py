from functools import wraps

from flask import g, request

from .errors import AuthenticationRequired, AuthorizationDenied
from .extensions import db
from .models import ROLES, User
from .services import get_services


def bearer_token() -> str | None:
    """Token from the Authorization header; a bare token is accepted too."""
    header = request.headers.get("Authorization", "").strip()
    if not header:
        return None
    scheme, _, rest = header.partition(" ")
    if scheme.lower() == "bearer":
        return rest.strip() or None
    return header


def authenticate_request(roles=ROLES) -> User:
    token = bearer_token()
    if not token:
        raise AuthenticationRequired("Token required")

    claims = get_services().tokens.verify(token)

    user = db.session.get(User, claims.user_id)
    if user is None:
        raise AuthenticationRequired("Account no longer exists")

    if claims.role not in roles:
        raise AuthorizationDenied()

    g.current_user = user
    g.token_claims = claims
    return user


def require_auth(*roles):
    """
    Protect a view. With no roles any authenticated account passes.

    Failures raise the matching ``EmergencyIdError``, which the app-level
    handler turns into a JSON error response.
    """
    allowed = roles or ROLES

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            authenticate_request(allowed)
            return view(*args, **kwargs)
        return wrapper
    return decorator
