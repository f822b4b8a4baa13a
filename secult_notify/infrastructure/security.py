"""Security helpers for token generation and validation."""

from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from secult_notify.config import get_settings
from secult_notify.domain.entities import Identity

ALGORITHM = "HS256"


def create_access_token(data: dict, expires_delta: timedelta | None = None) -> str:
    settings = get_settings()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    return jwt.encode({**data, "exp": expire}, settings.secret_key, algorithm=ALGORITHM)


def create_identity_token(identity: Identity, expires_delta: timedelta | None = None) -> str:
    """Issue a token whose claims round-trip through :meth:`Identity.from_claims`."""

    claims: dict[str, str] = {"id": identity.user_id}
    if identity.email is not None:
        claims["email"] = identity.email
    if identity.role is not None:
        claims["role"] = identity.role
    return create_access_token(claims, expires_delta)


def decode_access_token(token: str) -> dict:
    try:
        return jwt.decode(token, get_settings().secret_key, algorithms=[ALGORITHM])
    except JWTError as exc:
        raise ValueError("Could not validate credentials") from exc


def identity_from_token(token: str) -> Identity:
    """Validate ``token`` and return the identity it carries."""

    return Identity.from_claims(decode_access_token(token))
