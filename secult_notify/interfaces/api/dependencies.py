"""FastAPI dependency utilities."""

import uuid

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from secult_notify.domain.entities import Identity
from secult_notify.infrastructure.security import identity_from_token

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="api/login")


def is_valid_uuid(value: str) -> bool:
    """Return ``True`` when ``value`` is a textual UUID."""

    try:
        uuid.UUID(str(value))
    except ValueError:
        return False
    return True


def resolve_identity(token: str) -> Identity:
    """Resolve the authenticated identity for the provided token."""

    try:
        return identity_from_token(token)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc


def get_current_identity(token: str = Depends(oauth2_scheme)) -> Identity:
    """Return the identity carried by the bearer token."""

    return resolve_identity(token)


def get_current_user_identity(identity: Identity = Depends(get_current_identity)) -> Identity:
    """Ensure the identity carries a well formed user id."""

    if not is_valid_uuid(identity.user_id):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid user id: {identity.user_id}",
        )
    return identity


def require_admin(identity: Identity = Depends(get_current_user_identity)) -> Identity:
    """Ensure the authenticated identity has administrator privileges."""

    if not identity.is_admin():
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not authorized",
        )
    return identity
