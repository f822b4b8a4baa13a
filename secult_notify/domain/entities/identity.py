"""Domain entity describing the authenticated caller."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

ADMIN_ROLE = "admin"


@dataclass(frozen=True)
class Identity:
    """Claims carried by a bearer token."""

    user_id: str
    email: str | None = None
    role: str | None = None

    @classmethod
    def from_claims(cls, claims: Mapping[str, Any]) -> "Identity":
        """Build an identity from decoded token claims.

        Raises ``ValueError`` when the ``id`` claim is missing or empty.
        """

        user_id = claims.get("id")
        if user_id is None or str(user_id).strip() == "":
            raise ValueError("Token does not carry a user id")
        email = claims.get("email")
        role = claims.get("role")
        return cls(
            user_id=str(user_id),
            email=str(email) if email is not None else None,
            role=str(role) if role is not None else None,
        )

    def is_admin(self) -> bool:
        """Return ``True`` when the identity carries the administrator role."""

        return (self.role or "").lower() == ADMIN_ROLE
