from dataclasses import dataclass
from uuid import UUID

from fastapi import Header, HTTPException


@dataclass(frozen=True)
class AuthContext:
    """The authenticated caller, resolved once per request."""

    user_id: UUID


def get_auth_context(x_user_id: str | None = Header(default=None, alias="X-User-Id")) -> AuthContext:
    # The session layer in front of the API sets X-User-Id after verifying the login
    if not x_user_id:
        raise HTTPException(401, "Not authenticated")
    try:
        return AuthContext(user_id=UUID(x_user_id))
    except ValueError:
        raise HTTPException(401, "Invalid user id")
