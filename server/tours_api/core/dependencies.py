"""FastAPI dependencies for authentication and role checks."""

from typing import Callable, Optional

import jwt
from fastapi import Depends, Header
from jwt import PyJWTError

from .config import settings
from .exceptions import AuthenticationError, AuthorizationError


async def get_current_user(
    authorization: Optional[str] = Header(None, alias="Authorization")
) -> dict:
    """
    Authentication dependency that validates Bearer tokens.

    Args:
        authorization: Authorization header with Bearer token

    Returns:
        dict: User information from validated token

    Raises:
        AuthenticationError: If token is invalid or missing
    """
    if not authorization:
        raise AuthenticationError("You are not logged in! Please log in to get access.")

    try:
        scheme, token = authorization.split()
    except ValueError:
        raise AuthenticationError("Invalid authorization header format")

    if scheme.lower() != "bearer":
        raise AuthenticationError("Invalid authentication scheme")

    try:
        payload = jwt.decode(
            token,
            settings.bearer_token_secret,
            algorithms=["HS256"]
        )
    except PyJWTError as e:
        raise AuthenticationError(f"Token validation failed: {str(e)}")

    user_id = payload.get("sub")
    if user_id is None:
        raise AuthenticationError("Invalid token payload")

    return {
        "user_id": user_id,
        "name": payload.get("name"),
        "email": payload.get("email"),
        "roles": payload.get("roles", []),
    }


def require_roles(*roles: str) -> Callable:
    """
    Build a dependency that only lets users holding one of ``roles`` through.

    Args:
        roles: Accepted role names

    Returns:
        Dependency returning the authenticated user
    """

    async def check_roles(user: dict = Depends(get_current_user)) -> dict:
        if not set(roles).intersection(user["roles"]):
            raise AuthorizationError(required_roles=list(roles))
        return user

    return check_roles


TourManagers = Depends(require_roles("admin", "lead-guide"))
TourStaff = Depends(require_roles("admin", "lead-guide", "guide"))
