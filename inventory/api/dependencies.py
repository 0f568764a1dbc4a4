"""
FastAPI dependencies for authentication.
"""
from typing import Optional

import jwt
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from inventory.config import Settings, get_settings
from inventory.exceptions import AuthError
from inventory.schemas.auth import UserInfo
from inventory.utils.security import decode_token

# HTTP Bearer security scheme
security = HTTPBearer(auto_error=False)


def verify_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    settings: Settings = Depends(get_settings),
) -> Optional[UserInfo]:
    """
    Authenticate the request when the deployment requires it.

    Returns:
        UserInfo from the token, or None when authentication is disabled

    Raises:
        AuthError: 401 if the token is missing, 403 if invalid or expired
    """
    if not settings.AUTH_REQUIRED:
        return None

    if not credentials:
        raise AuthError("Access Token Required", status_code=401)

    try:
        payload = decode_token(credentials.credentials, settings)
        return UserInfo(
            id=payload["userId"],
            username=payload["username"],
            role=payload.get("role", "user"),
        )
    except (jwt.InvalidTokenError, KeyError):
        raise AuthError("Invalid Token", status_code=403)
