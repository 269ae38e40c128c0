"""Bearer token authentication for the upload API."""

import logging
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from pydantic import BaseModel

from recording_upload.config import AuthConfig
from recording_upload.dependencies import get_auth_config

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


class AuthenticatedUser(BaseModel, frozen=True):
    """Identity taken from a verified bearer token."""

    id: str


def _unauthorized() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Unauthorized",
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    config: Annotated[AuthConfig, Depends(get_auth_config)],
) -> AuthenticatedUser:
    """Verifies the bearer JWT and returns the caller's identity."""
    if credentials is None:
        raise _unauthorized()

    try:
        claims = jwt.decode(
            credentials.credentials, config.jwt_secret, algorithms=[config.algorithm]
        )
    except JWTError:
        logger.info("Rejected invalid bearer token")
        raise _unauthorized()

    user_id = claims.get("id") or claims.get("sub")
    if not user_id:
        raise _unauthorized()

    return AuthenticatedUser(id=str(user_id))
