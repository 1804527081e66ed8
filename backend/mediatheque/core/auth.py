"""Authentication dependency for media endpoints.

``require_auth`` returns the caller's AuthContext or raises 401. When
``settings.auth_enabled`` is False every request runs as an anonymous admin
so local development needs no token.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .config import settings
from .token_factory import read_token
from ..exceptions import AuthenticationError

logger = logging.getLogger(__name__)

_bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class AuthContext:
    """Identity of the caller, recorded as ``created_by`` / ``uploaded_by``."""

    user_id: str
    role: str


_ANONYMOUS = AuthContext(user_id="anonymous", role="admin")


def require_auth(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
) -> AuthContext:
    """Require a valid bearer token and return the caller's AuthContext."""
    if not settings.auth_enabled:
        return _ANONYMOUS

    if credentials is None:
        raise AuthenticationError("Missing authentication token")

    claims = read_token(credentials.credentials, settings.jwt_secret_key, settings.jwt_algorithm)
    if claims is None:
        logger.info("Rejected bearer token")
        raise AuthenticationError("Invalid or expired token")

    return AuthContext(user_id=claims.sub, role=claims.role)
