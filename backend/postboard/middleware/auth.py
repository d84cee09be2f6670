"""
Postboard Backend — Bearer Token Check
========================================

What:  FastAPI dependency that verifies the caller's bearer token and
       returns their identity.
How:   Decodes `Authorization: Bearer <jwt>` with PyJWT using the shared
       secret from settings. Tokens are issued by the separate auth
       service and carry `userId` and `email` claims; `exp` is enforced
       when present.
Who:   Create, update and delete routes (Depends(get_current_user)).

Declared as the first dependency of those routes, so an unauthenticated
request is rejected before its body is parsed or any image is stored.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import jwt
from fastapi import Request

from postboard.config import settings
from postboard.exceptions import AuthenticationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthData:
    """Identity of an authenticated caller."""
    user_id: str
    email: Optional[str] = None


def decode_token(token: str) -> AuthData:
    """
    Verify a token and extract the caller identity.

    Raises:
        AuthenticationError: no secret configured, bad signature, expired
                             token, or no userId claim.
    """
    if not settings.jwt_secret:
        raise AuthenticationError(context={"reason": "jwt_secret not configured"})

    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
        )
    except jwt.ExpiredSignatureError:
        raise AuthenticationError(context={"reason": "token expired"})
    except jwt.InvalidTokenError as e:
        raise AuthenticationError(context={"reason": type(e).__name__})

    user_id = payload.get("userId")
    if not user_id:
        raise AuthenticationError(context={"reason": "missing userId claim"})

    return AuthData(user_id=str(user_id), email=payload.get("email"))


async def get_current_user(request: Request) -> AuthData:
    """Dependency: the verified identity of the caller, or 401."""
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthenticationError(context={"reason": "missing bearer token"})

    auth = decode_token(token.strip())
    logger.debug("Authenticated user %s", auth.user_id)
    return auth
