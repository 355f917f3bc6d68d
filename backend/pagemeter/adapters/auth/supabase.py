"""Supabase access token verification with PyJWT.

Supabase signs user access tokens with the project's JWT secret (HS256).
The ``sub`` claim is the user id and ``aud`` is ``authenticated``.
"""

from typing import Optional
from uuid import UUID

import jwt

from pagemeter.core.exceptions import UnauthorizedException
from pagemeter.core.logging import logger
from pagemeter.core.protocols.auth import AuthenticatedUser, AuthVerifier

_ALGORITHMS = ["HS256"]
_REQUIRED_CLAIMS = ["exp", "sub"]


class SupabaseJwtVerifier(AuthVerifier):
    """Verify HS256 access tokens issued by Supabase Auth."""

    def __init__(self, secret: str, audience: str = "authenticated", leeway: float = 10.0):
        """Initialize with the project JWT secret and expected audience."""
        if not secret:
            raise ValueError("SUPABASE_JWT_SECRET is required when AUTH_ENABLED is true")
        self._secret = secret
        self._audience = audience
        self._leeway = leeway

    def verify(self, token: Optional[str]) -> AuthenticatedUser:
        if not token:
            raise UnauthorizedException("Missing or invalid authorization header")
        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=_ALGORITHMS,
                audience=self._audience,
                leeway=self._leeway,
                options={"require": _REQUIRED_CLAIMS},
            )
        except jwt.ExpiredSignatureError as e:
            raise UnauthorizedException("Authentication token has expired") from e
        except jwt.InvalidTokenError as e:
            logger.debug(f"Rejected access token: {e}")
            raise UnauthorizedException("Invalid authentication token") from e

        try:
            user_id = UUID(str(claims["sub"]))
        except ValueError as e:
            raise UnauthorizedException("Invalid authentication token") from e
        return AuthenticatedUser(user_id=user_id, email=claims.get("email"), claims=claims)
