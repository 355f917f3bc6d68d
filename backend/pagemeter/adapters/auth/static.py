"""Auth verifier used when authentication is disabled (local development)."""

from typing import Optional
from uuid import UUID

from pagemeter.core.protocols.auth import AuthenticatedUser, AuthVerifier


class StaticAuthVerifier(AuthVerifier):
    """Treats every request, with or without a token, as one fixed user."""

    def __init__(self, user_id: UUID) -> None:
        self._user = AuthenticatedUser(user_id=user_id, claims={"disabled_auth": True})

    def verify(self, token: Optional[str]) -> AuthenticatedUser:
        return self._user
