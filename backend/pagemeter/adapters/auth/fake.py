"""Fake auth verifier for testing."""

from typing import Optional
from uuid import UUID

from pagemeter.core.exceptions import UnauthorizedException
from pagemeter.core.protocols.auth import AuthenticatedUser, AuthVerifier


class FakeAuthVerifier(AuthVerifier):
    """Accepts tokens registered with ``register``; rejects everything else."""

    def __init__(self) -> None:
        self._tokens: dict[str, AuthenticatedUser] = {}
        self.verified: list[str] = []

    def register(self, token: str, user_id: UUID, email: Optional[str] = None) -> None:
        """Make ``token`` verify as ``user_id``."""
        self._tokens[token] = AuthenticatedUser(user_id=user_id, email=email)

    def verify(self, token: Optional[str]) -> AuthenticatedUser:
        if not token or token not in self._tokens:
            raise UnauthorizedException("Invalid authentication token")
        self.verified.append(token)
        return self._tokens[token]
