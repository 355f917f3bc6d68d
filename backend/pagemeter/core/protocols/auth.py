"""Bearer token verification protocol."""

from dataclasses import dataclass, field
from typing import Any, Optional, Protocol, runtime_checkable
from uuid import UUID


@dataclass(frozen=True)
class AuthenticatedUser:
    """Identity established from a verified access token."""

    user_id: UUID
    email: Optional[str] = None
    claims: dict[str, Any] = field(default_factory=dict)


@runtime_checkable
class AuthVerifier(Protocol):
    """Verifies access tokens issued by the identity provider."""

    def verify(self, token: Optional[str]) -> AuthenticatedUser:
        """Return the authenticated user or raise UnauthorizedException."""
        ...
