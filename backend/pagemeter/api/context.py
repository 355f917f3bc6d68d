"""HTTP API request context.

Carries request tracking, the authenticated user and the client details that
are written into the usage log. Only the API layer creates these, via
deps.get_context().
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional
from uuid import UUID

from pagemeter.core.logging import ContextualLogger
from pagemeter.domains.usage.types import RequestMetadata


@dataclass
class ApiContext:
    """Full HTTP request context.

    Created by deps.get_context() and injected into endpoints via Depends().
    """

    request_id: str
    user_id: UUID
    logger: ContextualLogger
    email: Optional[str] = None
    client_ip: Optional[str] = None
    user_agent: Optional[str] = None
    auth_metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def request_metadata(self) -> RequestMetadata:
        """Client details stored alongside charges."""
        return RequestMetadata(client_ip=self.client_ip, client_user_agent=self.user_agent)

    def __str__(self) -> str:
        return f"ApiContext(request_id={self.request_id}, user_id={self.user_id})"
