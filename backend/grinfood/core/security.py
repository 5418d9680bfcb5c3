"""Bearer credential extraction and identity resolution."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from grinfood.core.errors import NoCredential
from grinfood.services.identity import IdentityProvider

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Subject:
    """An authenticated identity. ``id`` is stable and globally unique."""

    id: str
    email: Optional[str] = None


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Return the token from an ``Authorization: Bearer <token>`` header value."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer":
        return None
    token = token.strip()
    return token or None


class IdentityResolver:
    """Resolves a bearer credential into a Subject.

    No caching: tokens are reusable for their whole validity window and the
    provider is the source of truth for revocation, so every call verifies.
    """

    def __init__(self, provider: IdentityProvider):
        self.provider = provider

    async def resolve(self, credential: Optional[str]) -> Subject:
        """Verify ``credential``.

        Raises:
            NoCredential: no token was supplied (no provider call is made).
            InvalidCredential: the provider rejected the token.
            CollaboratorFailure: the provider could not be reached.
        """
        if not credential:
            raise NoCredential()
        verified = await self.provider.verify(credential)
        return Subject(id=verified.subject_id, email=verified.email)
