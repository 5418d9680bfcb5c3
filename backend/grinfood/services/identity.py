"""Identity provider contract and its Firebase Authentication implementation."""

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional

from grinfood.core.errors import CollaboratorFailure, InvalidCredential, NotFound, ValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Identity:
    """An identity record held by the provider."""

    uid: str
    email: Optional[str] = None
    display_name: Optional[str] = None
    email_verified: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "uid": self.uid,
            "email": self.email,
            "displayName": self.display_name,
            "emailVerified": self.email_verified,
        }


@dataclass(frozen=True)
class VerifiedToken:
    subject_id: str
    email: Optional[str] = None


class IdentityProvider(ABC):
    """Credential verification and identity management.

    Implementations raise InvalidCredential for rejected tokens, NotFound for
    unknown identities, ValidationError for bad input (duplicate email,
    malformed address) and CollaboratorFailure for everything else.
    """

    @abstractmethod
    async def verify(self, token: str) -> VerifiedToken:
        """Verify a bearer token."""

    @abstractmethod
    async def create_identity(self, email: str, password: str, display_name: str) -> Identity:
        """Create a new identity."""

    @abstractmethod
    async def get_identity(self, subject_id: str) -> Identity:
        """Fetch an identity by subject id."""

    @abstractmethod
    async def lookup_by_email(self, email: str) -> Identity:
        """Fetch an identity by email address."""

    @abstractmethod
    async def update_identity(self, subject_id: str, **fields: Any) -> Identity:
        """Update identity fields (email, display_name, ...)."""

    @abstractmethod
    async def delete_identity(self, subject_id: str) -> None:
        """Delete the identity record."""

    @abstractmethod
    async def issue_reset_link(self, email: str, redirect_url: str) -> str:
        """Generate a password reset link."""

    @abstractmethod
    async def issue_verification_link(self, email: str, return_url: str) -> str:
        """Generate an email verification link."""

    @abstractmethod
    async def issue_opaque_token(self, subject_id: str) -> str:
        """Issue a token handed back to the client after signup/signin."""


class FirebaseIdentityProvider(IdentityProvider):
    """IdentityProvider backed by firebase-admin ``auth``.

    The Admin SDK is synchronous, so every call runs in a worker thread.
    """

    def __init__(self, firebase_app):
        from firebase_admin import auth

        self._auth = auth
        self._app = firebase_app

    async def _call(self, description: str, func, *args, **kwargs):
        from firebase_admin import exceptions as fb_exceptions

        auth = self._auth
        try:
            return await asyncio.to_thread(func, *args, app=self._app, **kwargs)
        except (
            auth.ExpiredIdTokenError,
            auth.RevokedIdTokenError,
            auth.UserDisabledError,
            auth.InvalidIdTokenError,
        ) as e:
            raise InvalidCredential("Invalid token") from e
        except auth.UserNotFoundError as e:
            raise NotFound("User not found") from e
        except auth.EmailAlreadyExistsError as e:
            raise ValidationError("Email is already registered") from e
        except ValueError as e:
            raise ValidationError(str(e)) from e
        except (auth.CertificateFetchError, fb_exceptions.FirebaseError) as e:
            logger.error(f"Firebase auth {description} failed: {e}")
            raise CollaboratorFailure("Identity provider request failed") from e

    @staticmethod
    def _to_identity(record) -> Identity:
        return Identity(
            uid=record.uid,
            email=record.email,
            display_name=record.display_name,
            email_verified=bool(record.email_verified),
        )

    async def verify(self, token: str) -> VerifiedToken:
        try:
            decoded = await self._call("verify", self._auth.verify_id_token, token, check_revoked=True)
        except ValidationError as e:
            raise InvalidCredential("Invalid token") from e
        uid = decoded.get("uid")
        if not uid:
            raise InvalidCredential("UID not found in token")
        return VerifiedToken(subject_id=uid, email=decoded.get("email"))

    async def create_identity(self, email: str, password: str, display_name: str) -> Identity:
        record = await self._call(
            "create_user", self._auth.create_user,
            email=email, password=password, display_name=display_name,
        )
        return self._to_identity(record)

    async def get_identity(self, subject_id: str) -> Identity:
        record = await self._call("get_user", self._auth.get_user, subject_id)
        return self._to_identity(record)

    async def lookup_by_email(self, email: str) -> Identity:
        record = await self._call("get_user_by_email", self._auth.get_user_by_email, email)
        return self._to_identity(record)

    async def update_identity(self, subject_id: str, **fields: Any) -> Identity:
        record = await self._call("update_user", self._auth.update_user, subject_id, **fields)
        return self._to_identity(record)

    async def delete_identity(self, subject_id: str) -> None:
        await self._call("delete_user", self._auth.delete_user, subject_id)

    async def issue_reset_link(self, email: str, redirect_url: str) -> str:
        settings = self._auth.ActionCodeSettings(url=redirect_url)
        return await self._call(
            "generate_password_reset_link", self._auth.generate_password_reset_link,
            email, action_code_settings=settings,
        )

    async def issue_verification_link(self, email: str, return_url: str) -> str:
        settings = self._auth.ActionCodeSettings(url=return_url, handle_code_in_app=False)
        return await self._call(
            "generate_email_verification_link", self._auth.generate_email_verification_link,
            email, action_code_settings=settings,
        )

    async def issue_opaque_token(self, subject_id: str) -> str:
        token = await self._call("create_custom_token", self._auth.create_custom_token, subject_id)
        return token.decode("utf-8") if isinstance(token, bytes) else token
