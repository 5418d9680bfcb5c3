"""Account operations around the identity provider.

Signup creates the identity first and the role assignment second. The two
are not transactional: if the role write fails the identity exists without
an assignment and therefore resolves as a plain ``user``.

``signin`` hands out a custom token for any registered email without a
password check; the client is expected to exchange it with the provider.
This mirrors the legacy API and is a known weakness.
"""

import logging
from typing import Any, Dict

from grinfood.core.errors import CollaboratorFailure, InsufficientRole, NotFound
from grinfood.core.rbac import Capability, Principal, Role, ensure
from grinfood.core.security import Subject
from grinfood.schemas.auth import SignupRequest
from grinfood.services.email import AccountMailer
from grinfood.services.identity import IdentityProvider
from grinfood.services.roles import RoleStore

logger = logging.getLogger(__name__)
auth_logger = logging.getLogger("auth")

ANONYMOUS_NAME = "Anonymous"


class AccountService:
    def __init__(
        self,
        identity: IdentityProvider,
        roles: RoleStore,
        mailer: AccountMailer,
        reset_redirect_url: str,
        app_base_url: str,
        allow_self_assigned_manager: bool = False,
    ):
        self.identity = identity
        self.roles = roles
        self.mailer = mailer
        self.reset_redirect_url = reset_redirect_url
        self.app_base_url = app_base_url.rstrip("/")
        self.allow_self_assigned_manager = allow_self_assigned_manager

    async def signup(self, request: SignupRequest) -> Dict[str, Any]:
        role = Role.parse(request.role)
        if role == Role.MANAGER and not self.allow_self_assigned_manager:
            auth_logger.warning(f"Rejected self-assigned manager signup for {request.email}")
            raise InsufficientRole("Manager role cannot be self-assigned")

        user = await self.identity.create_identity(request.email, request.password, request.name)
        try:
            await self.roles.assign(user.uid, role)
        except CollaboratorFailure:
            auth_logger.error(f"Identity {user.uid} created but role assignment failed")
            raise
        token = await self.identity.issue_opaque_token(user.uid)

        auth_logger.info(f"User signed up: {user.uid} ({request.email}) as {role.value}")
        return {"user": user.to_dict(), "token": token}

    async def signin(self, email: str) -> str:
        user = await self.identity.lookup_by_email(email)
        token = await self.identity.issue_opaque_token(user.uid)
        auth_logger.info(f"User signed in: {user.uid}")
        return token

    async def update_email(self, subject: Subject, new_email: str) -> None:
        await self.identity.update_identity(subject.id, email=new_email)
        auth_logger.info(f"Email updated for {subject.id}")

    async def check_registered(self, subject: Subject) -> None:
        """Raise NotFound unless the identity has an email and a role assignment."""
        user = await self.identity.get_identity(subject.id)
        if not user.email or not await self.roles.has_assignment(subject.id):
            raise NotFound("User not registered or role not found")

    async def exists_by_email(self, email: str) -> None:
        await self.identity.lookup_by_email(email)

    async def forgot_password(self, email: str) -> None:
        link = await self.identity.issue_reset_link(email, self.reset_redirect_url)
        await self.mailer.send_reset(email, link)
        auth_logger.info(f"Password reset requested for {email}")

    async def send_verification_email(self, subject: Subject) -> None:
        user = await self.identity.get_identity(subject.id)
        if not user.email:
            raise NotFound("User has no email address")
        link = await self.identity.issue_verification_link(user.email, f"{self.app_base_url}/profile")
        await self.mailer.send_verification(user.email, link)

    async def notify_profile_updated(self, email: str, name: str) -> None:
        await self.mailer.send_profile_updated(email, name)

    async def email_verified(self, principal: Principal, uid: str) -> Dict[str, Any]:
        ensure(principal, Capability.OWN_OR_MANAGE, resource_owner_id=uid)
        user = await self.identity.get_identity(uid)
        return {"email": user.email, "emailVerified": user.email_verified}

    async def display_name(self, uid: str) -> str:
        try:
            user = await self.identity.get_identity(uid)
        except NotFound:
            return ANONYMOUS_NAME
        return user.display_name or user.email or ANONYMOUS_NAME
