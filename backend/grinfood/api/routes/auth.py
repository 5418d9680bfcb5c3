"""Account and authentication routes."""

import logging

from fastapi import APIRouter, Request, status

from grinfood.api.deps import CurrentPrincipal, CurrentSubject, ServicesDep
from grinfood.core.errors import PurgeIncomplete
from grinfood.core.rate_limit import limiter
from grinfood.schemas.auth import (
    EmailRequest,
    ProfileUpdatedRequest,
    SigninRequest,
    SignupRequest,
    UpdateEmailRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/signup", status_code=status.HTTP_201_CREATED)
@limiter.limit("5/minute")
async def signup(request: Request, body: SignupRequest, services: ServicesDep):
    """Create an identity and its role assignment."""
    result = await services.accounts.signup(body)
    return {"message": "User created", **result}


@router.post("/signin")
@limiter.limit("5/minute")
async def signin(request: Request, body: SigninRequest, services: ServicesDep):
    token = await services.accounts.signin(body.email)
    return {"message": "User signed in", "token": token}


@router.get("/check-auth")
async def check_auth(subject: CurrentSubject):
    return {"message": "Authorized", "uid": subject.id}


@router.get("/get-role")
async def get_role(principal: CurrentPrincipal):
    return {"role": principal.role.value}


@router.post("/update-email")
async def update_email(body: UpdateEmailRequest, subject: CurrentSubject, services: ServicesDep):
    await services.accounts.update_email(subject, body.new_email)
    return {"message": "Email updated"}


@router.post("/delete-user")
async def delete_user(subject: CurrentSubject, services: ServicesDep):
    """Delete the caller's own account and everything it owns."""
    result = await services.purge.purge(subject.id)
    if not result.complete:
        raise PurgeIncomplete(details=result.to_dict())
    return {"message": "User deleted", **result.to_dict()}


@router.get("/check-user-exists")
async def check_user_exists(subject: CurrentSubject, services: ServicesDep):
    await services.accounts.check_registered(subject)
    return {"exists": True}


@router.post("/check-user-by-email")
async def check_user_by_email(body: EmailRequest, services: ServicesDep):
    await services.accounts.exists_by_email(body.email)
    return {"exists": True}


@router.post("/forgot-password")
@limiter.limit("5/minute")
async def forgot_password(request: Request, body: EmailRequest, services: ServicesDep):
    await services.accounts.forgot_password(body.email)
    return {"message": "Reset email sent"}


@router.post("/send-verification-email")
async def send_verification_email(subject: CurrentSubject, services: ServicesDep):
    await services.accounts.send_verification_email(subject)
    return {"success": True}


@router.post("/notify-profile-updated")
async def notify_profile_updated(body: ProfileUpdatedRequest, subject: CurrentSubject, services: ServicesDep):
    await services.accounts.notify_profile_updated(body.email, body.name)
    return {"success": True}


@router.get("/check-email-verified/{uid}")
async def check_email_verified(uid: str, principal: CurrentPrincipal, services: ServicesDep):
    return await services.accounts.email_verified(principal, uid)
