"""Request dependencies: the service container and the calling identity."""

from typing import Annotated

from fastapi import Depends, Request

from grinfood.core.rbac import Principal
from grinfood.core.security import Subject, extract_bearer_token
from grinfood.services.container import Services, get_services

ServicesDep = Annotated[Services, Depends(get_services)]


async def get_current_subject(request: Request, services: ServicesDep) -> Subject:
    """Resolve the Authorization bearer token into a Subject.

    Raises NoCredential / InvalidCredential, rendered as 403 by the app's
    error handler.
    """
    token = extract_bearer_token(request.headers.get("Authorization"))
    return await services.resolver.resolve(token)


CurrentSubject = Annotated[Subject, Depends(get_current_subject)]


async def get_current_principal(subject: CurrentSubject, services: ServicesDep) -> Principal:
    """Resolve the caller and look up its role."""
    role = await services.roles.role_of(subject.id)
    return Principal(subject=subject, role=role)


CurrentPrincipal = Annotated[Principal, Depends(get_current_principal)]
