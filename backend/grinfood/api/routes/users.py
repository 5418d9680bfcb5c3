"""Public user lookup and account removal by id."""

from fastapi import APIRouter

from grinfood.api.deps import CurrentPrincipal, ServicesDep
from grinfood.core.errors import PurgeIncomplete
from grinfood.core.rbac import Capability, ensure

router = APIRouter()


@router.get("/user/{uid}")
async def get_user_name(uid: str, services: ServicesDep):
    return {"name": await services.accounts.display_name(uid)}


@router.delete("/users/{uid}")
async def delete_user_by_id(uid: str, principal: CurrentPrincipal, services: ServicesDep):
    """Purge ``uid``. Allowed for the account owner or a manager."""
    ensure(principal, Capability.OWN_OR_MANAGE, resource_owner_id=uid)
    result = await services.purge.purge(uid)
    if not result.complete:
        raise PurgeIncomplete(details=result.to_dict())
    return {"message": "User deleted", **result.to_dict()}
