"""Promotion routes."""

from fastapi import APIRouter, status

from grinfood.api.deps import CurrentPrincipal, ServicesDep
from grinfood.schemas.promotion import PromotionPayload

router = APIRouter()


@router.get("")
async def list_active_promotions(services: ServicesDep):
    """Promotions running right now. Public."""
    return await services.promotions.list_active()


@router.get("/all")
async def list_all_promotions(principal: CurrentPrincipal, services: ServicesDep):
    return await services.promotions.list_all(principal)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_promotion(body: PromotionPayload, principal: CurrentPrincipal, services: ServicesDep):
    return await services.promotions.create(principal, body)


@router.put("/{promotion_id}")
async def update_promotion(
    promotion_id: str,
    body: PromotionPayload,
    principal: CurrentPrincipal,
    services: ServicesDep,
):
    return await services.promotions.update(principal, promotion_id, body)


@router.delete("/{promotion_id}")
async def delete_promotion(promotion_id: str, principal: CurrentPrincipal, services: ServicesDep):
    await services.promotions.delete(principal, promotion_id)
    return {"message": "Promotion deleted"}
