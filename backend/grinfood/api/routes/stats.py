"""Manager sales statistics."""

from datetime import date

from fastapi import APIRouter, Query

from grinfood.api.deps import CurrentPrincipal, ServicesDep

router = APIRouter()


@router.get("/popular-products")
async def popular_products(principal: CurrentPrincipal, services: ServicesDep):
    return await services.stats.popular_products(principal)


@router.get("/revenue")
async def revenue(
    principal: CurrentPrincipal,
    services: ServicesDep,
    start_date: date = Query(..., alias="startDate"),
    end_date: date = Query(..., alias="endDate"),
):
    return await services.stats.revenue(principal, start_date, end_date)
