"""Order routes."""

from fastapi import APIRouter, status

from grinfood.api.deps import CurrentPrincipal, CurrentSubject, ServicesDep
from grinfood.schemas.order import OrderCreate, OrderStatusUpdate

router = APIRouter()


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_order(body: OrderCreate, subject: CurrentSubject, services: ServicesDep):
    return await services.orders.create(subject, body)


@router.get("/by-status/{order_status}")
async def list_orders_by_status(order_status: str, principal: CurrentPrincipal, services: ServicesDep):
    return await services.orders.list_by_status(principal, order_status)


@router.patch("/{order_id}/status")
async def update_order_status(
    order_id: str,
    body: OrderStatusUpdate,
    principal: CurrentPrincipal,
    services: ServicesDep,
):
    order = await services.orders.transition(principal, order_id, body.status)
    return {"message": "Order status updated", "order": order}
