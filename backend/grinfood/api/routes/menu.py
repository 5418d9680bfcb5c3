"""Menu routes."""

from fastapi import APIRouter, status

from grinfood.api.deps import CurrentPrincipal, ServicesDep
from grinfood.schemas.menu import MenuItemPayload

router = APIRouter()


@router.get("")
async def list_menu(services: ServicesDep):
    return await services.menu.list()


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_menu_item(body: MenuItemPayload, principal: CurrentPrincipal, services: ServicesDep):
    return await services.menu.create(principal, body)


@router.put("/{item_id}")
async def update_menu_item(
    item_id: str,
    body: MenuItemPayload,
    principal: CurrentPrincipal,
    services: ServicesDep,
):
    return await services.menu.update(principal, item_id, body)


@router.delete("/{item_id}")
async def delete_menu_item(item_id: str, principal: CurrentPrincipal, services: ServicesDep):
    await services.menu.delete(principal, item_id)
    return {"message": "Menu item deleted"}
