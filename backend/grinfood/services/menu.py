"""Menu catalog: plain CRUD over ``menuItems``."""

import logging
from typing import Any, Dict, List

from grinfood.core.rbac import Capability, Principal, ensure
from grinfood.db.store import DocumentStore
from grinfood.schemas.menu import MenuItemPayload

logger = logging.getLogger(__name__)

MENU_COLLECTION = "menuItems"


class MenuCatalog:
    def __init__(self, store: DocumentStore):
        self.items = store.collection(MENU_COLLECTION)

    @staticmethod
    def _fields(payload: MenuItemPayload) -> Dict[str, Any]:
        return {
            "name": payload.name,
            "price": payload.price,
            "image": payload.image,
            "category": payload.category,
            "description": payload.description or "",
        }

    async def list(self) -> List[Dict[str, Any]]:
        docs = await self.items.query()
        return [doc.to_dict() for doc in docs]

    async def create(self, principal: Principal, payload: MenuItemPayload) -> Dict[str, Any]:
        ensure(principal, Capability.MANAGE)
        fields = self._fields(payload)
        item_id = await self.items.add(fields)
        logger.info(f"Menu item {item_id} ({payload.name}) added by {principal.id}")
        return {"id": item_id, **fields}

    async def update(self, principal: Principal, item_id: str, payload: MenuItemPayload) -> Dict[str, Any]:
        ensure(principal, Capability.MANAGE)
        fields = self._fields(payload)
        await self.items.update(item_id, fields)
        return {"id": item_id, **fields}

    async def delete(self, principal: Principal, item_id: str) -> None:
        ensure(principal, Capability.MANAGE)
        await self.items.delete(item_id)
        logger.info(f"Menu item {item_id} deleted by {principal.id}")
