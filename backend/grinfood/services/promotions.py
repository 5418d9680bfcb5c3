"""Promotion scheduling.

"Currently active" is derived, never stored: a promotion is surfaced to the
public when its ``active`` flag is set and the evaluation instant falls
inside ``[startDate, endDate]`` (both ends inclusive).
"""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from grinfood.core.rbac import Capability, Principal, ensure
from grinfood.core.retry import retry_read
from grinfood.db.store import DocumentStore, Filter, OrderBy
from grinfood.schemas.promotion import PromotionPayload
from grinfood.services.orders import utc_now

logger = logging.getLogger(__name__)

PROMOTIONS_COLLECTION = "promotions"


def _as_utc(value: Any) -> Optional[datetime]:
    if not isinstance(value, datetime):
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def is_currently_active(promotion: Dict[str, Any], at: datetime) -> bool:
    """True iff ``active`` and ``startDate <= at <= endDate``."""
    if promotion.get("active") is not True:
        return False
    start = _as_utc(promotion.get("startDate"))
    end = _as_utc(promotion.get("endDate"))
    if start is None or end is None:
        return False
    return start <= _as_utc(at) <= end


class PromotionScheduler:
    """Manager CRUD over promotions plus the public "active now" listing."""

    def __init__(
        self,
        store: DocumentStore,
        clock: Callable[[], datetime] = utc_now,
        retry_attempts: int = 3,
        retry_base_delay: float = 0.1,
    ):
        self.promotions = store.collection(PROMOTIONS_COLLECTION)
        self.clock = clock
        self.retry_attempts = retry_attempts
        self.retry_base_delay = retry_base_delay

    @staticmethod
    def _fields(payload: PromotionPayload) -> Dict[str, Any]:
        return {
            "title": payload.title,
            "description": payload.description,
            "image": payload.image,
            "active": payload.active,
            "startDate": payload.start_date,
            "endDate": payload.end_date,
        }

    async def _read(self, description: str, operation):
        return await retry_read(
            operation,
            attempts=self.retry_attempts,
            base_delay=self.retry_base_delay,
            description=description,
        )

    async def create(self, principal: Principal, payload: PromotionPayload) -> Dict[str, Any]:
        ensure(principal, Capability.MANAGE)
        promotion = {**self._fields(payload), "createdAt": self.clock()}
        promotion_id = await self.promotions.add(promotion)
        logger.info(f"Promotion {promotion_id} created by {principal.id}")
        return {"id": promotion_id, **promotion}

    async def update(self, principal: Principal, promotion_id: str, payload: PromotionPayload) -> Dict[str, Any]:
        ensure(principal, Capability.MANAGE)
        fields = self._fields(payload)
        await self.promotions.update(promotion_id, fields)
        logger.info(f"Promotion {promotion_id} updated by {principal.id}")
        return {"id": promotion_id, **fields}

    async def delete(self, principal: Principal, promotion_id: str) -> None:
        ensure(principal, Capability.MANAGE)
        await self.promotions.delete(promotion_id)
        logger.info(f"Promotion {promotion_id} deleted by {principal.id}")

    async def list_all(self, principal: Principal) -> List[Dict[str, Any]]:
        """Every promotion, latest start first. Manager only."""
        ensure(principal, Capability.MANAGE)
        docs = await self._read(
            "promotion listing",
            lambda: self.promotions.query(order_by=OrderBy("startDate", descending=True)),
        )
        return [doc.to_dict() for doc in docs]

    async def list_active(self, at: Optional[datetime] = None) -> List[Dict[str, Any]]:
        """Promotions active at ``at`` (default: now), latest start first. Public."""
        instant = at or self.clock()
        docs = await self._read(
            "active promotion listing",
            lambda: self.promotions.query(
                [Filter("active", "==", True)],
                order_by=OrderBy("startDate", descending=True),
            ),
        )
        return [doc.to_dict() for doc in docs if is_currently_active(doc.data, instant)]
