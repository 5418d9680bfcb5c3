"""Manager sales statistics computed from the orders collection."""

from collections import Counter
from datetime import date, datetime, time, timezone
from typing import Any, Dict, List

from grinfood.core.errors import ValidationError
from grinfood.core.rbac import Capability, Principal, ensure
from grinfood.db.store import DocumentStore, Filter
from grinfood.schemas.order import OrderStatus
from grinfood.services.orders import ORDERS_COLLECTION


def _day_window(start: date, end: date):
    """[start 00:00:00Z, end 23:59:59Z]."""
    return (
        datetime.combine(start, time(0, 0, 0), tzinfo=timezone.utc),
        datetime.combine(end, time(23, 59, 59), tzinfo=timezone.utc),
    )


class SalesReport:
    def __init__(self, store: DocumentStore):
        self.orders = store.collection(ORDERS_COLLECTION)

    async def popular_products(self, principal: Principal) -> List[Dict[str, Any]]:
        """Units sold per item name across all orders, best sellers first."""
        ensure(principal, Capability.MANAGE)
        counts: Counter = Counter()
        for doc in await self.orders.query():
            for item in doc.get("items") or []:
                name = item.get("name")
                if not name:
                    continue
                counts[name] += item.get("quantity") or 1
        return [{"name": name, "count": count} for name, count in counts.most_common()]

    async def revenue(self, principal: Principal, start: date, end: date) -> Dict[str, Any]:
        """Sum of ``total`` over confirmed orders created within the day window."""
        ensure(principal, Capability.MANAGE)
        if end < start:
            raise ValidationError("endDate must not be before startDate")

        window_start, window_end = _day_window(start, end)
        docs = await self.orders.query([Filter("status", "==", OrderStatus.CONFIRMED.value)])

        total = 0.0
        for doc in docs:
            created_at = doc.get("createdAt")
            if not isinstance(created_at, datetime):
                continue
            if created_at.tzinfo is None:
                created_at = created_at.replace(tzinfo=timezone.utc)
            if window_start <= created_at <= window_end:
                total += doc.get("total") or 0
        return {"revenue": total, "startDate": start.isoformat(), "endDate": end.isoformat()}
