"""Order lifecycle: creation, manager listing and the status state machine.

States::

    pending --> confirmed   (terminal)
    pending --> cancelled   (terminal)

Only ``confirmed`` and ``cancelled`` are accepted as targets. Moving an order
that already left ``pending`` is rejected unless the service is built with
``allow_terminal_transitions=True`` (the legacy API behaviour, where a
confirmed order could still be cancelled and vice versa).

There is no optimistic concurrency token: two managers transitioning the
same order concurrently both pass the checks and the store's last write wins.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List

from grinfood.core.errors import InvalidTransition, NotFound
from grinfood.core.rbac import Capability, Principal, ensure
from grinfood.core.security import Subject
from grinfood.db.store import DocumentStore, Filter
from grinfood.schemas.order import OrderCreate, OrderStatus

logger = logging.getLogger(__name__)

ORDERS_COLLECTION = "orders"

TRANSITION_TARGETS = frozenset({OrderStatus.CONFIRMED, OrderStatus.CANCELLED})

_EPOCH = datetime.fromtimestamp(0, tz=timezone.utc)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _created_at_key(order: Dict[str, Any]) -> datetime:
    """Sort key: orders without a usable timestamp count as time zero."""
    created_at = order.get("createdAt")
    if not isinstance(created_at, datetime):
        return _EPOCH
    if created_at.tzinfo is None:
        return created_at.replace(tzinfo=timezone.utc)
    return created_at


def sort_newest_first(orders: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Order by createdAt descending. Stable, so ties keep their input order."""
    return sorted(orders, key=_created_at_key, reverse=True)


def parse_target_status(value: Any) -> OrderStatus:
    """Validate a requested target state, independent of any order's current state."""
    try:
        status = OrderStatus(value)
    except ValueError:
        raise InvalidTransition(f"Invalid status: {value!r}")
    if status not in TRANSITION_TARGETS:
        raise InvalidTransition(f"Invalid status: {value!r}")
    return status


class OrderLifecycle:
    """Creates orders and drives their status."""

    def __init__(
        self,
        store: DocumentStore,
        clock: Callable[[], datetime] = utc_now,
        allow_terminal_transitions: bool = False,
    ):
        self.orders = store.collection(ORDERS_COLLECTION)
        self.clock = clock
        self.allow_terminal_transitions = allow_terminal_transitions

    async def create(self, subject: Subject, payload: OrderCreate) -> Dict[str, Any]:
        """Store a new pending order owned by ``subject``."""
        order = {
            "items": [item.model_dump() for item in payload.items],
            "total": payload.total,
            "customer": payload.customer,
            "address": payload.address,
            "paymentMethod": payload.payment_method,
            "userId": subject.id,
            "status": OrderStatus.PENDING.value,
            "createdAt": self.clock(),
        }
        order_id = await self.orders.add(order)
        logger.info(f"[Order: {order_id}] Created by {subject.id} (total: {payload.total})")
        return {"id": order_id, **order}

    async def list_by_status(self, principal: Principal, status: str) -> List[Dict[str, Any]]:
        """All orders in ``status``, newest first. Manager only."""
        ensure(principal, Capability.MANAGE)
        docs = await self.orders.query([Filter("status", "==", status)])
        return sort_newest_first([doc.to_dict() for doc in docs])

    async def transition(self, principal: Principal, order_id: str, target: Any) -> Dict[str, Any]:
        """Move an order to ``target``.

        Checks run in a fixed order: manager role, then the target value,
        then the order's existence and current state.
        """
        ensure(principal, Capability.MANAGE)
        status = parse_target_status(target)

        doc = await self.orders.get(order_id)
        if doc is None:
            raise NotFound("Order not found")

        current = doc.get("status")
        if current != OrderStatus.PENDING.value and not self.allow_terminal_transitions:
            raise InvalidTransition(f"Order is already {current}")

        await self.orders.update(order_id, {"status": status.value})
        logger.info(f"[Order: {order_id}] Status {current} -> {status.value} by {principal.id}")
        return {**doc.to_dict(), "status": status.value}
