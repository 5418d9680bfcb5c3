"""Customer reviews."""

import logging
from datetime import datetime
from typing import Any, Callable, Dict, List

from grinfood.core.errors import NotFound
from grinfood.core.rbac import Capability, Principal, ensure
from grinfood.core.security import Subject
from grinfood.db.store import DocumentStore, OrderBy
from grinfood.schemas.review import ReviewCreate
from grinfood.services.identity import IdentityProvider
from grinfood.services.orders import utc_now

logger = logging.getLogger(__name__)

REVIEWS_COLLECTION = "reviews"


class ReviewBoard:
    """Reviews are public to read, any signed-in customer may post, and only
    the author or a manager may delete."""

    def __init__(
        self,
        store: DocumentStore,
        identity: IdentityProvider,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.reviews = store.collection(REVIEWS_COLLECTION)
        self.identity = identity
        self.clock = clock

    async def create(self, subject: Subject, payload: ReviewCreate) -> Dict[str, Any]:
        user = await self.identity.get_identity(subject.id)
        review = {
            "userId": subject.id,
            "userName": user.display_name or user.email,
            "comment": payload.comment,
            "ratingMenu": payload.rating_menu,
            "ratingStaff": payload.rating_staff,
            "ratingDelivery": payload.rating_delivery,
            "createdAt": self.clock(),
        }
        review_id = await self.reviews.add(review)
        logger.info(f"Review {review_id} added by {subject.id}")
        return {"id": review_id, **review}

    async def list(self) -> List[Dict[str, Any]]:
        docs = await self.reviews.query(order_by=OrderBy("createdAt", descending=True))
        return [doc.to_dict() for doc in docs]

    async def delete(self, principal: Principal, review_id: str) -> None:
        doc = await self.reviews.get(review_id)
        if doc is None:
            raise NotFound("Review not found")
        ensure(
            principal,
            Capability.OWN_OR_MANAGE,
            resource_owner_id=doc.get("userId"),
            message="Insufficient rights to delete this review",
        )
        await self.reviews.delete(review_id)
        logger.info(f"Review {review_id} deleted by {principal.id}")
