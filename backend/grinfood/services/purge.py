"""Cascading deletion of a subject's account and dependent data.

Steps, in order:

1. Delete the identity at the provider. If this fails nothing else is
   touched and the error propagates.
2. Remove the role assignment, best effort.
3. Delete every order with ``userId == subject`` as one atomic batch.
4. Delete every review with ``userId == subject`` as one atomic batch.

There is no cross-collection transaction. Once step 1 has succeeded a
failure in step 3 or 4 leaves orphaned documents behind; the result records
which steps failed so the caller can report it.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List

from grinfood.core.errors import CollaboratorFailure
from grinfood.db.store import DocumentStore, Filter
from grinfood.services.identity import IdentityProvider
from grinfood.services.orders import ORDERS_COLLECTION
from grinfood.services.reviews import REVIEWS_COLLECTION
from grinfood.services.roles import RoleStore

logger = logging.getLogger(__name__)


@dataclass
class PurgeResult:
    subject_id: str
    role_removed: bool = False
    orders_deleted: int = 0
    reviews_deleted: int = 0
    failures: List[str] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return not self.failures

    def to_dict(self) -> Dict[str, Any]:
        return {
            "subjectId": self.subject_id,
            "roleRemoved": self.role_removed,
            "ordersDeleted": self.orders_deleted,
            "reviewsDeleted": self.reviews_deleted,
            "failures": list(self.failures),
            "complete": self.complete,
        }


class AccountPurge:
    def __init__(self, identity: IdentityProvider, roles: RoleStore, store: DocumentStore):
        self.identity = identity
        self.roles = roles
        self.store = store

    async def _delete_owned(self, collection_name: str, subject_id: str) -> int:
        collection = self.store.collection(collection_name)
        docs = await collection.query([Filter("userId", "==", subject_id)])
        return await collection.batch_delete(doc.id for doc in docs)

    async def purge(self, subject_id: str) -> PurgeResult:
        log_prefix = f"[Purge: {subject_id}]"
        result = PurgeResult(subject_id=subject_id)

        # Step 1 authorizes everything after it
        await self.identity.delete_identity(subject_id)
        logger.info(f"{log_prefix} Identity deleted")

        try:
            await self.roles.remove(subject_id)
            result.role_removed = True
        except CollaboratorFailure as e:
            logger.warning(f"{log_prefix} Role assignment not removed: {e}")
            result.failures.append("roles")

        try:
            result.orders_deleted = await self._delete_owned(ORDERS_COLLECTION, subject_id)
        except CollaboratorFailure as e:
            logger.error(f"{log_prefix} Orders not removed: {e}")
            result.failures.append(ORDERS_COLLECTION)

        try:
            result.reviews_deleted = await self._delete_owned(REVIEWS_COLLECTION, subject_id)
        except CollaboratorFailure as e:
            logger.error(f"{log_prefix} Reviews not removed: {e}")
            result.failures.append(REVIEWS_COLLECTION)

        if result.complete:
            logger.info(
                f"{log_prefix} Complete: {result.orders_deleted} orders, "
                f"{result.reviews_deleted} reviews removed"
            )
        else:
            logger.critical(
                f"{log_prefix} INCOMPLETE: identity deleted but {', '.join(result.failures)} "
                "still hold data for this subject. Manual cleanup required."
            )
        return result
