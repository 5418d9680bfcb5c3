"""Role assignments, one document per subject in the ``roles`` collection."""

import logging

from grinfood.core.retry import retry_read
from grinfood.core.rbac import Role
from grinfood.db.store import DocumentStore

logger = logging.getLogger(__name__)

ROLES_COLLECTION = "roles"


class RoleStore:
    """Maps a subject id to its Role.

    A subject with no assignment is a plain ``user``: missing data never
    grants privileges and never fails the request.
    """

    def __init__(self, store: DocumentStore, retry_attempts: int = 3, retry_base_delay: float = 0.1):
        self.collection = store.collection(ROLES_COLLECTION)
        self.retry_attempts = retry_attempts
        self.retry_base_delay = retry_base_delay

    async def role_of(self, subject_id: str) -> Role:
        doc = await retry_read(
            lambda: self.collection.get(subject_id),
            attempts=self.retry_attempts,
            base_delay=self.retry_base_delay,
            description=f"role lookup for {subject_id}",
        )
        if doc is None:
            return Role.USER
        return Role.parse(doc.get("role"))

    async def has_assignment(self, subject_id: str) -> bool:
        return await self.collection.get(subject_id) is not None

    async def assign(self, subject_id: str, role: Role) -> None:
        await self.collection.set(subject_id, {"role": role.value})
        logger.info(f"Assigned role {role.value} to {subject_id}")

    async def remove(self, subject_id: str) -> None:
        """Delete the assignment. Removing a missing assignment is a no-op."""
        await self.collection.delete(subject_id)
