"""Role-Based Access Control (RBAC) policy.

Pure decision logic, no I/O. Roles are ``user`` (default) and ``manager``;
handlers resolve the caller into a Principal and the components check the
capability they need:

- ``manage``: role must be manager.
- ``own-or-manage``: caller owns the resource, or is a manager.
- ``authenticated``: any resolved subject.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from grinfood.core.errors import InsufficientRole
from grinfood.core.security import Subject


class Role(str, Enum):
    """User roles for RBAC."""

    USER = "user"
    MANAGER = "manager"

    @classmethod
    def parse(cls, value: Optional[str]) -> "Role":
        """Map a stored value to a Role; anything unknown is a plain user."""
        try:
            return cls(value)
        except ValueError:
            return cls.USER


class Capability(str, Enum):
    MANAGE = "manage"
    OWN_OR_MANAGE = "own-or-manage"
    AUTHENTICATED = "authenticated"


@dataclass(frozen=True)
class Principal:
    """A resolved subject together with its role."""

    subject: Subject
    role: Role

    @property
    def id(self) -> str:
        return self.subject.id

    @property
    def is_manager(self) -> bool:
        return self.role == Role.MANAGER


def allows(
    subject: Optional[Subject],
    role: Optional[Role],
    capability: Capability,
    resource_owner_id: Optional[str] = None,
) -> bool:
    """Decide whether ``subject`` with ``role`` holds ``capability``."""
    if subject is None:
        return False
    if capability == Capability.AUTHENTICATED:
        return True
    if capability == Capability.MANAGE:
        return role == Role.MANAGER
    if capability == Capability.OWN_OR_MANAGE:
        if resource_owner_id is not None and resource_owner_id == subject.id:
            return True
        return role == Role.MANAGER
    return False


def ensure(
    principal: Principal,
    capability: Capability,
    resource_owner_id: Optional[str] = None,
    message: Optional[str] = None,
) -> None:
    """Raise InsufficientRole unless ``principal`` holds ``capability``."""
    if not allows(principal.subject, principal.role, capability, resource_owner_id):
        raise InsufficientRole(message)
