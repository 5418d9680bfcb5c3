"""Document store contract.

The storage engine itself is external. Components talk to it only through
these abstract collections, so the Firestore backend and the in-memory
backend are interchangeable.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence

FILTER_OPERATORS = ("==", "!=", "<", "<=", ">", ">=")


@dataclass(frozen=True)
class Filter:
    """A single ``field <op> value`` condition."""

    field: str
    op: str
    value: Any

    def __post_init__(self):
        if self.op not in FILTER_OPERATORS:
            raise ValueError(f"Unsupported filter operator: {self.op}")


@dataclass(frozen=True)
class OrderBy:
    field: str
    descending: bool = False


@dataclass
class Document:
    """A stored document: its id plus the field data."""

    id: str
    data: Dict[str, Any] = field(default_factory=dict)

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, **self.data}


class Collection(ABC):
    """One named collection of documents."""

    @abstractmethod
    async def add(self, data: Dict[str, Any]) -> str:
        """Insert a document with a generated id and return the id."""

    @abstractmethod
    async def set(self, doc_id: str, data: Dict[str, Any]) -> None:
        """Create or overwrite the document with the given id."""

    @abstractmethod
    async def get(self, doc_id: str) -> Optional[Document]:
        """Return the document, or None when absent."""

    @abstractmethod
    async def update(self, doc_id: str, fields: Dict[str, Any]) -> None:
        """Merge ``fields`` into an existing document. Raises NotFound when absent."""

    @abstractmethod
    async def delete(self, doc_id: str) -> None:
        """Delete the document. Deleting an absent document is not an error."""

    @abstractmethod
    async def query(
        self,
        filters: Sequence[Filter] = (),
        order_by: Optional[OrderBy] = None,
    ) -> List[Document]:
        """Return documents matching all filters, optionally ordered."""

    @abstractmethod
    async def batch_delete(self, doc_ids: Iterable[str]) -> int:
        """Delete all given documents atomically (all or nothing). Returns the count."""


class DocumentStore(ABC):
    """A set of named collections."""

    @abstractmethod
    def collection(self, name: str) -> Collection:
        """Return a handle for the named collection."""

    async def close(self) -> None:
        """Release client resources."""
