"""Process-local document store for local development and tests."""

import copy
import logging
import operator
import uuid
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from grinfood.core.errors import NotFound
from grinfood.db.store import Collection, Document, DocumentStore, Filter, OrderBy

logger = logging.getLogger(__name__)

_OPS = {
    "==": operator.eq,
    "!=": operator.ne,
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
}

_MISSING = object()


def _matches(data: Dict[str, Any], flt: Filter) -> bool:
    value = data.get(flt.field, _MISSING)
    # Like Firestore, a document without the field never matches
    if value is _MISSING:
        return False
    try:
        return bool(_OPS[flt.op](value, flt.value))
    except TypeError:
        return False


def _order_key(value: Any) -> Tuple[int, Any]:
    """Rank values by type first, as Firestore does for mixed-type fields."""
    if value is None:
        return (0, 0)
    if isinstance(value, bool):
        return (1, value)
    if isinstance(value, (int, float)):
        return (2, value)
    if isinstance(value, datetime):
        return (3, value.timestamp())
    if isinstance(value, str):
        return (4, value)
    if isinstance(value, bytes):
        return (5, value)
    # Maps and arrays keep insertion order among themselves
    return (6, 0)


class MemoryCollection(Collection):
    """Dict-backed collection. Reads and writes copy the data."""

    def __init__(self, name: str):
        self.name = name
        self._docs: Dict[str, Dict[str, Any]] = {}

    async def add(self, data: Dict[str, Any]) -> str:
        doc_id = uuid.uuid4().hex[:20]
        self._docs[doc_id] = copy.deepcopy(data)
        return doc_id

    async def set(self, doc_id: str, data: Dict[str, Any]) -> None:
        self._docs[doc_id] = copy.deepcopy(data)

    async def get(self, doc_id: str) -> Optional[Document]:
        data = self._docs.get(doc_id)
        if data is None:
            return None
        return Document(id=doc_id, data=copy.deepcopy(data))

    async def update(self, doc_id: str, fields: Dict[str, Any]) -> None:
        if doc_id not in self._docs:
            raise NotFound(f"Document {self.name}/{doc_id} not found")
        self._docs[doc_id].update(copy.deepcopy(fields))

    async def delete(self, doc_id: str) -> None:
        self._docs.pop(doc_id, None)

    async def query(
        self,
        filters: Sequence[Filter] = (),
        order_by: Optional[OrderBy] = None,
    ) -> List[Document]:
        docs = [
            Document(id=doc_id, data=copy.deepcopy(data))
            for doc_id, data in self._docs.items()
            if all(_matches(data, f) for f in filters)
        ]
        if order_by is not None:
            # Firestore drops documents that lack the ordering field
            docs = [d for d in docs if order_by.field in d.data]
            docs.sort(key=lambda d: _order_key(d.data[order_by.field]), reverse=order_by.descending)
        return docs

    async def batch_delete(self, doc_ids: Iterable[str]) -> int:
        ids = list(doc_ids)
        for doc_id in ids:
            self._docs.pop(doc_id, None)
        return len(ids)

    def __len__(self) -> int:
        return len(self._docs)


class MemoryDocumentStore(DocumentStore):
    """In-memory DocumentStore. State lives only as long as the process."""

    def __init__(self):
        self._collections: Dict[str, MemoryCollection] = {}

    def collection(self, name: str) -> MemoryCollection:
        if name not in self._collections:
            self._collections[name] = MemoryCollection(name)
        return self._collections[name]
