"""Firestore-backed document store (firebase-admin async client)."""

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, Iterable, List, Optional, Sequence

from google.api_core import exceptions as gcloud_exceptions
from google.cloud.firestore_v1.base_query import FieldFilter

from grinfood.core.errors import CollaboratorFailure, NotFound
from grinfood.db.store import Collection, Document, DocumentStore, Filter, OrderBy

logger = logging.getLogger(__name__)


@asynccontextmanager
async def _store_call(description: str):
    """Translate Google API errors into domain errors."""
    try:
        yield
    except gcloud_exceptions.NotFound as e:
        raise NotFound(f"{description}: not found") from e
    except (gcloud_exceptions.GoogleAPIError, gcloud_exceptions.RetryError) as e:
        logger.error(f"Firestore {description} failed: {e}")
        raise CollaboratorFailure("Document store request failed") from e


class FirestoreCollection(Collection):
    def __init__(self, client, name: str):
        self._client = client
        self.name = name
        self._ref = client.collection(name)

    async def add(self, data: Dict[str, Any]) -> str:
        async with _store_call(f"add to {self.name}"):
            _, doc_ref = await self._ref.add(data)
        return doc_ref.id

    async def set(self, doc_id: str, data: Dict[str, Any]) -> None:
        async with _store_call(f"set {self.name}/{doc_id}"):
            await self._ref.document(doc_id).set(data)

    async def get(self, doc_id: str) -> Optional[Document]:
        async with _store_call(f"get {self.name}/{doc_id}"):
            snapshot = await self._ref.document(doc_id).get()
        if not snapshot.exists:
            return None
        return Document(id=snapshot.id, data=snapshot.to_dict() or {})

    async def update(self, doc_id: str, fields: Dict[str, Any]) -> None:
        async with _store_call(f"update {self.name}/{doc_id}"):
            await self._ref.document(doc_id).update(fields)

    async def delete(self, doc_id: str) -> None:
        async with _store_call(f"delete {self.name}/{doc_id}"):
            await self._ref.document(doc_id).delete()

    async def query(
        self,
        filters: Sequence[Filter] = (),
        order_by: Optional[OrderBy] = None,
    ) -> List[Document]:
        query = self._ref
        for f in filters:
            query = query.where(filter=FieldFilter(f.field, f.op, f.value))
        if order_by is not None:
            query = query.order_by(
                order_by.field,
                direction="DESCENDING" if order_by.descending else "ASCENDING",
            )

        docs = []
        async with _store_call(f"query {self.name}"):
            async for snapshot in query.stream():
                docs.append(Document(id=snapshot.id, data=snapshot.to_dict() or {}))
        return docs

    async def batch_delete(self, doc_ids: Iterable[str]) -> int:
        # A single WriteBatch commits atomically; Firestore caps it at 500 writes
        ids = list(doc_ids)
        if not ids:
            return 0
        batch = self._client.batch()
        for doc_id in ids:
            batch.delete(self._ref.document(doc_id))
        async with _store_call(f"batch delete in {self.name}"):
            await batch.commit()
        return len(ids)


class FirestoreDocumentStore(DocumentStore):
    """DocumentStore over a firebase-admin ``firestore_async`` client."""

    def __init__(self, client):
        self._client = client

    @classmethod
    def from_app(cls, firebase_app) -> "FirestoreDocumentStore":
        from firebase_admin import firestore_async

        return cls(firestore_async.client(app=firebase_app))

    def collection(self, name: str) -> FirestoreCollection:
        return FirestoreCollection(self._client, name)
