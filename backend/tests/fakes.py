"""In-process stand-ins for the external collaborators."""

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Optional, Sequence, Set, Tuple

from grinfood.core.errors import CollaboratorFailure, InvalidCredential, NotFound, ValidationError
from grinfood.db.memory import MemoryDocumentStore
from grinfood.db.store import Collection, Document, DocumentStore, Filter, OrderBy
from grinfood.services.email import EmailSender
from grinfood.services.identity import Identity, IdentityProvider, VerifiedToken
from grinfood.services.payments import PaymentGateway
from grinfood.services.sms import SmsVerifier


class FrozenClock:
    def __init__(self, now: Optional[datetime] = None):
        self.now = now or datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


class FakeIdentityProvider(IdentityProvider):
    """Tokens are plain strings mapped to subject ids via ``tokens``."""

    def __init__(self):
        self.users: Dict[str, Identity] = {}
        self.passwords: Dict[str, str] = {}
        self.tokens: Dict[str, str] = {}
        self.verify_calls = 0
        self.unavailable = False
        self.fail_delete = False
        self.reset_links: List[Tuple[str, str]] = []
        self._next_uid = 1

    def add_user(self, uid: str, email: str, display_name: Optional[str] = None,
                 token: Optional[str] = None, email_verified: bool = False) -> str:
        self.users[uid] = Identity(uid=uid, email=email, display_name=display_name,
                                   email_verified=email_verified)
        token = token or f"token-{uid}"
        self.tokens[token] = uid
        return token

    def _check_available(self):
        if self.unavailable:
            raise CollaboratorFailure("Identity provider request failed")

    async def verify(self, token: str) -> VerifiedToken:
        self.verify_calls += 1
        self._check_available()
        uid = self.tokens.get(token)
        if uid is None or uid not in self.users:
            raise InvalidCredential("Invalid token")
        return VerifiedToken(subject_id=uid, email=self.users[uid].email)

    async def create_identity(self, email: str, password: str, display_name: str) -> Identity:
        self._check_available()
        if any(u.email == email for u in self.users.values()):
            raise ValidationError("Email is already registered")
        uid = f"uid-{self._next_uid}"
        self._next_uid += 1
        self.users[uid] = Identity(uid=uid, email=email, display_name=display_name)
        self.passwords[uid] = password
        return self.users[uid]

    async def get_identity(self, subject_id: str) -> Identity:
        self._check_available()
        if subject_id not in self.users:
            raise NotFound("User not found")
        return self.users[subject_id]

    async def lookup_by_email(self, email: str) -> Identity:
        self._check_available()
        for user in self.users.values():
            if user.email == email:
                return user
        raise NotFound("User not found")

    async def update_identity(self, subject_id: str, **fields: Any) -> Identity:
        user = await self.get_identity(subject_id)
        updated = Identity(
            uid=user.uid,
            email=fields.get("email", user.email),
            display_name=fields.get("display_name", user.display_name),
            email_verified=fields.get("email_verified", user.email_verified),
        )
        self.users[subject_id] = updated
        return updated

    async def delete_identity(self, subject_id: str) -> None:
        self._check_available()
        if self.fail_delete:
            raise CollaboratorFailure("Identity provider request failed")
        if subject_id not in self.users:
            raise NotFound("User not found")
        del self.users[subject_id]

    async def issue_reset_link(self, email: str, redirect_url: str) -> str:
        await self.lookup_by_email(email)
        link = f"https://auth.example/reset?email={email}&continue={redirect_url}"
        self.reset_links.append((email, link))
        return link

    async def issue_verification_link(self, email: str, return_url: str) -> str:
        await self.lookup_by_email(email)
        return f"https://auth.example/verify?email={email}&continue={return_url}"

    async def issue_opaque_token(self, subject_id: str) -> str:
        self._check_available()
        return f"custom-{subject_id}"


class SlowIdentityProvider(FakeIdentityProvider):
    def __init__(self, delay: float):
        super().__init__()
        self.delay = delay

    async def verify(self, token: str) -> VerifiedToken:
        await asyncio.sleep(self.delay)
        return await super().verify(token)


class FakePaymentGateway(PaymentGateway):
    def __init__(self):
        self.intents: List[Tuple[int, str]] = []
        self.fail = False

    async def create_payment_intent(self, amount: int, currency: str) -> str:
        if self.fail:
            raise CollaboratorFailure("Failed to create payment intent")
        self.intents.append((amount, currency))
        return f"pi_{len(self.intents)}_secret"


class FakeSmsVerifier(SmsVerifier):
    def __init__(self, valid_code: str = "123456"):
        self.valid_code = valid_code
        self.sent: List[str] = []

    async def send_code(self, phone: str) -> str:
        self.sent.append(phone)
        return "pending"

    async def check_code(self, phone: str, code: str) -> Tuple[bool, str]:
        if phone in self.sent and code == self.valid_code:
            return True, "approved"
        return False, "pending"


class RecordingEmailSender(EmailSender):
    def __init__(self):
        self.messages: List[Dict[str, str]] = []

    async def send(self, to: str, subject: str, html: str) -> None:
        self.messages.append({"to": to, "subject": subject, "html": html})


class FailingCollection(Collection):
    """Delegates to a real collection, raising CollaboratorFailure on the named methods."""

    def __init__(self, inner: Collection, fail_on: Set[str], failures_left: Optional[int] = None):
        self.inner = inner
        self.fail_on = fail_on
        self.failures_left = failures_left
        self.calls: Dict[str, int] = {}

    def _maybe_fail(self, method: str):
        self.calls[method] = self.calls.get(method, 0) + 1
        if method not in self.fail_on:
            return
        if self.failures_left is None:
            raise CollaboratorFailure(f"store {method} failed")
        if self.failures_left > 0:
            self.failures_left -= 1
            raise CollaboratorFailure(f"store {method} failed")

    async def add(self, data: Dict[str, Any]) -> str:
        self._maybe_fail("add")
        return await self.inner.add(data)

    async def set(self, doc_id: str, data: Dict[str, Any]) -> None:
        self._maybe_fail("set")
        await self.inner.set(doc_id, data)

    async def get(self, doc_id: str) -> Optional[Document]:
        self._maybe_fail("get")
        return await self.inner.get(doc_id)

    async def update(self, doc_id: str, fields: Dict[str, Any]) -> None:
        self._maybe_fail("update")
        await self.inner.update(doc_id, fields)

    async def delete(self, doc_id: str) -> None:
        self._maybe_fail("delete")
        await self.inner.delete(doc_id)

    async def query(self, filters: Sequence[Filter] = (), order_by: Optional[OrderBy] = None) -> List[Document]:
        self._maybe_fail("query")
        return await self.inner.query(filters, order_by)

    async def batch_delete(self, doc_ids: Iterable[str]) -> int:
        self._maybe_fail("batch_delete")
        return await self.inner.batch_delete(doc_ids)


class FailingDocumentStore(DocumentStore):
    """MemoryDocumentStore whose chosen collections fail on chosen methods."""

    def __init__(self, backing: Optional[MemoryDocumentStore] = None):
        self.backing = backing or MemoryDocumentStore()
        self.failing: Dict[str, FailingCollection] = {}

    def fail(self, collection: str, *methods: str, times: Optional[int] = None) -> FailingCollection:
        wrapper = FailingCollection(self.backing.collection(collection), set(methods), times)
        self.failing[collection] = wrapper
        return wrapper

    def collection(self, name: str) -> Collection:
        if name in self.failing:
            return self.failing[name]
        return self.backing.collection(name)


def seed(store: MemoryDocumentStore, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
    """Write a document synchronously, for use in plain fixtures."""
    store.collection(collection)._docs[doc_id] = dict(data)
