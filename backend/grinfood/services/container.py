"""Service container.

One instance per application, built at startup and stored on
``app.state.services``. Route handlers get it through ``get_services``;
tests assemble their own with fake collaborators.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Optional

from fastapi import Request

from grinfood.core.config import Settings
from grinfood.core.security import IdentityResolver
from grinfood.db.store import DocumentStore
from grinfood.services.accounts import AccountService
from grinfood.services.email import AccountMailer, EmailSender, SendGridEmailSender
from grinfood.services.identity import FirebaseIdentityProvider, IdentityProvider
from grinfood.services.menu import MenuCatalog
from grinfood.services.orders import OrderLifecycle, utc_now
from grinfood.services.payments import PaymentGateway, StripePaymentGateway
from grinfood.services.promotions import PromotionScheduler
from grinfood.services.purge import AccountPurge
from grinfood.services.reviews import ReviewBoard
from grinfood.services.roles import RoleStore
from grinfood.services.sms import SmsVerifier, TwilioVerifyService
from grinfood.services.stats import SalesReport

logger = logging.getLogger(__name__)


@dataclass
class Services:
    settings: Settings
    store: DocumentStore
    identity: IdentityProvider
    payments: PaymentGateway
    sms: SmsVerifier
    email_sender: EmailSender
    resolver: IdentityResolver
    roles: RoleStore
    orders: OrderLifecycle
    promotions: PromotionScheduler
    purge: AccountPurge
    accounts: AccountService
    reviews: ReviewBoard
    menu: MenuCatalog
    stats: SalesReport
    firebase_app: Optional[Any] = None

    async def close(self) -> None:
        await self.sms.close()
        await self.email_sender.close()
        await self.store.close()
        if self.firebase_app is not None:
            from grinfood.services.firebase_service import shutdown_firebase

            shutdown_firebase(self.firebase_app)


def assemble_services(
    settings: Settings,
    store: DocumentStore,
    identity: IdentityProvider,
    payments: PaymentGateway,
    sms: SmsVerifier,
    email_sender: EmailSender,
    clock: Callable[[], datetime] = utc_now,
    firebase_app: Optional[Any] = None,
) -> Services:
    """Wire the components on top of the given collaborators."""
    roles = RoleStore(
        store,
        retry_attempts=settings.read_retry_attempts,
        retry_base_delay=settings.read_retry_base_delay,
    )
    mailer = AccountMailer(email_sender)
    return Services(
        settings=settings,
        store=store,
        identity=identity,
        payments=payments,
        sms=sms,
        email_sender=email_sender,
        resolver=IdentityResolver(identity),
        roles=roles,
        orders=OrderLifecycle(
            store,
            clock=clock,
            allow_terminal_transitions=settings.allow_terminal_order_transitions,
        ),
        promotions=PromotionScheduler(
            store,
            clock=clock,
            retry_attempts=settings.read_retry_attempts,
            retry_base_delay=settings.read_retry_base_delay,
        ),
        purge=AccountPurge(identity, roles, store),
        accounts=AccountService(
            identity,
            roles,
            mailer,
            reset_redirect_url=settings.reset_redirect_url,
            app_base_url=settings.app_base_url,
            allow_self_assigned_manager=settings.allow_self_assigned_manager,
        ),
        reviews=ReviewBoard(store, identity, clock=clock),
        menu=MenuCatalog(store),
        stats=SalesReport(store),
        firebase_app=firebase_app,
    )


def build_services(settings: Settings) -> Services:
    """Build the production container from settings."""
    from grinfood.db.firestore import FirestoreDocumentStore
    from grinfood.db.memory import MemoryDocumentStore
    from grinfood.services.firebase_service import initialize_firebase

    firebase_app = initialize_firebase(settings)

    if settings.document_store == "memory":
        logger.warning("Using the in-memory document store. Data will not survive a restart.")
        store: DocumentStore = MemoryDocumentStore()
    else:
        store = FirestoreDocumentStore.from_app(firebase_app)

    return assemble_services(
        settings,
        store=store,
        identity=FirebaseIdentityProvider(firebase_app),
        payments=StripePaymentGateway(settings.stripe_secret_key),
        sms=TwilioVerifyService(
            settings.twilio_account_sid,
            settings.twilio_auth_token,
            settings.twilio_verify_service_sid,
        ),
        email_sender=SendGridEmailSender(settings.sendgrid_api_key, settings.sendgrid_from_email),
        firebase_app=firebase_app,
    )


def get_services(request: Request) -> Services:
    return request.app.state.services
