"""Checkout payment routes."""

from fastapi import APIRouter

from grinfood.api.deps import CurrentSubject, ServicesDep
from grinfood.schemas.payment import PaymentIntentRequest

router = APIRouter()


@router.post("/create-payment-intent")
async def create_payment_intent(body: PaymentIntentRequest, subject: CurrentSubject, services: ServicesDep):
    currency = (body.currency or services.settings.payment_currency).lower()
    client_secret = await services.payments.create_payment_intent(body.amount, currency)
    return {"clientSecret": client_secret}
