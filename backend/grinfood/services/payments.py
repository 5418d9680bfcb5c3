"""
Stripe payment gateway
Creates card payment intents for checkout
"""

import asyncio
import logging
from abc import ABC, abstractmethod

import stripe

from grinfood.core.errors import CollaboratorFailure

logger = logging.getLogger(__name__)


class PaymentGateway(ABC):
    @abstractmethod
    async def create_payment_intent(self, amount: int, currency: str) -> str:
        """Create a payment intent and return its client secret."""


class StripePaymentGateway(PaymentGateway):
    """
    Stripe integration for checkout payments

    Args:
        api_key: Stripe secret key
    """

    def __init__(self, api_key: str):
        self.api_key = api_key

    async def create_payment_intent(self, amount: int, currency: str) -> str:
        if not self.api_key:
            raise CollaboratorFailure("Payment gateway is not configured")

        try:
            intent = await asyncio.to_thread(
                stripe.PaymentIntent.create,
                amount=amount,
                currency=currency,
                payment_method_types=["card"],
                api_key=self.api_key,
            )
        except stripe.StripeError as e:
            logger.error(f"Error creating payment intent ({amount} {currency}): {e}")
            raise CollaboratorFailure("Failed to create payment intent") from e

        logger.info(f"Created payment intent {intent.id}: {amount} {currency}")
        return intent.client_secret
