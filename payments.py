import logging
from typing import Optional, Protocol

import stripe

from errors import Internal

logger = logging.getLogger(__name__)


class PaymentGateway(Protocol):
    def create_intent(self, amount: int, currency: str) -> str: ...


class StripePaymentGateway:
    def __init__(self, api_key: Optional[str]):
        self.api_key = api_key

    def create_intent(self, amount: int, currency: str) -> str:
        """Create a payment intent for ``amount`` (smallest currency unit) and return its client secret."""
        if not self.api_key:
            raise Internal("Payment gateway not configured")
        try:
            intent = stripe.PaymentIntent.create(
                api_key=self.api_key,
                amount=amount,
                currency=currency,
                payment_method_types=["card"],
            )
        except stripe.StripeError as e:
            logger.error("Error creating payment intent: %s", e)
            raise Internal("Internal server error")
        return intent.client_secret
