"""Payment processor collaborator.

The core only needs two things from a processor: open a checkout for a paid
registration and refund a captured payment. Failures surface as
PaymentProcessorError and never touch local state.
"""

import logging
from abc import ABC, abstractmethod

import stripe
from django.conf import settings

from events.domain import Checkout

logger = logging.getLogger(__name__)


class PaymentProcessorError(Exception):
    """Raised when the processor rejects or fails a call. Safe to retry."""


class PaymentProcessor(ABC):
    """Interface to an external payment processor."""

    @abstractmethod
    def create_checkout(
        self, amount_cents: int, description: str, metadata: dict[str, str]
    ) -> Checkout:
        ...

    @abstractmethod
    def refund(
        self, payment_reference: str, amount_cents: int, idempotency_key: str | None = None
    ) -> None:
        ...


class StripePaymentProcessor(PaymentProcessor):
    """Stripe Checkout and Refunds."""

    def __init__(
        self,
        api_key: str | None = None,
        currency: str | None = None,
        frontend_base_url: str | None = None,
    ) -> None:
        self._api_key = api_key or settings.STRIPE_SECRET_KEY
        self._currency = currency or settings.HALLS_CURRENCY
        self._frontend_base_url = (frontend_base_url or settings.FRONTEND_BASE_URL).rstrip("/")

    def create_checkout(
        self, amount_cents: int, description: str, metadata: dict[str, str]
    ) -> Checkout:
        event_id = metadata.get("event_id", "")
        try:
            session = stripe.checkout.Session.create(
                api_key=self._api_key,
                payment_method_types=["card"],
                line_items=[
                    {
                        "price_data": {
                            "currency": self._currency,
                            "product_data": {"name": description},
                            "unit_amount": amount_cents,
                        },
                        "quantity": 1,
                    }
                ],
                mode="payment",
                success_url=f"{self._frontend_base_url}/payment-success?eventId={event_id}",
                cancel_url=f"{self._frontend_base_url}/payment-cancel",
                metadata=metadata,
            )
        except stripe.StripeError as exc:
            logger.error("Stripe checkout failed for event %s: %s", event_id, exc)
            raise PaymentProcessorError(str(exc)) from exc
        return Checkout(session_id=session.id, redirect_url=session.url)

    def refund(
        self, payment_reference: str, amount_cents: int, idempotency_key: str | None = None
    ) -> None:
        try:
            stripe.Refund.create(
                api_key=self._api_key,
                payment_intent=payment_reference,
                amount=amount_cents,
                idempotency_key=idempotency_key,
            )
        except stripe.StripeError as exc:
            logger.error("Stripe refund failed for %s: %s", payment_reference, exc)
            raise PaymentProcessorError(str(exc)) from exc
