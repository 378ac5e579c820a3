"""Payment/refund coordinator.

Refunds are the only path that moves a payment to ``refunded``. The payment
row stays locked across the processor call, so two concurrent unregisters
cannot both reach the processor for the same payment.
"""

import logging
from collections.abc import Callable
from dataclasses import replace

from events.domain import EventId, Payment, PaymentStatus
from events.domain.errors import (
    AlreadyRefundedError,
    ErrorCode,
    PaymentNotFoundError,
    RefundFailedError,
    ValidationError,
)
from events.integrations.payments import PaymentProcessor, PaymentProcessorError
from events.stores.interfaces import PaymentStore, UnitOfWork

logger = logging.getLogger(__name__)


class RefundCoordinator:
    """Service for refunding completed payments through the processor."""

    def __init__(
        self, payments: PaymentStore, processor: PaymentProcessor, uow: UnitOfWork
    ) -> None:
        self._payments = payments
        self._processor = processor
        self._uow = uow

    def refund(
        self, payment: Payment, on_refunded: Callable[[Payment], None] | None = None
    ) -> Payment:
        """Refund a completed payment through the processor.

        ``on_refunded`` runs in the same transaction that records the refund,
        after the processor has accepted it. Registration unlinking goes
        there so it can never happen before the money is returned.

        Raises:
            PaymentNotFoundError: If the payment no longer exists.
            AlreadyRefundedError: If the payment was refunded before.
            ValidationError: If the payment was never completed.
            RefundFailedError: If there is nothing to refund against or the
                processor failed. Local state is left unchanged.
        """
        with self._uow.atomic():
            current = self._payments.lock_payment(payment.id)
            if current is None:
                raise PaymentNotFoundError()
            if current.status is PaymentStatus.REFUNDED:
                raise AlreadyRefundedError()
            if current.status is not PaymentStatus.COMPLETED:
                raise ValidationError(
                    "Only completed payments can be refunded",
                    ErrorCode.PAYMENT_NOT_COMPLETED,
                )
            if not current.payment_reference:
                raise RefundFailedError("No processor reference found for refund")

            try:
                self._processor.refund(
                    current.payment_reference,
                    current.amount.cents,
                    idempotency_key=f"refund-{current.id}",
                )
            except PaymentProcessorError as exc:
                logger.warning("Refund of payment %s failed: %s", current.id, exc)
                raise RefundFailedError(f"Refund failed: {exc}") from exc

            refunded = self._payments.save_payment(
                replace(current, status=PaymentStatus.REFUNDED)
            )
            if on_refunded is not None:
                on_refunded(refunded)

        logger.info("Refunded payment %s (%s)", refunded.id, refunded.amount)
        return refunded

    def refund_event_payments(self, event_id: EventId) -> list[Payment]:
        """Refund every completed payment for an event, stopping at the first failure."""
        return [
            self.refund(payment)
            for payment in self._payments.list_completed_for_event(event_id)
        ]
