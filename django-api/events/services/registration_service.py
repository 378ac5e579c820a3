"""Registration service: register, confirm and unregister users for events.

Free events link the user immediately. Paid events go through a processor
checkout first and link the user only on confirmation; unregistering a paid
registration refunds before unlinking.
"""

import logging
import uuid
from dataclasses import replace
from datetime import datetime

from events.domain import (
    Actor,
    Checkout,
    Event,
    EventId,
    EventStatus,
    Payment,
    PaymentId,
    PaymentStatus,
)
from events.domain.errors import (
    CapacityExceededError,
    DuplicateRegistrationError,
    ErrorCode,
    EventNotFoundError,
    PaymentNotFoundError,
    PaymentRequiredError,
    RegistrationNotFoundError,
    ValidationError,
)
from events.domain.permissions import Capability, authorize
from events.integrations.clock import Clock
from events.integrations.payments import PaymentProcessor, PaymentProcessorError
from events.services.event_service import parse_event_id
from events.services.refunds import RefundCoordinator
from events.stores.interfaces import EventStore, PaymentStore, UnitOfWork

logger = logging.getLogger(__name__)


class RegistrationService:
    """Service for event registration and paid checkout."""

    def __init__(
        self,
        *,
        events: EventStore,
        payments: PaymentStore,
        uow: UnitOfWork,
        processor: PaymentProcessor,
        refunds: RefundCoordinator,
        clock: Clock,
    ) -> None:
        self._events = events
        self._payments = payments
        self._uow = uow
        self._processor = processor
        self._refunds = refunds
        self._clock = clock

    def register(self, actor: Actor, event_id: str) -> Checkout | None:
        """Register for an event.

        Returns None when the user is registered outright (free event), or the
        checkout the user must complete before confirming (paid event).
        """
        authorize(actor, Capability.REGISTER)
        eid = parse_event_id(event_id)

        with self._uow.atomic():
            event = self._require_event(eid, lock=True)
            self._ensure_open(event, closes_at=_starts_at(event), closed_message="event has already started")
            if event.is_registered(actor.user_id):
                raise DuplicateRegistrationError()
            if event.seats_left <= 0:
                raise CapacityExceededError("Event is fully booked")
            if not event.is_paid:
                self._events.add_registration(event.id, actor.user_id)
                logger.info("User %s registered for free event %s", actor.user_id, event.id)
                return None

        try:
            checkout = self._processor.create_checkout(
                event.price.cents,
                event.title,
                {"event_id": str(event.id), "user_id": str(actor.user_id)},
            )
        except PaymentProcessorError as exc:
            raise PaymentRequiredError(f"Could not start payment: {exc}") from exc

        with self._uow.atomic():
            existing = self._payments.find_open_payment(actor.user_id, event.id)
            if existing is not None and existing.status is PaymentStatus.COMPLETED:
                raise DuplicateRegistrationError()
            if existing is not None:
                self._payments.save_payment(
                    replace(existing, amount=event.price, checkout_session_id=checkout.session_id)
                )
            else:
                self._payments.add_payment(
                    Payment(
                        id=PaymentId(uuid.uuid4()),
                        user_id=actor.user_id,
                        event_id=event.id,
                        amount=event.price,
                        status=PaymentStatus.PENDING,
                        checkout_session_id=checkout.session_id,
                    )
                )

        logger.info("Checkout %s opened for user %s on event %s", checkout.session_id, actor.user_id, event.id)
        return checkout

    def confirm_registration(
        self, actor: Actor, event_id: str, payment_reference: str
    ) -> Payment:
        """Record a completed checkout and link the user to the event.

        If the event filled up between checkout and confirmation, the payment
        is refunded and CapacityExceededError raised. If that refund fails the
        whole confirmation rolls back, leaving the payment pending for a retry.
        """
        authorize(actor, Capability.REGISTER)
        eid = parse_event_id(event_id)
        if not payment_reference:
            raise ValidationError("A payment reference is required")

        with self._uow.atomic():
            event = self._require_event(eid, lock=True)
            self._ensure_open(event, closes_at=_starts_at(event), closed_message="event has already started")
            if event.is_registered(actor.user_id):
                raise DuplicateRegistrationError()
            payment = self._payments.find_open_payment(actor.user_id, event.id)
            if payment is None or payment.status is not PaymentStatus.PENDING:
                raise PaymentNotFoundError("No pending payment found for this user/event")

            completed = self._payments.save_payment(
                replace(payment, status=PaymentStatus.COMPLETED, payment_reference=payment_reference)
            )
            fully_booked = event.seats_left <= 0
            if fully_booked:
                logger.warning(
                    "Event %s filled before user %s confirmed; refunding payment %s",
                    event.id, actor.user_id, completed.id,
                )
                self._refunds.refund(completed)
            else:
                self._events.add_registration(event.id, actor.user_id)

        if fully_booked:
            raise CapacityExceededError("Event is fully booked; your payment has been refunded")

        logger.info("User %s confirmed paid registration for event %s", actor.user_id, event.id)
        return completed

    def unregister(self, actor: Actor, event_id: str) -> None:
        """Remove a registration. Paid registrations are refunded first."""
        authorize(actor, Capability.REGISTER)
        eid = parse_event_id(event_id)

        event = self._require_event(eid)
        self._ensure_open(
            event,
            closes_at=event.window.end if event.window else None,
            closed_message="event has already ended",
        )
        if not event.is_registered(actor.user_id):
            raise RegistrationNotFoundError()

        # Completed payments are refunded whatever the current price.
        payment = self._payments.find_open_payment(actor.user_id, event.id)
        paid = payment is not None and payment.status is PaymentStatus.COMPLETED
        if not paid and not event.is_paid:
            with self._uow.atomic():
                self._events.remove_registration(event.id, actor.user_id)
            logger.info("User %s unregistered from free event %s", actor.user_id, event.id)
            return

        if not paid:
            raise PaymentNotFoundError("Payment record not found or payment incomplete")
        self._refunds.refund(
            payment,
            on_refunded=lambda _: self._events.remove_registration(event.id, actor.user_id),
        )
        logger.info("User %s unregistered and refunded for event %s", actor.user_id, event.id)

    def _ensure_open(self, event: Event, closes_at: datetime | None, closed_message: str) -> None:
        if event.status is not EventStatus.APPROVED:
            raise ValidationError("Event is not approved", ErrorCode.EVENT_NOT_APPROVED)
        if closes_at is not None and self._clock.now() >= closes_at:
            raise ValidationError(f"Registration closed: {closed_message}", ErrorCode.REGISTRATION_CLOSED)

    def _require_event(self, event_id: EventId, lock: bool = False) -> Event:
        event = self._events.lock_event(event_id) if lock else self._events.get_event(event_id)
        if event is None:
            raise EventNotFoundError(str(event_id))
        return event


def _starts_at(event: Event) -> datetime | None:
    return event.window.start if event.window else None
