"""Event lifecycle service - all business logic lives here.

Services:
- Depend only on interfaces (stores and collaborators)
- Validate domain invariants
- Perform orchestration and error mapping
- Return domain models or domain errors

Every transition runs as one ordered cascade inside a single transaction:
check, mutate reservation, recompute hall, persist event. Hall status is
recomputed from fresh reads after the reservation write, never patched.
"""

import logging
import uuid
from dataclasses import replace
from decimal import Decimal, InvalidOperation

from events.domain import (
    Actor,
    Capacity,
    Event,
    EventDraft,
    EventId,
    EventStatus,
    Hall,
    HallId,
    HallReservation,
    Money,
    ReservationId,
    TimeWindow,
)
from events.domain.errors import (
    AlreadyInStateError,
    CapacityExceededError,
    EventNotFoundError,
    HallConflictError,
    HallNotFoundError,
    InvalidEventIdError,
    RefundFailedError,
    ValidationError,
)
from events.domain.permissions import Capability, authorize
from events.integrations.media import MediaStore
from events.services.conflicts import ConflictChecker
from events.services.occupancy import HallOccupancyTracker
from events.services.refunds import RefundCoordinator
from events.stores.interfaces import (
    EventStore,
    HallStore,
    PaymentStore,
    ReservationStore,
    UnitOfWork,
)

logger = logging.getLogger(__name__)


def parse_event_id(event_id: str) -> EventId:
    try:
        return EventId.from_string(event_id)
    except (ValueError, TypeError, AttributeError) as exc:
        raise InvalidEventIdError() from exc


class EventService:
    """Service for the event approval lifecycle and its hall cascades."""

    def __init__(
        self,
        *,
        events: EventStore,
        halls: HallStore,
        reservations: ReservationStore,
        payments: PaymentStore,
        uow: UnitOfWork,
        checker: ConflictChecker,
        tracker: HallOccupancyTracker,
        refunds: RefundCoordinator,
        media: MediaStore,
    ) -> None:
        self._events = events
        self._halls = halls
        self._reservations = reservations
        self._payments = payments
        self._uow = uow
        self._checker = checker
        self._tracker = tracker
        self._refunds = refunds
        self._media = media

    # ── queries ───────────────────────────────────────────────

    def get_event(self, event_id: str) -> Event:
        """Return an event by ID.

        Raises:
            InvalidEventIdError: If the event_id is not a valid UUID.
            EventNotFoundError: If the event does not exist.
        """
        event = self._events.get_event(parse_event_id(event_id))
        if event is None:
            raise EventNotFoundError(event_id)
        return event

    # ── transitions ───────────────────────────────────────────

    def create_event(self, actor: Actor, draft: EventDraft) -> Event:
        """Submit an event for approval. No hall is reserved yet."""
        authorize(actor, Capability.CREATE_EVENT)
        capacity, price, window = _validate_draft(draft)

        with self._uow.atomic():
            if draft.hall_id is not None:
                hall = self._require_hall(draft.hall_id, lock=True)
                if self._checker.has_conflict(hall.id, window):
                    raise HallConflictError(str(hall.id))
            event = self._events.add_event(
                Event(
                    id=EventId(uuid.uuid4()),
                    title=draft.title,
                    description=draft.description,
                    host_id=actor.user_id,
                    capacity=capacity,
                    price=price,
                    status=EventStatus.PENDING,
                    hall_id=draft.hall_id,
                    window=window,
                    image=draft.image,
                )
            )

        logger.info("Event %s created by user %s, pending approval", event.id, actor.user_id)
        return event

    def approve_event(self, actor: Actor, event_id: str) -> Event:
        """Approve an event and reserve its hall for its window.

        Raises:
            AlreadyInStateError: If the event is already approved.
            HallConflictError: If another live reservation overlaps.
            CapacityExceededError: If the event does not fit in the hall.
        """
        authorize(actor, Capability.APPROVE_EVENT)
        eid = parse_event_id(event_id)

        with self._uow.atomic():
            event = self._require_event(eid, lock=True)
            if event.status is EventStatus.APPROVED:
                raise AlreadyInStateError(EventStatus.APPROVED.value)

            if not event.requires_hall:
                approved = self._events.save_event(replace(event, status=EventStatus.APPROVED))
                logger.info("Event %s approved without hall reservation", event.id)
                return approved

            if event.window is None:
                raise ValidationError("An event with a hall needs a start and end date")
            current = self._reservations.get_for_event(event.id)
            hall = self._lock_halls(event.hall_id, current.hall_id if current else None)[0]
            if self._checker.has_conflict(hall.id, event.window, exclude_event_id=event.id):
                raise HallConflictError(str(hall.id))
            if not hall.capacity.fits(event.capacity):
                raise CapacityExceededError(
                    f"Event capacity ({event.capacity.value}) exceeds "
                    f"hall capacity ({hall.capacity.value})."
                )

            previous = self._reservations.delete_for_event(event.id)
            if previous is not None and previous.hall_id != hall.id:
                self._tracker.recompute(previous.hall_id)
            self._reservations.add_reservation(
                HallReservation(
                    id=ReservationId(uuid.uuid4()),
                    hall_id=hall.id,
                    event_id=event.id,
                    window=event.window,
                )
            )
            self._tracker.recompute(hall.id)
            approved = self._events.save_event(replace(event, status=EventStatus.APPROVED))

        logger.info("Event %s approved and hall %s reserved", event.id, hall.id)
        return approved

    def reject_event(self, actor: Actor, event_id: str) -> Event:
        """Reject an event, releasing its reservation if it held one.

        The hall reference is kept so the event can be approved again for the
        same hall; the released reservation's hall is the one recomputed.
        """
        authorize(actor, Capability.REJECT_EVENT)
        eid = parse_event_id(event_id)

        with self._uow.atomic():
            event = self._require_event(eid, lock=True)
            if event.status is EventStatus.REJECTED:
                raise AlreadyInStateError(EventStatus.REJECTED.value)
            released = self._release_reservation(event.id)
            rejected = self._events.save_event(replace(event, status=EventStatus.REJECTED))

        if released is not None:
            logger.info("Event %s rejected, reservation on hall %s released", event.id, released.hall_id)
        else:
            logger.info("Event %s rejected", event.id)
        return rejected

    def update_event(self, actor: Actor, event_id: str, draft: EventDraft) -> Event:
        """Replace an event's fields.

        Moving an approved event to another hall or window drops its
        reservation and sends it back to pending for a fresh approval.
        """
        eid = parse_event_id(event_id)
        capacity, price, window = _validate_draft(draft)

        with self._uow.atomic():
            event = self._require_event(eid, lock=True)
            authorize(actor, Capability.MODIFY_EVENT, owner_id=event.host_id)

            if len(event.registered_user_ids) > capacity.value:
                raise CapacityExceededError(
                    f"{len(event.registered_user_ids)} users are already registered; "
                    f"capacity cannot drop to {capacity.value}."
                )

            slot_changed = draft.hall_id != event.hall_id or window != event.window
            current = self._reservations.get_for_event(event.id)
            locked = self._lock_halls(draft.hall_id, current.hall_id if current else None)
            if draft.hall_id is not None:
                hall = locked[0]
                if slot_changed and self._checker.has_conflict(
                    hall.id, window, exclude_event_id=event.id
                ):
                    raise HallConflictError(str(hall.id))
                if (
                    not slot_changed
                    and event.status is EventStatus.APPROVED
                    and not hall.capacity.fits(capacity)
                ):
                    raise CapacityExceededError(
                        f"Event capacity ({capacity.value}) exceeds "
                        f"hall capacity ({hall.capacity.value})."
                    )

            status = event.status
            if slot_changed and status is EventStatus.APPROVED:
                self._release_reservation(event.id)
                status = EventStatus.PENDING
                logger.info("Event %s slot changed, back to pending for re-approval", event.id)

            updated = self._events.save_event(
                replace(
                    event,
                    title=draft.title,
                    description=draft.description,
                    capacity=capacity,
                    price=price,
                    status=status,
                    hall_id=draft.hall_id,
                    window=window,
                    image=draft.image or event.image,
                )
            )
            old_image = event.image
            if draft.image and old_image and draft.image != old_image:
                self._uow.on_commit(lambda: self._media.delete(old_image))

        return updated

    def delete_event(self, actor: Actor, event_id: str) -> None:
        """Delete an event, refunding paid registrations first.

        A failed refund aborts the delete with the event untouched, so the
        operator can retry. Payments refunded before the failure stay
        refunded; the retry only refunds what is still completed.
        """
        eid = parse_event_id(event_id)
        event = self._require_event(eid)
        authorize(actor, Capability.MODIFY_EVENT, owner_id=event.host_id)

        # Completed payments are refunded whatever the current price.
        refunded = self._refunds.refund_event_payments(event.id)
        if refunded:
            logger.info("Refunded %d payments for event %s", len(refunded), event.id)

        with self._uow.atomic():
            event = self._require_event(eid, lock=True)
            if self._payments.list_completed_for_event(event.id):
                raise RefundFailedError("New payments arrived while deleting the event; retry")
            self._release_reservation(event.id)
            self._events.delete_event(event.id)
            image = event.image
            if image:
                self._uow.on_commit(lambda: self._media.delete(image))

        logger.info("Event %s deleted by user %s", event.id, actor.user_id)

    # ── cascade steps ─────────────────────────────────────────

    def _release_reservation(self, event_id: EventId) -> HallReservation | None:
        """Delete the event's reservation, then recompute the reservation's hall."""
        existing = self._reservations.get_for_event(event_id)
        if existing is None:
            return None
        self._halls.lock_hall(existing.hall_id)
        released = self._reservations.delete_for_event(event_id)
        self._tracker.recompute(existing.hall_id)
        return released

    def _lock_halls(self, target: HallId | None, other: HallId | None) -> list[Hall | None]:
        """Lock both halls in UUID order and return them as (target, other).

        Every path that locks two halls takes them in this order.
        """
        ids = {hall_id for hall_id in (target, other) if hall_id is not None}
        locked = {
            hall_id: self._require_hall(hall_id, lock=True)
            for hall_id in sorted(ids, key=lambda hall_id: hall_id.value)
        }
        return [locked.get(target), locked.get(other)]

    def _require_event(self, event_id: EventId, lock: bool = False) -> Event:
        event = self._events.lock_event(event_id) if lock else self._events.get_event(event_id)
        if event is None:
            raise EventNotFoundError(str(event_id))
        return event

    def _require_hall(self, hall_id: HallId, lock: bool = False) -> Hall:
        hall = self._halls.lock_hall(hall_id) if lock else self._halls.get_hall(hall_id)
        if hall is None:
            raise HallNotFoundError(str(hall_id))
        return hall


def _validate_draft(draft: EventDraft) -> tuple[Capacity, Money, TimeWindow | None]:
    if not draft.title or not draft.title.strip():
        raise ValidationError("Title is required")
    try:
        capacity = Capacity(int(draft.capacity))
    except (TypeError, ValueError) as exc:
        raise ValidationError("Capacity must be a positive integer") from exc
    try:
        price = Money(Decimal(draft.price or 0))
    except (TypeError, ValueError, InvalidOperation) as exc:
        raise ValidationError("Price must be a non-negative amount") from exc

    window = None
    if draft.start_date is not None or draft.end_date is not None:
        if draft.start_date is None or draft.end_date is None:
            raise ValidationError("Both start_date and end_date are required")
        try:
            window = TimeWindow(start=draft.start_date, end=draft.end_date)
        except ValueError as exc:
            raise ValidationError("start_date must be before end_date") from exc
    if draft.hall_id is not None and window is None:
        raise ValidationError("A hall can only be requested for a start and end date")
    return capacity, price, window
