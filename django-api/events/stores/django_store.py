"""Django ORM implementation of the stores.

Each method queries the Django ORM and converts rows to domain models.
"""

from collections.abc import Callable
from contextlib import AbstractContextManager
from datetime import datetime

from django.db import IntegrityError, transaction

from events import models
from events.domain import (
    Capacity,
    Event,
    EventId,
    EventStatus,
    Hall,
    HallId,
    HallReservation,
    HallStatus,
    Money,
    Payment,
    PaymentId,
    PaymentStatus,
    ReservationId,
    ReservationStatus,
    TimeWindow,
)
from events.domain.errors import HallConflictError
from events.stores.interfaces import (
    EventStore,
    HallStore,
    PaymentStore,
    ReservationStore,
    UnitOfWork,
)


def _hall_to_domain(row: models.Hall) -> Hall:
    return Hall(
        id=HallId(row.id),
        name=row.name,
        location=row.location,
        capacity=Capacity(row.capacity),
        status=HallStatus(row.status),
    )


def _event_to_domain(row: models.Event) -> Event:
    window = None
    if row.start_date is not None and row.end_date is not None:
        window = TimeWindow(start=row.start_date, end=row.end_date)
    return Event(
        id=EventId(row.id),
        title=row.title,
        description=row.description,
        host_id=row.host_id,
        capacity=Capacity(row.capacity),
        price=Money(row.price),
        status=EventStatus(row.status),
        hall_id=HallId(row.hall_id) if row.hall_id else None,
        window=window,
        image=row.image or None,
        registered_user_ids=frozenset(
            row.registered_users.values_list("id", flat=True)
        ),
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _reservation_to_domain(row: models.HallReservation) -> HallReservation:
    return HallReservation(
        id=ReservationId(row.id),
        hall_id=HallId(row.hall_id),
        event_id=EventId(row.event_id),
        window=TimeWindow(start=row.start_date, end=row.end_date),
        status=ReservationStatus(row.status),
    )


def _payment_to_domain(row: models.Payment) -> Payment:
    return Payment(
        id=PaymentId(row.id),
        user_id=row.user_id,
        event_id=EventId(row.event_id) if row.event_id else None,
        amount=Money(row.amount),
        status=PaymentStatus(row.status),
        checkout_session_id=row.checkout_session_id,
        payment_reference=row.payment_reference,
        created_at=row.created_at,
    )


def _event_fields(event: Event) -> dict:
    return {
        "title": event.title,
        "description": event.description,
        "host_id": event.host_id,
        "capacity": event.capacity.value,
        "price": event.price.amount,
        "status": event.status.value,
        "hall_id": event.hall_id.value if event.hall_id else None,
        "start_date": event.window.start if event.window else None,
        "end_date": event.window.end if event.window else None,
        "image": event.image,
    }


class DjangoUnitOfWork(UnitOfWork):
    """Transactions backed by django.db.transaction."""

    def atomic(self) -> AbstractContextManager:
        return transaction.atomic()

    def on_commit(self, callback: Callable[[], None]) -> None:
        transaction.on_commit(callback)


class DjangoEventStore(EventStore):
    """Relational event store using Django ORM."""

    def get_event(self, event_id: EventId) -> Event | None:
        row = models.Event.objects.filter(pk=event_id.value).first()
        return _event_to_domain(row) if row else None

    def lock_event(self, event_id: EventId) -> Event | None:
        row = models.Event.objects.select_for_update().filter(pk=event_id.value).first()
        return _event_to_domain(row) if row else None

    def add_event(self, event: Event) -> Event:
        row = models.Event.objects.create(id=event.id.value, **_event_fields(event))
        return _event_to_domain(row)

    def save_event(self, event: Event) -> Event:
        row = models.Event.objects.get(pk=event.id.value)
        for name, value in _event_fields(event).items():
            setattr(row, name, value)
        row.save()
        return _event_to_domain(row)

    def delete_event(self, event_id: EventId) -> None:
        models.Event.objects.filter(pk=event_id.value).delete()

    def add_registration(self, event_id: EventId, user_id: int) -> None:
        models.Event.objects.get(pk=event_id.value).registered_users.add(user_id)

    def remove_registration(self, event_id: EventId, user_id: int) -> None:
        models.Event.objects.get(pk=event_id.value).registered_users.remove(user_id)

    def list_approved_for_hall(self, hall_id: HallId) -> list[Event]:
        rows = models.Event.objects.filter(
            hall_id=hall_id.value, status=models.Event.Status.APPROVED
        )
        return [_event_to_domain(row) for row in rows]


class DjangoHallStore(HallStore):
    """Relational hall store using Django ORM."""

    def get_hall(self, hall_id: HallId) -> Hall | None:
        row = models.Hall.objects.filter(pk=hall_id.value).first()
        return _hall_to_domain(row) if row else None

    def lock_hall(self, hall_id: HallId) -> Hall | None:
        row = models.Hall.objects.select_for_update().filter(pk=hall_id.value).first()
        return _hall_to_domain(row) if row else None

    def add_hall(self, hall: Hall) -> Hall:
        row = models.Hall.objects.create(
            id=hall.id.value,
            name=hall.name,
            location=hall.location,
            capacity=hall.capacity.value,
            status=hall.status.value,
        )
        return _hall_to_domain(row)

    def save_hall(self, hall: Hall) -> Hall:
        row = models.Hall.objects.get(pk=hall.id.value)
        row.name = hall.name
        row.location = hall.location
        row.capacity = hall.capacity.value
        row.save(update_fields=["name", "location", "capacity", "updated_at"])
        return _hall_to_domain(row)

    def set_status(self, hall_id: HallId, status: HallStatus) -> None:
        row = models.Hall.objects.filter(pk=hall_id.value).first()
        if row is None or row.status == status.value:
            return
        row.status = status.value
        # save() rather than update() so post_save listeners see the change.
        row.save(update_fields=["status", "updated_at"])

    def delete_hall(self, hall_id: HallId) -> None:
        models.Hall.objects.filter(pk=hall_id.value).delete()


class DjangoReservationStore(ReservationStore):
    """Relational reservation store using Django ORM."""

    def list_reserved(self, hall_id: HallId) -> list[HallReservation]:
        rows = models.HallReservation.objects.filter(
            hall_id=hall_id.value, status=models.HallReservation.Status.RESERVED
        ).order_by("start_date")
        return [_reservation_to_domain(row) for row in rows]

    def get_for_event(self, event_id: EventId) -> HallReservation | None:
        row = models.HallReservation.objects.filter(event_id=event_id.value).first()
        return _reservation_to_domain(row) if row else None

    def add_reservation(self, reservation: HallReservation) -> HallReservation:
        try:
            with transaction.atomic():
                row = models.HallReservation.objects.create(
                    id=reservation.id.value,
                    hall_id=reservation.hall_id.value,
                    event_id=reservation.event_id.value,
                    start_date=reservation.window.start,
                    end_date=reservation.window.end,
                    status=reservation.status.value,
                )
        except IntegrityError as exc:
            raise HallConflictError(str(reservation.hall_id)) from exc
        return _reservation_to_domain(row)

    def delete_for_event(self, event_id: EventId) -> HallReservation | None:
        row = models.HallReservation.objects.filter(event_id=event_id.value).first()
        if row is None:
            return None
        reservation = _reservation_to_domain(row)
        row.delete()
        return reservation

    def list_expired(self, now: datetime) -> list[HallReservation]:
        rows = models.HallReservation.objects.filter(end_date__lte=now).order_by("hall_id")
        return [_reservation_to_domain(row) for row in rows]

    def delete_expired_for_hall(self, hall_id: HallId, now: datetime) -> int:
        deleted, _ = models.HallReservation.objects.filter(
            hall_id=hall_id.value, end_date__lte=now
        ).delete()
        return deleted

    def count_for_hall(self, hall_id: HallId) -> int:
        return models.HallReservation.objects.filter(hall_id=hall_id.value).count()


class DjangoPaymentStore(PaymentStore):
    """Relational payment store using Django ORM."""

    def get_payment(self, payment_id: PaymentId) -> Payment | None:
        row = models.Payment.objects.filter(pk=payment_id.value).first()
        return _payment_to_domain(row) if row else None

    def lock_payment(self, payment_id: PaymentId) -> Payment | None:
        row = models.Payment.objects.select_for_update().filter(pk=payment_id.value).first()
        return _payment_to_domain(row) if row else None

    def find_open_payment(self, user_id: int, event_id: EventId) -> Payment | None:
        row = (
            models.Payment.objects.filter(user_id=user_id, event_id=event_id.value)
            .exclude(status=models.Payment.Status.REFUNDED)
            .first()
        )
        return _payment_to_domain(row) if row else None

    def list_completed_for_event(self, event_id: EventId) -> list[Payment]:
        rows = models.Payment.objects.filter(
            event_id=event_id.value, status=models.Payment.Status.COMPLETED
        )
        return [_payment_to_domain(row) for row in rows]

    def add_payment(self, payment: Payment) -> Payment:
        row = models.Payment.objects.create(
            id=payment.id.value,
            user_id=payment.user_id,
            event_id=payment.event_id.value if payment.event_id else None,
            amount=payment.amount.amount,
            status=payment.status.value,
            checkout_session_id=payment.checkout_session_id,
            payment_reference=payment.payment_reference,
        )
        return _payment_to_domain(row)

    def save_payment(self, payment: Payment) -> Payment:
        row = models.Payment.objects.get(pk=payment.id.value)
        row.amount = payment.amount.amount
        row.status = payment.status.value
        row.checkout_session_id = payment.checkout_session_id
        row.payment_reference = payment.payment_reference
        row.save()
        return _payment_to_domain(row)
