"""Store interfaces (repository pattern).

Stores must be swappable and return domain models.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable
from contextlib import AbstractContextManager
from datetime import datetime

from events.domain import (
    Event,
    EventId,
    Hall,
    HallId,
    HallReservation,
    HallStatus,
    Payment,
    PaymentId,
)


class UnitOfWork(ABC):
    """Transaction boundary shared by every store."""

    @abstractmethod
    def atomic(self) -> AbstractContextManager:
        """Return a context manager that commits or rolls back as one unit."""
        ...

    @abstractmethod
    def on_commit(self, callback: Callable[[], None]) -> None:
        """Run ``callback`` once the current transaction commits."""
        ...


class EventStore(ABC):
    """Interface for event persistence operations."""

    @abstractmethod
    def get_event(self, event_id: EventId) -> Event | None:
        """Return an event by ID, or None if not found."""
        ...

    @abstractmethod
    def lock_event(self, event_id: EventId) -> Event | None:
        """Return an event by ID with its row locked until the transaction ends."""
        ...

    @abstractmethod
    def add_event(self, event: Event) -> Event:
        ...

    @abstractmethod
    def save_event(self, event: Event) -> Event:
        """Persist every field of ``event`` except its registrations."""
        ...

    @abstractmethod
    def delete_event(self, event_id: EventId) -> None:
        ...

    @abstractmethod
    def add_registration(self, event_id: EventId, user_id: int) -> None:
        ...

    @abstractmethod
    def remove_registration(self, event_id: EventId, user_id: int) -> None:
        ...

    @abstractmethod
    def list_approved_for_hall(self, hall_id: HallId) -> list[Event]:
        """Return approved events referencing the hall."""
        ...


class HallStore(ABC):
    """Interface for hall persistence operations."""

    @abstractmethod
    def get_hall(self, hall_id: HallId) -> Hall | None:
        ...

    @abstractmethod
    def lock_hall(self, hall_id: HallId) -> Hall | None:
        """Return a hall with its row locked until the transaction ends.

        Every check-then-write sequence on a hall's reservations holds this
        lock, so two approvals can never both see the hall as free.
        """
        ...

    @abstractmethod
    def add_hall(self, hall: Hall) -> Hall:
        ...

    @abstractmethod
    def save_hall(self, hall: Hall) -> Hall:
        """Persist descriptive fields. Status is written by set_status only."""
        ...

    @abstractmethod
    def set_status(self, hall_id: HallId, status: HallStatus) -> None:
        ...

    @abstractmethod
    def delete_hall(self, hall_id: HallId) -> None:
        ...


class ReservationStore(ABC):
    """Interface for hall reservation persistence operations."""

    @abstractmethod
    def list_reserved(self, hall_id: HallId) -> list[HallReservation]:
        """Return live reservations on a hall, ordered by start ascending."""
        ...

    @abstractmethod
    def get_for_event(self, event_id: EventId) -> HallReservation | None:
        ...

    @abstractmethod
    def add_reservation(self, reservation: HallReservation) -> HallReservation:
        """Insert a reservation.

        Raises:
            HallConflictError: If the store rejects it as a duplicate.
        """
        ...

    @abstractmethod
    def delete_for_event(self, event_id: EventId) -> HallReservation | None:
        """Delete the event's reservation and return it, or None if absent."""
        ...

    @abstractmethod
    def list_expired(self, now: datetime) -> list[HallReservation]:
        """Return reservations whose end is at or before ``now``."""
        ...

    @abstractmethod
    def delete_expired_for_hall(self, hall_id: HallId, now: datetime) -> int:
        """Delete a hall's ended reservations and return how many went."""
        ...

    @abstractmethod
    def count_for_hall(self, hall_id: HallId) -> int:
        ...


class PaymentStore(ABC):
    """Interface for payment persistence operations."""

    @abstractmethod
    def get_payment(self, payment_id: PaymentId) -> Payment | None:
        ...

    @abstractmethod
    def lock_payment(self, payment_id: PaymentId) -> Payment | None:
        ...

    @abstractmethod
    def find_open_payment(self, user_id: int, event_id: EventId) -> Payment | None:
        """Return the pending or completed payment for a registration."""
        ...

    @abstractmethod
    def list_completed_for_event(self, event_id: EventId) -> list[Payment]:
        ...

    @abstractmethod
    def add_payment(self, payment: Payment) -> Payment:
        ...

    @abstractmethod
    def save_payment(self, payment: Payment) -> Payment:
        ...
