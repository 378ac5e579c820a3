"""Interval conflict checker backed by the reservation store."""

from events.domain import EventId, HallId, HallReservation, TimeWindow
from events.domain import conflicts
from events.stores.interfaces import ReservationStore


class ConflictChecker:
    """Answers whether a hall is free for a window. Never writes."""

    def __init__(self, reservations: ReservationStore) -> None:
        self._reservations = reservations

    def find_conflict(
        self,
        hall_id: HallId,
        window: TimeWindow,
        exclude_event_id: EventId | None = None,
    ) -> HallReservation | None:
        return conflicts.find_conflict(
            self._reservations.list_reserved(hall_id), hall_id, window, exclude_event_id
        )

    def has_conflict(
        self,
        hall_id: HallId,
        window: TimeWindow,
        exclude_event_id: EventId | None = None,
    ) -> bool:
        return self.find_conflict(hall_id, window, exclude_event_id) is not None
