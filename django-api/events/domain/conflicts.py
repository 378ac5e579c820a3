"""Interval conflict rule for hall reservations.

Overlap rule: conflict if new.start < existing.end AND existing.start < new.end.
Exact boundary touches (end == start) are NOT considered conflicts.
"""

from collections.abc import Iterable

from events.domain.models import HallReservation
from events.domain.value_objects import EventId, HallId, TimeWindow


def find_conflict(
    reservations: Iterable[HallReservation],
    hall_id: HallId,
    window: TimeWindow,
    exclude_event_id: EventId | None = None,
) -> HallReservation | None:
    """Return the first live reservation on ``hall_id`` overlapping ``window``."""
    for reservation in reservations:
        if reservation.hall_id != hall_id or not reservation.is_live:
            continue
        if exclude_event_id is not None and reservation.event_id == exclude_event_id:
            continue
        if reservation.window.overlaps(window):
            return reservation
    return None


def has_conflict(
    reservations: Iterable[HallReservation],
    hall_id: HallId,
    window: TimeWindow,
    exclude_event_id: EventId | None = None,
) -> bool:
    return find_conflict(reservations, hall_id, window, exclude_event_id) is not None
