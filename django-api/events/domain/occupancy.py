"""Derived hall occupancy.

A hall is reserved iff at least one live reservation on it has not ended.
Hall status is always recomputed from this rule, never patched.
"""

from collections.abc import Iterable
from datetime import datetime

from events.domain.models import HallReservation, HallStatus


def derive_hall_status(reservations: Iterable[HallReservation], now: datetime) -> HallStatus:
    for reservation in reservations:
        if reservation.is_live and not reservation.window.has_ended(now):
            return HallStatus.RESERVED
    return HallStatus.AVAILABLE
