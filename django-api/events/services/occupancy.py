"""Hall occupancy tracker.

The only writer of Hall.status. Every call re-reads the hall's live
reservations, so running it twice, or after a concurrent sibling delete,
always lands on the same answer.
"""

import logging

from events.domain import HallId, HallStatus
from events.domain.occupancy import derive_hall_status
from events.integrations.clock import Clock
from events.stores.interfaces import HallStore, ReservationStore

logger = logging.getLogger(__name__)


class HallOccupancyTracker:
    """Derives hall status from live reservations and writes it back."""

    def __init__(self, halls: HallStore, reservations: ReservationStore, clock: Clock) -> None:
        self._halls = halls
        self._reservations = reservations
        self._clock = clock

    def derive(self, hall_id: HallId) -> HallStatus:
        return derive_hall_status(self._reservations.list_reserved(hall_id), self._clock.now())

    def recompute(self, hall_id: HallId) -> HallStatus:
        """Derive the hall's status from live reservations and store it."""
        hall = self._halls.get_hall(hall_id)
        if hall is None:
            logger.warning("Skipping occupancy recompute for missing hall %s", hall_id)
            return HallStatus.AVAILABLE
        status = self.derive(hall_id)
        if status is not hall.status:
            logger.info("Hall %s is now %s", hall_id, status.value)
            self._halls.set_status(hall_id, status)
        return status
