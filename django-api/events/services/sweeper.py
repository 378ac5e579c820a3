"""Expiry sweeper.

Retires reservations whose window has ended and lets the occupancy tracker
reclaim their halls. Runs on a timer, independent of request traffic, and
never touches event or payment state.
"""

import logging
from dataclasses import dataclass, field

from events.domain import HallId, HallStatus
from events.integrations.clock import Clock
from events.services.occupancy import HallOccupancyTracker
from events.stores.interfaces import HallStore, ReservationStore, UnitOfWork

logger = logging.getLogger(__name__)


@dataclass
class SweepReport:
    """Outcome of one sweep cycle."""

    removed: int = 0
    freed_halls: list[HallId] = field(default_factory=list)
    failed_halls: list[HallId] = field(default_factory=list)


class ExpirySweeper:
    """Retires ended reservations hall by hall."""

    def __init__(
        self,
        *,
        halls: HallStore,
        reservations: ReservationStore,
        tracker: HallOccupancyTracker,
        uow: UnitOfWork,
        clock: Clock,
    ) -> None:
        self._halls = halls
        self._reservations = reservations
        self._tracker = tracker
        self._uow = uow
        self._clock = clock

    def run(self) -> SweepReport:
        """Run one sweep cycle.

        Each hall is handled in its own transaction. A failure on one hall is
        logged and the sweep moves on to the next.
        """
        now = self._clock.now()
        report = SweepReport()
        hall_ids = list(dict.fromkeys(r.hall_id for r in self._reservations.list_expired(now)))

        for hall_id in hall_ids:
            try:
                with self._uow.atomic():
                    self._halls.lock_hall(hall_id)
                    removed = self._reservations.delete_expired_for_hall(hall_id, now)
                    status = self._tracker.recompute(hall_id)
            except Exception:
                logger.exception("Sweep failed for hall %s", hall_id)
                report.failed_halls.append(hall_id)
                continue
            report.removed += removed
            if status is HallStatus.AVAILABLE:
                report.freed_halls.append(hall_id)

        logger.info(
            "Sweep removed %d expired reservations, freed %d halls, %d failures",
            report.removed, len(report.freed_halls), len(report.failed_halls),
        )
        return report
