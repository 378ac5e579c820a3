"""Hall administration.

Hall status is not an editable field: an administrative override is only
accepted when it agrees with what live reservations already imply.
"""

import logging
import uuid
from dataclasses import replace

from events.domain import Actor, Capacity, Hall, HallId, HallStatus
from events.domain.errors import (
    CapacityExceededError,
    HallInUseError,
    HallNotFoundError,
    InvalidHallIdError,
    ValidationError,
)
from events.domain.permissions import Capability, authorize
from events.services.occupancy import HallOccupancyTracker
from events.stores.interfaces import EventStore, HallStore, ReservationStore, UnitOfWork

logger = logging.getLogger(__name__)


def parse_hall_id(hall_id: str) -> HallId:
    try:
        return HallId.from_string(hall_id)
    except (ValueError, TypeError, AttributeError) as exc:
        raise InvalidHallIdError() from exc


def _capacity(value: int) -> Capacity:
    try:
        return Capacity(int(value))
    except (TypeError, ValueError) as exc:
        raise ValidationError("Capacity must be a positive integer") from exc


class HallService:
    """Service for hall administration."""

    def __init__(
        self,
        *,
        halls: HallStore,
        events: EventStore,
        reservations: ReservationStore,
        uow: UnitOfWork,
        tracker: HallOccupancyTracker,
    ) -> None:
        self._halls = halls
        self._events = events
        self._reservations = reservations
        self._uow = uow
        self._tracker = tracker

    def get_hall(self, hall_id: str) -> Hall:
        hall = self._halls.get_hall(parse_hall_id(hall_id))
        if hall is None:
            raise HallNotFoundError(hall_id)
        return hall

    def create_hall(self, actor: Actor, name: str, location: str, capacity: int) -> Hall:
        authorize(actor, Capability.MANAGE_HALLS)
        if not name or not location:
            raise ValidationError("Name and location are required")
        hall = self._halls.add_hall(
            Hall(
                id=HallId(uuid.uuid4()),
                name=name,
                location=location,
                capacity=_capacity(capacity),
            )
        )
        logger.info("Hall %s created", hall.id)
        return hall

    def update_hall(
        self,
        actor: Actor,
        hall_id: str,
        name: str,
        location: str,
        capacity: int,
        status: HallStatus | None = None,
    ) -> Hall:
        """Update a hall's description and capacity.

        Raises:
            CapacityExceededError: If an approved event would no longer fit.
            ValidationError: If ``status`` disagrees with live reservations.
        """
        authorize(actor, Capability.MANAGE_HALLS)
        hid = parse_hall_id(hall_id)
        new_capacity = _capacity(capacity)

        with self._uow.atomic():
            hall = self._halls.lock_hall(hid)
            if hall is None:
                raise HallNotFoundError(hall_id)
            if new_capacity.value < hall.capacity.value:
                too_big = [
                    event
                    for event in self._events.list_approved_for_hall(hid)
                    if not new_capacity.fits(event.capacity)
                ]
                if too_big:
                    raise CapacityExceededError(
                        "Cannot reduce hall capacity. Some approved events exceed the new capacity."
                    )
            self._halls.save_hall(
                replace(hall, name=name, location=location, capacity=new_capacity)
            )
            if status is not None and status is not self._tracker.derive(hid):
                raise ValidationError(
                    f"Hall cannot be marked {status.value} while its reservations say otherwise"
                )
            self._tracker.recompute(hid)
            updated = self._halls.get_hall(hid)

        return updated

    def delete_hall(self, actor: Actor, hall_id: str) -> None:
        authorize(actor, Capability.MANAGE_HALLS)
        hid = parse_hall_id(hall_id)

        with self._uow.atomic():
            if self._halls.lock_hall(hid) is None:
                raise HallNotFoundError(hall_id)
            if self._events.list_approved_for_hall(hid):
                raise HallInUseError("Cannot delete hall. It is linked to approved events.")
            if self._reservations.count_for_hall(hid):
                raise HallInUseError("Cannot delete hall. It still holds reservations.")
            self._halls.delete_hall(hid)

        logger.info("Hall %s deleted", hid)
