"""Unit tests for HallService.

Run with: pytest tests/test_halls.py -v
"""

import uuid

import pytest

from events import models
from events.domain import HallStatus
from events.domain.errors import (
    CapacityExceededError,
    ForbiddenError,
    HallInUseError,
    HallNotFoundError,
    InvalidHallIdError,
    ValidationError,
)


@pytest.mark.django_db
class TestCreateHall:
    def test_new_hall_is_available(self, hall_service, admin):
        hall = hall_service.create_hall(admin, "Hall A", "North wing", 50)

        assert hall.status is HallStatus.AVAILABLE
        assert hall.capacity.value == 50

    def test_hosts_cannot_manage_halls(self, hall_service, host):
        with pytest.raises(ForbiddenError):
            hall_service.create_hall(host, "Hall A", "North wing", 50)

    def test_name_required(self, hall_service, admin):
        with pytest.raises(ValidationError):
            hall_service.create_hall(admin, "", "North wing", 50)

    def test_capacity_must_be_positive(self, hall_service, admin):
        with pytest.raises(ValidationError):
            hall_service.create_hall(admin, "Hall A", "North wing", 0)


@pytest.mark.django_db
class TestGetHall:
    def test_invalid_id(self, hall_service):
        with pytest.raises(InvalidHallIdError):
            hall_service.get_hall("nope")

    def test_missing_hall(self, hall_service):
        with pytest.raises(HallNotFoundError):
            hall_service.get_hall(str(uuid.uuid4()))


@pytest.mark.django_db
class TestUpdateHall:
    def test_rename(self, make_hall, hall_service, admin):
        hall = make_hall()

        updated = hall_service.update_hall(admin, str(hall.id), "Main Hall", "South wing", 60)

        assert (updated.name, updated.location, updated.capacity.value) == ("Main Hall", "South wing", 60)

    def test_cannot_shrink_below_approved_event(self, make_hall, make_event, event_service, hall_service, admin):
        hall = make_hall(capacity=50)
        event_service.approve_event(admin, str(make_event(hall=hall, capacity=40).id))

        with pytest.raises(CapacityExceededError):
            hall_service.update_hall(admin, str(hall.id), "Hall A", "North wing", 30)
        assert models.Hall.objects.get(pk=hall.id.value).capacity == 50

    def test_shrink_ignores_pending_events(self, make_hall, make_event, hall_service, admin):
        hall = make_hall(capacity=50)
        make_event(hall=hall, capacity=40)

        assert hall_service.update_hall(admin, str(hall.id), "Hall A", "North wing", 30).capacity.value == 30

    def test_status_override_must_match_reservations(self, make_hall, make_event, event_service, hall_service, admin):
        hall = make_hall()
        event_service.approve_event(admin, str(make_event(hall=hall).id))

        with pytest.raises(ValidationError):
            hall_service.update_hall(
                admin, str(hall.id), "Hall A", "North wing", 50, status=HallStatus.AVAILABLE
            )
        assert models.Hall.objects.get(pk=hall.id.value).status == HallStatus.RESERVED.value

    def test_matching_status_override_is_accepted(self, make_hall, hall_service, admin):
        hall = make_hall()

        updated = hall_service.update_hall(
            admin, str(hall.id), "Hall A", "North wing", 50, status=HallStatus.AVAILABLE
        )

        assert updated.status is HallStatus.AVAILABLE

    def test_update_repairs_drifted_status(self, make_hall, hall_service, admin):
        hall = make_hall()
        models.Hall.objects.filter(pk=hall.id.value).update(status=HallStatus.RESERVED.value)

        updated = hall_service.update_hall(admin, str(hall.id), "Hall A", "North wing", 50)

        assert updated.status is HallStatus.AVAILABLE


@pytest.mark.django_db
class TestDeleteHall:
    def test_delete_unused_hall(self, make_hall, hall_service, admin):
        hall = make_hall()

        hall_service.delete_hall(admin, str(hall.id))

        assert not models.Hall.objects.exists()

    def test_hall_with_approved_event_is_in_use(self, make_hall, make_event, event_service, hall_service, admin):
        hall = make_hall()
        event_service.approve_event(admin, str(make_event(hall=hall).id))

        with pytest.raises(HallInUseError):
            hall_service.delete_hall(admin, str(hall.id))

    def test_pending_events_lose_their_hall(self, make_hall, make_event, event_service, hall_service, admin):
        hall = make_hall()
        event = make_event(hall=hall)

        hall_service.delete_hall(admin, str(hall.id))

        assert event_service.get_event(str(event.id)).hall_id is None

    def test_missing_hall(self, hall_service, admin):
        with pytest.raises(HallNotFoundError):
            hall_service.delete_hall(admin, str(uuid.uuid4()))
