"""Pytest configuration and shared fixtures."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest
from django.contrib.auth.models import Group
from rest_framework.test import APIClient

from events import wiring
from events.domain import Actor, Checkout, EventDraft, Role
from events.integrations.clock import Clock
from events.integrations.media import MediaStore
from events.integrations.payments import PaymentProcessor, PaymentProcessorError

# Every service test runs at 08:00 on the day its events take place.
NOW = datetime(2030, 1, 1, 8, 0, tzinfo=timezone.utc)


class FixedClock(Clock):
    def __init__(self, now: datetime = NOW) -> None:
        self.current = now

    def now(self) -> datetime:
        return self.current


class FakePaymentProcessor(PaymentProcessor):
    """Records processor calls; flip the fail_* flags to simulate outages."""

    def __init__(self) -> None:
        self.checkouts: list[tuple[int, str, dict]] = []
        self.refunds: list[tuple[str, int, str | None]] = []
        self.fail_checkout = False
        self.fail_refunds = False

    def create_checkout(self, amount_cents, description, metadata):
        if self.fail_checkout:
            raise PaymentProcessorError("card declined")
        self.checkouts.append((amount_cents, description, metadata))
        session_id = f"cs_test_{len(self.checkouts)}"
        return Checkout(session_id=session_id, redirect_url=f"https://pay.example/{session_id}")

    def refund(self, payment_reference, amount_cents, idempotency_key=None):
        if self.fail_refunds:
            raise PaymentProcessorError("processor unavailable")
        self.refunds.append((payment_reference, amount_cents, idempotency_key))


class FakeMediaStore(MediaStore):
    def __init__(self) -> None:
        self.deleted: list[str] = []

    def delete(self, path: str) -> None:
        self.deleted.append(path)


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture(autouse=True)
def clear_cache():
    from django.core.cache import cache
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def processor() -> FakePaymentProcessor:
    return FakePaymentProcessor()


@pytest.fixture
def media() -> FakeMediaStore:
    return FakeMediaStore()


@pytest.fixture
def event_service(processor, media, clock):
    return wiring.event_service(processor=processor, media=media, clock=clock)


@pytest.fixture
def registration_service(processor, clock):
    return wiring.registration_service(processor=processor, clock=clock)


@pytest.fixture
def hall_service(clock):
    return wiring.hall_service(clock=clock)


@pytest.fixture
def sweeper(clock):
    return wiring.expiry_sweeper(clock=clock)


@pytest.fixture
def make_user(db, django_user_model):
    """Create a Django user holding ``role`` and return it."""
    counter = iter(range(1, 10_000))

    def _make(role: Role = Role.USER):
        user = django_user_model.objects.create_user(
            username=f"{role.value}-{next(counter)}", password="secret"
        )
        if role is Role.ADMIN:
            user.is_staff = True
            user.save()
        elif role is Role.HOST:
            group, _ = Group.objects.get_or_create(name="host")
            user.groups.add(group)
        return user

    return _make


@pytest.fixture
def make_actor(make_user):
    def _make(role: Role = Role.USER) -> Actor:
        return Actor(user_id=make_user(role).pk, role=role)

    return _make


@pytest.fixture
def admin(make_actor) -> Actor:
    return make_actor(Role.ADMIN)


@pytest.fixture
def host(make_actor) -> Actor:
    return make_actor(Role.HOST)


@pytest.fixture
def attendee(make_actor) -> Actor:
    return make_actor(Role.USER)


@pytest.fixture
def make_hall(hall_service, admin):
    def _make(capacity: int = 50, name: str = "Hall A"):
        return hall_service.create_hall(admin, name, "North wing", capacity)

    return _make


@pytest.fixture
def make_event(event_service, host):
    """Create a pending event; times are hours on NOW's day."""

    def _make(
        hall=None,
        start: int | None = 10,
        end: int | None = 11,
        capacity: int = 40,
        price: str = "0",
        image: str | None = None,
        actor: Actor | None = None,
    ):
        return event_service.create_event(
            actor or host,
            EventDraft(
                title="Tech talk",
                description="Monthly meetup",
                capacity=capacity,
                price=Decimal(price),
                hall_id=hall.id if hall else None,
                start_date=NOW.replace(hour=start) if start is not None else None,
                end_date=NOW.replace(hour=end) if end is not None else None,
                image=image,
            ),
        )

    return _make
