"""Domain models representing persisted state.

These are pure domain objects with no API input rules.
Django ORM models are in events/models.py (persistence layer).
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum

from events.domain.value_objects import (
    Capacity,
    EventId,
    HallId,
    Money,
    PaymentId,
    ReservationId,
    TimeWindow,
)


class EventStatus(str, Enum):
    """Approval state of an event."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class HallStatus(str, Enum):
    """Occupancy of a hall, derived from its reservations."""

    AVAILABLE = "available"
    RESERVED = "reserved"


class ReservationStatus(str, Enum):
    RESERVED = "reserved"
    CANCELLED = "cancelled"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    REFUNDED = "refunded"


class Role(str, Enum):
    """Role the identity provider assigns to a caller."""

    USER = "user"
    HOST = "host"
    ADMIN = "admin"


@dataclass(frozen=True)
class Actor:
    """The caller of an operation, as supplied by the identity provider."""

    user_id: int
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN


@dataclass(frozen=True)
class Hall:
    """Domain representation of a Hall.

    ``status`` is advisory. It is derived from live reservations and only
    written by the occupancy tracker.
    """

    id: HallId
    name: str
    location: str
    capacity: Capacity
    status: HallStatus = HallStatus.AVAILABLE


@dataclass(frozen=True)
class Event:
    """Domain representation of an Event."""

    id: EventId
    title: str
    description: str
    host_id: int
    capacity: Capacity
    price: Money = Money(Decimal("0"))
    status: EventStatus = EventStatus.PENDING
    hall_id: HallId | None = None
    window: TimeWindow | None = None
    image: str | None = None
    registered_user_ids: frozenset[int] = field(default_factory=frozenset)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def requires_hall(self) -> bool:
        return self.hall_id is not None

    @property
    def is_paid(self) -> bool:
        return not self.price.is_free

    @property
    def seats_left(self) -> int:
        return self.capacity.value - len(self.registered_user_ids)

    def is_registered(self, user_id: int) -> bool:
        return user_id in self.registered_user_ids


@dataclass(frozen=True)
class HallReservation:
    """Binds one event to one hall for a time window."""

    id: ReservationId
    hall_id: HallId
    event_id: EventId
    window: TimeWindow
    status: ReservationStatus = ReservationStatus.RESERVED

    @property
    def is_live(self) -> bool:
        return self.status is ReservationStatus.RESERVED


@dataclass(frozen=True)
class Payment:
    """Domain representation of a Payment for one (user, event) registration."""

    id: PaymentId
    user_id: int
    event_id: EventId | None
    amount: Money
    status: PaymentStatus = PaymentStatus.PENDING
    checkout_session_id: str | None = None
    payment_reference: str | None = None
    created_at: datetime | None = None


@dataclass(frozen=True)
class EventDraft:
    """Client-supplied event fields for create and update."""

    title: str
    description: str
    capacity: int
    price: Decimal = Decimal("0")
    hall_id: HallId | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    image: str | None = None


@dataclass(frozen=True)
class Checkout:
    """A processor checkout session the user must complete to pay."""

    session_id: str
    redirect_url: str
