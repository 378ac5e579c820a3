from events.domain.models import (
    Actor,
    Checkout,
    Event,
    EventDraft,
    EventStatus,
    Hall,
    HallReservation,
    HallStatus,
    Payment,
    PaymentStatus,
    ReservationStatus,
    Role,
)
from events.domain.value_objects import (
    Capacity,
    EventId,
    HallId,
    Money,
    PaymentId,
    ReservationId,
    TimeWindow,
)

__all__ = [
    "Actor",
    "Checkout",
    "Event",
    "EventDraft",
    "EventStatus",
    "Hall",
    "HallReservation",
    "HallStatus",
    "Payment",
    "PaymentStatus",
    "ReservationStatus",
    "Role",
    "EventId",
    "HallId",
    "ReservationId",
    "PaymentId",
    "Money",
    "Capacity",
    "TimeWindow",
]
