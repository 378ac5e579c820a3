from events.stores.interfaces import (
    EventStore,
    HallStore,
    PaymentStore,
    ReservationStore,
    UnitOfWork,
)

__all__ = [
    "EventStore",
    "HallStore",
    "PaymentStore",
    "ReservationStore",
    "UnitOfWork",
]
