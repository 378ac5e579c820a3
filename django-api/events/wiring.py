"""Builds services from the Django stores and the configured collaborators."""

from django.conf import settings
from django.utils.module_loading import import_string

from events.integrations.clock import Clock, SystemClock
from events.integrations.media import DjangoStorageMediaStore, MediaStore
from events.integrations.payments import PaymentProcessor
from events.services.conflicts import ConflictChecker
from events.services.event_service import EventService
from events.services.hall_service import HallService
from events.services.occupancy import HallOccupancyTracker
from events.services.refunds import RefundCoordinator
from events.services.registration_service import RegistrationService
from events.services.sweeper import ExpirySweeper
from events.stores.django_store import (
    DjangoEventStore,
    DjangoHallStore,
    DjangoPaymentStore,
    DjangoReservationStore,
    DjangoUnitOfWork,
)


def get_payment_processor() -> PaymentProcessor:
    return import_string(settings.HALLS_PAYMENT_PROCESSOR)()


def get_media_store() -> MediaStore:
    return DjangoStorageMediaStore()


def get_clock() -> Clock:
    return SystemClock()


def _tracker(clock: Clock) -> HallOccupancyTracker:
    return HallOccupancyTracker(DjangoHallStore(), DjangoReservationStore(), clock)


def _refunds(processor: PaymentProcessor) -> RefundCoordinator:
    return RefundCoordinator(DjangoPaymentStore(), processor, DjangoUnitOfWork())


def event_service(
    processor: PaymentProcessor | None = None,
    media: MediaStore | None = None,
    clock: Clock | None = None,
) -> EventService:
    clock = clock or get_clock()
    reservations = DjangoReservationStore()
    return EventService(
        events=DjangoEventStore(),
        halls=DjangoHallStore(),
        reservations=reservations,
        payments=DjangoPaymentStore(),
        uow=DjangoUnitOfWork(),
        checker=ConflictChecker(reservations),
        tracker=_tracker(clock),
        refunds=_refunds(processor or get_payment_processor()),
        media=media or get_media_store(),
    )


def registration_service(
    processor: PaymentProcessor | None = None,
    clock: Clock | None = None,
) -> RegistrationService:
    processor = processor or get_payment_processor()
    return RegistrationService(
        events=DjangoEventStore(),
        payments=DjangoPaymentStore(),
        uow=DjangoUnitOfWork(),
        processor=processor,
        refunds=_refunds(processor),
        clock=clock or get_clock(),
    )


def hall_service(clock: Clock | None = None) -> HallService:
    return HallService(
        halls=DjangoHallStore(),
        events=DjangoEventStore(),
        reservations=DjangoReservationStore(),
        uow=DjangoUnitOfWork(),
        tracker=_tracker(clock or get_clock()),
    )


def expiry_sweeper(clock: Clock | None = None) -> ExpirySweeper:
    clock = clock or get_clock()
    return ExpirySweeper(
        halls=DjangoHallStore(),
        reservations=DjangoReservationStore(),
        tracker=_tracker(clock),
        uow=DjangoUnitOfWork(),
        clock=clock,
    )
