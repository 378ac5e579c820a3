from django.urls import path

from events.handlers import (
    EventApproveView,
    EventCollectionView,
    EventConfirmView,
    EventDetailView,
    EventRegisterView,
    EventRejectView,
    EventUnregisterView,
    HallCollectionView,
    HallDetailView,
)

urlpatterns = [
    path("events", EventCollectionView.as_view(), name="event-list"),
    path("events/<str:event_id>", EventDetailView.as_view(), name="event-detail"),
    path("events/<str:event_id>/approve", EventApproveView.as_view(), name="event-approve"),
    path("events/<str:event_id>/reject", EventRejectView.as_view(), name="event-reject"),
    path(
        "events/<str:event_id>/register",
        EventRegisterView.as_view(),
        name="event-register",
    ),
    path(
        "events/<str:event_id>/confirm",
        EventConfirmView.as_view(),
        name="event-confirm",
    ),
    path(
        "events/<str:event_id>/unregister",
        EventUnregisterView.as_view(),
        name="event-unregister",
    ),
    path("halls", HallCollectionView.as_view(), name="hall-list"),
    path("halls/<str:hall_id>", HallDetailView.as_view(), name="hall-detail"),
]
