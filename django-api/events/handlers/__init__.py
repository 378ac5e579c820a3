from events.handlers.views import (
    EventApproveView,
    EventConfirmView,
    EventDetailView,
    EventCollectionView,
    EventRegisterView,
    EventRejectView,
    EventUnregisterView,
    HallDetailView,
    HallCollectionView,
)

__all__ = [
    "EventApproveView",
    "EventConfirmView",
    "EventDetailView",
    "EventCollectionView",
    "EventRegisterView",
    "EventRejectView",
    "EventUnregisterView",
    "HallDetailView",
    "HallCollectionView",
]
