"""HTTP handlers (views) - handle HTTP concerns only.

Handlers:
- Parse requests and validate input format
- Call services for business logic
- Map domain errors to HTTP responses (see handlers/errors.py)
- Never contain business logic
- Never expose internal error details
"""

from django.conf import settings
from django.core.cache import cache
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from events import wiring
from events.cache_keys import event_cache_key, hall_cache_key
from events.domain import HallStatus
from events.handlers.identity import actor_from_request
from events.handlers.serializers import (
    CheckoutSerializer,
    ConfirmRegistrationSerializer,
    EventInputSerializer,
    EventSerializer,
    HallInputSerializer,
    HallSerializer,
    PaymentSerializer,
)


class EventCollectionView(APIView):
    """Handler for POST /api/events"""

    permission_classes = [IsAuthenticated]

    def post(self, request: Request) -> Response:
        serializer = EventInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        event = wiring.event_service().create_event(
            actor_from_request(request), serializer.to_draft()
        )
        return Response(EventSerializer(event).data, status=status.HTTP_201_CREATED)


class EventDetailView(APIView):
    """Handler for GET, PUT, DELETE /api/events/{event_id}"""

    permission_classes = [IsAuthenticated]

    def get(self, request: Request, event_id: str) -> Response:
        key = event_cache_key(event_id)
        data = cache.get(key)
        if data is None:
            event = wiring.event_service().get_event(event_id)
            data = dict(EventSerializer(event).data)
            cache.set(key, data, settings.HALLS_CACHE_TIMEOUT)
        return Response(data)

    def put(self, request: Request, event_id: str) -> Response:
        serializer = EventInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        event = wiring.event_service().update_event(
            actor_from_request(request), event_id, serializer.to_draft()
        )
        return Response(EventSerializer(event).data)

    def delete(self, request: Request, event_id: str) -> Response:
        wiring.event_service().delete_event(actor_from_request(request), event_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class EventApproveView(APIView):
    """Handler for POST /api/events/{event_id}/approve"""

    permission_classes = [IsAuthenticated]

    def post(self, request: Request, event_id: str) -> Response:
        event = wiring.event_service().approve_event(actor_from_request(request), event_id)
        return Response(EventSerializer(event).data)


class EventRejectView(APIView):
    """Handler for POST /api/events/{event_id}/reject"""

    permission_classes = [IsAuthenticated]

    def post(self, request: Request, event_id: str) -> Response:
        event = wiring.event_service().reject_event(actor_from_request(request), event_id)
        return Response(EventSerializer(event).data)


class EventRegisterView(APIView):
    """Handler for POST /api/events/{event_id}/register"""

    permission_classes = [IsAuthenticated]

    def post(self, request: Request, event_id: str) -> Response:
        checkout = wiring.registration_service().register(actor_from_request(request), event_id)
        if checkout is None:
            return Response({"registered": True})
        return Response(CheckoutSerializer(checkout).data, status=status.HTTP_202_ACCEPTED)


class EventConfirmView(APIView):
    """Handler for POST /api/events/{event_id}/confirm"""

    permission_classes = [IsAuthenticated]

    def post(self, request: Request, event_id: str) -> Response:
        serializer = ConfirmRegistrationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        payment = wiring.registration_service().confirm_registration(
            actor_from_request(request),
            event_id,
            serializer.validated_data["payment_reference"],
        )
        return Response(PaymentSerializer(payment).data)


class EventUnregisterView(APIView):
    """Handler for POST /api/events/{event_id}/unregister"""

    permission_classes = [IsAuthenticated]

    def post(self, request: Request, event_id: str) -> Response:
        wiring.registration_service().unregister(actor_from_request(request), event_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class HallCollectionView(APIView):
    """Handler for POST /api/halls"""

    permission_classes = [IsAuthenticated]

    def post(self, request: Request) -> Response:
        serializer = HallInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        hall = wiring.hall_service().create_hall(
            actor_from_request(request), data["name"], data["location"], data["capacity"]
        )
        return Response(HallSerializer(hall).data, status=status.HTTP_201_CREATED)


class HallDetailView(APIView):
    """Handler for GET, PUT, DELETE /api/halls/{hall_id}"""

    permission_classes = [IsAuthenticated]

    def get(self, request: Request, hall_id: str) -> Response:
        key = hall_cache_key(hall_id)
        data = cache.get(key)
        if data is None:
            hall = wiring.hall_service().get_hall(hall_id)
            data = dict(HallSerializer(hall).data)
            cache.set(key, data, settings.HALLS_CACHE_TIMEOUT)
        return Response(data)

    def put(self, request: Request, hall_id: str) -> Response:
        serializer = HallInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        hall_status = data.get("status")
        hall = wiring.hall_service().update_hall(
            actor_from_request(request),
            hall_id,
            data["name"],
            data["location"],
            data["capacity"],
            status=HallStatus(hall_status) if hall_status else None,
        )
        return Response(HallSerializer(hall).data)

    def delete(self, request: Request, hall_id: str) -> Response:
        wiring.hall_service().delete_hall(actor_from_request(request), hall_id)
        return Response(status=status.HTTP_204_NO_CONTENT)
