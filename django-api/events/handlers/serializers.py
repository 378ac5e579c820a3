"""Serializers for parsing requests and transforming domain models to API responses."""

from decimal import Decimal

from rest_framework import serializers

from events.domain import EventDraft, HallId, HallStatus


class HallSerializer(serializers.Serializer):
    """Serializer for Hall domain model."""

    id = serializers.UUIDField(source="id.value")
    name = serializers.CharField()
    location = serializers.CharField()
    capacity = serializers.IntegerField(source="capacity.value")
    status = serializers.CharField(source="status.value")


class EventSerializer(serializers.Serializer):
    """Serializer for Event domain model."""

    id = serializers.UUIDField(source="id.value")
    title = serializers.CharField()
    description = serializers.CharField()
    host_id = serializers.IntegerField()
    capacity = serializers.IntegerField(source="capacity.value")
    price = serializers.DecimalField(source="price.amount", max_digits=10, decimal_places=2)
    status = serializers.CharField(source="status.value")
    hall_id = serializers.SerializerMethodField()
    start_date = serializers.SerializerMethodField()
    end_date = serializers.SerializerMethodField()
    image = serializers.CharField(allow_null=True)
    registered_count = serializers.SerializerMethodField()

    def get_hall_id(self, event) -> str | None:
        return str(event.hall_id) if event.hall_id else None

    def get_start_date(self, event) -> str | None:
        return event.window.start.isoformat() if event.window else None

    def get_end_date(self, event) -> str | None:
        return event.window.end.isoformat() if event.window else None

    def get_registered_count(self, event) -> int:
        return len(event.registered_user_ids)


class CheckoutSerializer(serializers.Serializer):
    session_id = serializers.CharField()
    redirect_url = serializers.CharField()


class PaymentSerializer(serializers.Serializer):
    id = serializers.UUIDField(source="id.value")
    amount = serializers.DecimalField(source="amount.amount", max_digits=10, decimal_places=2)
    status = serializers.CharField(source="status.value")


class EventInputSerializer(serializers.Serializer):
    """Validates the request body for creating or replacing an event."""

    title = serializers.CharField(max_length=255)
    description = serializers.CharField(allow_blank=True)
    capacity = serializers.IntegerField(min_value=1)
    price = serializers.DecimalField(
        max_digits=10, decimal_places=2, min_value=Decimal("0"), required=False, default=Decimal("0")
    )
    hall = serializers.UUIDField(required=False, allow_null=True)
    start_date = serializers.DateTimeField(required=False, allow_null=True)
    end_date = serializers.DateTimeField(required=False, allow_null=True)
    image = serializers.CharField(max_length=500, required=False, allow_null=True)

    def to_draft(self) -> EventDraft:
        data = self.validated_data
        hall = data.get("hall")
        return EventDraft(
            title=data["title"],
            description=data["description"],
            capacity=data["capacity"],
            price=data.get("price", Decimal("0")),
            hall_id=HallId(hall) if hall else None,
            start_date=data.get("start_date"),
            end_date=data.get("end_date"),
            image=data.get("image"),
        )


class HallInputSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    location = serializers.CharField(max_length=255)
    capacity = serializers.IntegerField(min_value=1)
    status = serializers.ChoiceField(
        choices=[s.value for s in HallStatus], required=False, allow_null=True
    )


class ConfirmRegistrationSerializer(serializers.Serializer):
    payment_reference = serializers.CharField(max_length=255)
