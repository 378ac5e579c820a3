from django.contrib import admin

from events.models import Event, Hall, HallReservation, Payment


class HallReservationInline(admin.TabularInline):
    model = HallReservation
    extra = 0
    readonly_fields = ["event", "start_date", "end_date", "status"]
    can_delete = False


@admin.register(Hall)
class HallAdmin(admin.ModelAdmin):
    list_display = ["name", "location", "capacity", "status"]
    search_fields = ["name", "location"]
    # Status is derived from reservations; the lifecycle engine owns it.
    readonly_fields = ["status"]
    inlines = [HallReservationInline]


@admin.register(Event)
class EventAdmin(admin.ModelAdmin):
    list_display = ["title", "host", "hall", "start_date", "end_date", "status"]
    list_filter = ["status", "hall"]
    search_fields = ["title"]
    readonly_fields = ["status"]


@admin.register(HallReservation)
class HallReservationAdmin(admin.ModelAdmin):
    list_display = ["hall", "event", "start_date", "end_date", "status"]
    list_filter = ["hall", "status"]


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ["user", "event", "amount", "status", "created_at"]
    list_filter = ["status"]
    readonly_fields = ["status", "checkout_session_id", "payment_reference"]
