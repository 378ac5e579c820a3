"""Django signals for cache invalidation.

Detail responses are cached under events:{id} and halls:{id}. Any write to
an event, hall or reservation drops the affected keys.
"""

from django.core.cache import cache
from django.db.models.signals import m2m_changed, post_delete, post_save
from django.dispatch import receiver

from events.cache_keys import event_cache_key, hall_cache_key
from events.models import Event, Hall, HallReservation


@receiver([post_save, post_delete], sender=Event)
def invalidate_event_cache(sender, instance, **kwargs):
    """Invalidate caches when an event is saved or deleted."""
    cache.delete(event_cache_key(str(instance.pk)))


@receiver(m2m_changed, sender=Event.registered_users.through)
def invalidate_registration_cache(sender, instance, **kwargs):
    """Invalidate the event cache when its registrations change."""
    if isinstance(instance, Event):
        cache.delete(event_cache_key(str(instance.pk)))


@receiver([post_save, post_delete], sender=Hall)
def invalidate_hall_cache(sender, instance, **kwargs):
    """Invalidate caches when a hall is saved or deleted."""
    cache.delete(hall_cache_key(str(instance.pk)))


@receiver([post_save, post_delete], sender=HallReservation)
def invalidate_reservation_cache(sender, instance, **kwargs):
    """Invalidate the hall and event caches when a reservation changes."""
    cache.delete_many(
        [hall_cache_key(str(instance.hall_id)), event_cache_key(str(instance.event_id))]
    )
