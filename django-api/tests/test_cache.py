"""Tests for cache behavior.

Run with: pytest tests/test_cache.py -v
"""

import pytest
from django.core.cache import cache

from events import models
from events.cache_keys import event_cache_key, hall_cache_key
from events.domain import Role


@pytest.mark.django_db
class TestCacheInvalidation:
    """Tests for cache invalidation on model changes."""

    def test_event_save_invalidates_detail_cache(self, make_event):
        """Saving an event invalidates the events:{id} cache key."""
        event = make_event()
        cache.set(event_cache_key(str(event.id)), {"title": "stale"})

        row = models.Event.objects.get(pk=event.id.value)
        row.title = "Fresh"
        row.save()

        assert cache.get(event_cache_key(str(event.id))) is None

    def test_hall_save_invalidates_detail_cache(self, make_hall):
        """Saving a hall invalidates the halls:{id} cache key."""
        hall = make_hall()
        cache.set(hall_cache_key(str(hall.id)), {"status": "available"})

        models.Hall.objects.get(pk=hall.id.value).save()

        assert cache.get(hall_cache_key(str(hall.id))) is None

    def test_approval_invalidates_hall_and_event(self, make_hall, make_event, event_service, admin):
        """Creating a reservation drops both the hall and the event entries."""
        hall = make_hall()
        event = make_event(hall=hall)
        cache.set(hall_cache_key(str(hall.id)), {"status": "available"})
        cache.set(event_cache_key(str(event.id)), {"status": "pending"})

        event_service.approve_event(admin, str(event.id))

        assert cache.get(hall_cache_key(str(hall.id))) is None
        assert cache.get(event_cache_key(str(event.id))) is None

    def test_registration_invalidates_event(self, make_event, event_service, registration_service, admin, make_actor):
        """Changing registered users invalidates the event entry."""
        event = event_service.approve_event(admin, str(make_event().id))
        cache.set(event_cache_key(str(event.id)), {"registered_count": 0})

        registration_service.register(make_actor(Role.USER), str(event.id))

        assert cache.get(event_cache_key(str(event.id))) is None

    def test_cache_keys_format(self):
        assert event_cache_key("abc") == "events:abc"
        assert hall_cache_key("abc") == "halls:abc"
