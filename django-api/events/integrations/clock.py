"""Source of "now" for registration windows and the expiry sweep."""

from abc import ABC, abstractmethod
from datetime import datetime

from django.utils import timezone


class Clock(ABC):
    """Source of the current time."""

    @abstractmethod
    def now(self) -> datetime:
        """Return the current time as an aware datetime."""
        ...


class SystemClock(Clock):
    def now(self) -> datetime:
        return timezone.now()
