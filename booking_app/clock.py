from django.utils import timezone


class DateTimeProvider:
    """Supplies the current time as an aware UTC datetime."""

    def utc_now(self):
        return timezone.now()


class FixedDateTimeProvider(DateTimeProvider):
    """Always reports the same instant. Used by tests and fixtures."""

    def __init__(self, now):
        self.now = now

    def utc_now(self):
        return self.now
