"""Single source of truth for "now".

Services take a clock callable so tests can pin admission time.
"""

from collections.abc import Callable
from datetime import datetime

from django.utils import timezone

Clock = Callable[[], datetime]


def now() -> datetime:
    """Current aware datetime."""
    return timezone.now()
