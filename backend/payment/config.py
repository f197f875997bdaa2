from __future__ import annotations
from dataclasses import dataclass, fields, replace

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured


@dataclass(frozen=True)
class RentCycleConfig:
    """Tunables of the monthly rent job.

    Built from the ``RENT_CYCLE`` dict in Django settings and passed explicitly
    into the resolver. Keys missing from settings fall back to the defaults below.
    """

    due_day: int = 7
    history_limit: int = 2
    customer_workers: int = 4
    booking_workers: int = 2
    job_max_retries: int = 1
    from_email: str | None = None

    def __post_init__(self):
        # due_day must exist in every month
        if not 1 <= int(self.due_day) <= 28:
            raise ImproperlyConfigured("RENT_CYCLE['due_day'] must be between 1 and 28")
        for name in ("history_limit", "customer_workers", "booking_workers"):
            if int(getattr(self, name)) < 1:
                raise ImproperlyConfigured(f"RENT_CYCLE['{name}'] must be >= 1")
        if int(self.job_max_retries) < 0:
            raise ImproperlyConfigured("RENT_CYCLE['job_max_retries'] must be >= 0")

    @classmethod
    def from_settings(cls, overrides: dict | None = None) -> "RentCycleConfig":
        raw = dict(getattr(settings, "RENT_CYCLE", None) or {})
        raw.update(overrides or {})
        known = {f.name for f in fields(cls)}
        unknown = set(raw) - known
        if unknown:
            raise ImproperlyConfigured(f"Unknown RENT_CYCLE keys: {', '.join(sorted(unknown))}")
        if not raw.get("from_email"):
            raw["from_email"] = getattr(settings, "NOTIFICATIONS_EMAIL_FROM", getattr(settings, "DEFAULT_FROM_EMAIL", None))
        return cls(**raw)

    def with_overrides(self, **changes) -> "RentCycleConfig":
        return replace(self, **changes)
