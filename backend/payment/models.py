from django.db import models
from django.core.exceptions import ValidationError
from django.utils import timezone
from datetime import date as _date

from properties.models import TimeStampedModel
from .config import RentCycleConfig
from .cycle import billing_month, due_date_for


class PaymentQuerySet(models.QuerySet):
    def for_customer(self, customer_id, booking_id=None):
        qs = self.filter(customer_id=customer_id)
        if booking_id is not None:
            qs = qs.filter(booking_id=booking_id)
        return qs

    def newest_first(self):
        return self.order_by("-created_at", "-id")

    def outstanding(self):
        return self.filter(status=Payment.Status.NOTIFIED)


class Payment(TimeStampedModel):
    """One monthly rent obligation (or historical payment) of a booking."""

    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        NOTIFIED = "notified", "Notified"
        COMPLETED = "completed", "Completed"
        FAILED = "failed", "Failed"

    customer = models.ForeignKey("customers.Customer", on_delete=models.PROTECT, related_name="payments")
    booking = models.ForeignKey("bookings.Booking", on_delete=models.PROTECT, related_name="payments")

    # Whole rupees; rent plus food charge
    amount = models.PositiveIntegerField()
    # Billed month, normalised to its first day
    payment_for_date = models.DateField(help_text="Month being billed (stored as YYYY-MM-01)")
    due_date = models.DateField(blank=True, help_text="Day 7 of the billed month; derived when left empty")
    status = models.CharField(max_length=12, choices=Status.choices, default=Status.NOTIFIED, db_index=True)

    booking_snapshot = models.JSONField(default=dict, blank=True)

    reminder_sent_at = models.DateTimeField(null=True, blank=True)
    late_warned_at = models.DateTimeField(null=True, blank=True)
    paid_at = models.DateTimeField(null=True, blank=True)
    notes = models.TextField(blank=True)

    objects = PaymentQuerySet.as_manager()

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["customer", "booking", "payment_for_date"],
                name="uniq_payment_customer_booking_month",
            ),
        ]
        indexes = [
            models.Index(fields=["customer", "-created_at"], name="idx_payment_customer_created"),
            models.Index(fields=["booking", "payment_for_date"], name="idx_payment_booking_month"),
            models.Index(fields=["status", "due_date"], name="idx_payment_status_due"),
        ]
        ordering = ["-payment_for_date", "-created_at"]

    def __str__(self) -> str:
        return f"Payment #{self.pk} • Booking {self.booking_id} • {self.payment_for_date:%Y-%m} • {self.status}"

    @property
    def billing_period(self) -> str:
        return self.payment_for_date.strftime("%Y-%m") if self.payment_for_date else ""

    @property
    def is_overdue(self) -> bool:
        return self.status == self.Status.NOTIFIED and self.due_date < timezone.localdate()

    def clean(self):
        super().clean()
        if self.booking_id and self.customer_id and self.booking.customer_id != self.customer_id:
            raise ValidationError({"booking": "Booking belongs to a different customer."})
        if self.payment_for_date and self.due_date:
            month = billing_month(self.payment_for_date)
            if (self.due_date.year, self.due_date.month) != (month.year, month.month):
                raise ValidationError({"due_date": "Due date must fall in the billed month."})

    def save(self, *args, **kwargs):
        if self.payment_for_date:
            self.payment_for_date = billing_month(self.payment_for_date)
            if not self.due_date:
                self.due_date = due_date_for(self.payment_for_date, RentCycleConfig.from_settings().due_day)
        return super().save(*args, **kwargs)

    def mark_completed(self, *, paid_at=None):
        if self.status != self.Status.COMPLETED:
            self.status = self.Status.COMPLETED
            self.paid_at = paid_at or timezone.now()
            self.save(update_fields=["status", "paid_at", "updated_at"])

    def mark_failed(self, *, reason: str = ""):
        if self.status in {self.Status.PENDING, self.Status.NOTIFIED}:
            self.status = self.Status.FAILED
            if reason:
                self.notes = f"{self.notes}\n{reason}".strip()
            self.save(update_fields=["status", "notes", "updated_at"])


class PaymentConfig(TimeStampedModel):
    """Operator switch for the monthly rent job; the newest row is authoritative."""

    is_enabled = models.BooleanField(default=True)
    start_date = models.DateField(null=True, blank=True, help_text="Do not bill before this date")
    excluded_customers = models.ManyToManyField(
        "customers.Customer",
        blank=True,
        related_name="+",
        help_text="Customers skipped by the rent job",
    )
    last_run_at = models.DateTimeField(null=True, blank=True)
    notes = models.TextField(blank=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        verbose_name = "Payment configuration"

    def __str__(self) -> str:
        state = "enabled" if self.is_enabled else "disabled"
        return f"PaymentConfig #{self.pk} • {state}"

    @classmethod
    def current(cls):
        return cls.objects.order_by("-created_at", "-id").first()

    def allows_run(self, today: _date) -> bool:
        if not self.is_enabled:
            return False
        if self.start_date and today < self.start_date:
            return False
        return True

    def excluded_customer_ids(self) -> set[int]:
        return set(self.excluded_customers.values_list("id", flat=True))
