from django.db import models
from django.core.validators import RegexValidator

from properties.models import TimeStampedModel


class CustomerQuerySet(models.QuerySet):
    def active(self):
        return self.filter(status=Customer.Status.ACTIVE, deleted_at__isnull=True)


class Customer(TimeStampedModel):
    class Status(models.TextChoices):
        ACTIVE = "active", "Active"
        INACTIVE = "inactive", "Inactive"

    full_name = models.CharField(max_length=200)
    email = models.EmailField(blank=True, default="")
    phone = models.CharField(
        max_length=15,
        blank=True,
        validators=[RegexValidator(regex=r"^\d{10}$", message="Phone number must be 10 digits")],
    )
    status = models.CharField(max_length=10, choices=Status.choices, default=Status.ACTIVE, db_index=True)

    objects = CustomerQuerySet.as_manager()

    class Meta:
        ordering = ["full_name", "id"]
        indexes = [
            models.Index(fields=["email"], name="idx_customer_email"),
            models.Index(fields=["status", "full_name"], name="idx_customer_status_name"),
        ]

    def __str__(self) -> str:
        return f"{self.full_name} <{self.email}>" if self.email else self.full_name

    def save(self, *args, **kwargs):
        # Normalize name: trim and collapse whitespace
        if isinstance(self.full_name, str):
            self.full_name = " ".join(self.full_name.split())
        if isinstance(self.email, str):
            self.email = self.email.strip().lower()
        super().save(*args, **kwargs)

    @property
    def is_active(self) -> bool:
        return self.status == self.Status.ACTIVE

    @property
    def notifications_enabled(self) -> bool:
        settings_obj = getattr(self, "payment_settings", None)
        if settings_obj is None:
            return True
        return settings_obj.notifications_enabled

    @property
    def excluded_from_billing(self) -> bool:
        settings_obj = getattr(self, "payment_settings", None)
        if settings_obj is None:
            return False
        return settings_obj.excluded_from_billing


class CustomerPaymentSettings(TimeStampedModel):
    """Per-customer overrides for the monthly rent job."""

    customer = models.OneToOneField(Customer, on_delete=models.CASCADE, related_name="payment_settings")
    notifications_enabled = models.BooleanField(default=True, help_text="Send rent reminder e-mails")
    excluded_from_billing = models.BooleanField(default=False, help_text="Skip this customer in the rent job")
    notes = models.TextField(blank=True)

    class Meta:
        verbose_name_plural = "Customer payment settings"

    def __str__(self) -> str:
        return f"Payment settings • {self.customer}"
