from django.db import models
from django.utils import timezone


class Notification(models.Model):
    LEVEL_CHOICES = (
        ("info", "Info"),
        ("success", "Success"),
        ("warning", "Warning"),
        ("error", "Error"),
    )

    # Who receives this notification
    recipient = models.ForeignKey(
        "customers.Customer",
        on_delete=models.CASCADE,
        related_name="notifications",
        help_text="Customer this notification was delivered to",
    )

    # Template key: e.g., GENTLE_REMINDER, LATE_PAYMENT_WARNING
    event = models.CharField(max_length=100, db_index=True)

    title = models.CharField(max_length=200, blank=True)
    message = models.TextField(blank=True)

    level = models.CharField(max_length=10, choices=LEVEL_CHOICES, default="info")

    # Payment the notification is about (optional)
    payment = models.ForeignKey(
        "payment.Payment",
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="notifications",
    )

    # Delivery and extra data
    channels = models.JSONField(default=list, blank=True, help_text='e.g., ["email"]')
    payload = models.JSONField(default=dict, blank=True)

    # Read state; notifications_purge keeps unread rows by default
    unread = models.BooleanField(default=True, db_index=True)

    created_at = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["recipient", "unread", "-created_at"], name="notif_rec_unread_idx"),
            models.Index(fields=["event", "-created_at"], name="notif_event_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.event} -> {self.recipient_id} ({'unread' if self.unread else 'read'})"
