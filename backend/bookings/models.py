from django.db import models
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator

from properties.models import TimeStampedModel, Property, Room
from customers.models import Customer


class Booking(TimeStampedModel):
    """
    A customer's stay in a room of a property, billed monthly.
    Pricing fields are a snapshot taken at booking time; after creation only
    `status` may change, following the transitions in ALLOWED_TRANSITIONS.
    """

    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        CONFIRMED = "confirmed", "Confirmed"
        CANCELLED = "cancelled", "Cancelled"
        COMPLETED = "completed", "Completed"

    ALLOWED_TRANSITIONS = {
        "pending": {"confirmed", "cancelled"},
        "confirmed": {"cancelled", "completed"},
        "cancelled": set(),
        "completed": set(),
    }

    # Fields frozen once the booking exists
    IMMUTABLE_FIELDS = ("customer_id", "property_id", "room_id", "price", "food_included", "start_date")

    customer = models.ForeignKey(Customer, on_delete=models.PROTECT, related_name="bookings")
    property = models.ForeignKey(Property, on_delete=models.PROTECT, related_name="bookings")
    room = models.ForeignKey(Room, on_delete=models.PROTECT, related_name="bookings")

    status = models.CharField(max_length=12, choices=Status.choices, default=Status.PENDING)

    start_date = models.DateField()
    end_date = models.DateField(blank=True, null=True)

    # Monthly rent in whole rupees; defaults from the room when left at 0
    price = models.PositiveIntegerField(default=0, validators=[MinValueValidator(0)])
    food_included = models.BooleanField(default=False)
    notes = models.TextField(blank=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["customer", "status"], name="idx_booking_customer_status"),
            models.Index(fields=["property"], name="idx_booking_property"),
            models.Index(fields=["start_date"], name="idx_booking_start_date"),
        ]

    def __str__(self) -> str:
        return f"Booking: {self.customer.full_name} -> {self.property.name} / Room {self.room.number} ({self.status})"

    def clean(self):
        super().clean()

        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValidationError({"end_date": "End date cannot be before start date."})

        if self.room_id and self.property_id and self.room.property_id != self.property_id:
            raise ValidationError({"room": "Selected room does not belong to the selected property."})

        if not self.pk:
            if self.status not in {self.Status.PENDING, self.Status.CONFIRMED}:
                raise ValidationError({"status": "A booking can only be created as Pending or Confirmed."})
            return

        try:
            current = Booking.objects.get(pk=self.pk)
        except Booking.DoesNotExist:
            return

        changed = [f for f in self.IMMUTABLE_FIELDS if getattr(current, f) != getattr(self, f)]
        if changed:
            raise ValidationError({f.removesuffix("_id"): "This field cannot be changed once the booking exists." for f in changed})

        if current.status != self.status and self.status not in self.ALLOWED_TRANSITIONS.get(current.status, set()):
            raise ValidationError(
                {"status": f"Cannot change status from {current.get_status_display()} to {self.get_status_display()}."}
            )

    def save(self, *args, **kwargs):
        # Default pricing snapshot from the room if not provided
        if not self.pk and self.room_id and (self.price or 0) <= 0:
            self.price = self.room.monthly_rent or 0
        self.full_clean()
        return super().save(*args, **kwargs)

    def transition_to(self, status: str):
        self.status = status
        self.save(update_fields=["status", "updated_at"])
