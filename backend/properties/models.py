from django.db import models
from django.core.validators import MinValueValidator
from django.utils import timezone


class TimeStampedModel(models.Model):
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    # Soft-delete marker; rows are never hard-deleted by billing code
    deleted_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        abstract = True

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def soft_delete(self, *, save: bool = True):
        if self.deleted_at is None:
            self.deleted_at = timezone.now()
            if save:
                self.save(update_fields=["deleted_at", "updated_at"])


class Property(TimeStampedModel):
    name = models.CharField(max_length=150)
    slug = models.SlugField(max_length=160, unique=True)
    address_line = models.CharField(max_length=400, blank=True)
    city = models.CharField(max_length=100, blank=True)
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ["name"]
        verbose_name_plural = "Properties"

    def __str__(self) -> str:
        return f"{self.name} ({self.city})" if self.city else self.name

    @property
    def food_price(self) -> int:
        """Monthly food charge from the menu, 0 when the property has none."""
        menu = getattr(self, "food_menu", None)
        if menu is None:
            return 0
        return int(menu.price or 0)


class FoodMenu(TimeStampedModel):
    property = models.OneToOneField(Property, on_delete=models.CASCADE, related_name="food_menu")
    price = models.PositiveIntegerField(default=0, help_text="Monthly food charge (INR)")
    description = models.TextField(blank=True)

    def __str__(self) -> str:
        return f"Food menu • {self.property.name} • ₹{self.price}"


class Room(TimeStampedModel):
    property = models.ForeignKey(Property, on_delete=models.CASCADE, related_name="rooms")
    number = models.CharField(max_length=20, help_text="Room number or identifier")
    monthly_rent = models.PositiveIntegerField(default=0, validators=[MinValueValidator(0)])
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ["property", "number"]
        constraints = [
            models.UniqueConstraint(fields=["property", "number"], name="uniq_room_property_number"),
        ]

    def __str__(self) -> str:
        return f"Room {self.number} - {self.property.name}"
