from django.contrib import admin
from payment.models import Payment
from .models import Booking


class PaymentInline(admin.TabularInline):
    model = Payment
    extra = 0
    fields = ("payment_for_date", "amount", "status", "due_date", "paid_at")
    readonly_fields = ("payment_for_date", "amount", "due_date", "paid_at")
    ordering = ("-payment_for_date",)
    can_delete = False


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "customer",
        "status",
        "property",
        "room",
        "price",
        "food_included",
        "start_date",
        "end_date",
        "created_at",
    )
    list_filter = ("status", "food_included", "property")
    search_fields = ("customer__full_name", "customer__email", "property__name", "room__number")
    date_hierarchy = "start_date"
    autocomplete_fields = ("customer", "property", "room")
    list_select_related = ("customer", "property", "room")
    readonly_fields = ("created_at", "updated_at", "deleted_at")
    inlines = [PaymentInline]

    def get_readonly_fields(self, request, obj=None):
        # Pricing snapshot is frozen after creation
        if obj is not None:
            return self.readonly_fields + ("customer", "property", "room", "price", "food_included", "start_date")
        return self.readonly_fields
