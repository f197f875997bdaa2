from django.contrib import admin, messages
from .models import Payment, PaymentConfig


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = (
        "id", "customer", "booking", "billing_period", "amount", "due_date", "status",
        "reminder_sent_at", "late_warned_at", "paid_at",
    )
    list_filter = ("status", "payment_for_date", ("late_warned_at", admin.EmptyFieldListFilter))
    search_fields = ("id", "customer__full_name", "customer__email", "customer__phone")
    date_hierarchy = "payment_for_date"
    autocomplete_fields = ("customer", "booking")
    readonly_fields = ("booking_snapshot", "reminder_sent_at", "late_warned_at", "created_at", "updated_at")
    list_select_related = ("customer", "booking")
    actions = ["mark_completed", "mark_failed"]

    @admin.display(description="Month", ordering="payment_for_date")
    def billing_period(self, obj: Payment):
        return obj.billing_period

    @admin.action(description="Mark selected payments as completed")
    def mark_completed(self, request, queryset):
        updated = 0
        for payment in queryset.exclude(status=Payment.Status.COMPLETED):
            payment.mark_completed()
            updated += 1
        self.message_user(request, f"{updated} payment(s) marked as completed.", messages.SUCCESS)

    @admin.action(description="Mark selected payments as failed")
    def mark_failed(self, request, queryset):
        updated = 0
        for payment in queryset.filter(status__in=[Payment.Status.PENDING, Payment.Status.NOTIFIED]):
            payment.mark_failed(reason=f"Marked failed by {request.user}")
            updated += 1
        self.message_user(request, f"{updated} payment(s) marked as failed.", messages.WARNING)


@admin.register(PaymentConfig)
class PaymentConfigAdmin(admin.ModelAdmin):
    list_display = ("id", "is_enabled", "start_date", "last_run_at", "created_at")
    list_filter = ("is_enabled",)
    filter_horizontal = ("excluded_customers",)
    readonly_fields = ("last_run_at", "created_at", "updated_at")
