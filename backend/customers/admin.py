from django.contrib import admin
from .models import Customer, CustomerPaymentSettings


class CustomerPaymentSettingsInline(admin.StackedInline):
    model = CustomerPaymentSettings
    extra = 0
    fields = ("notifications_enabled", "excluded_from_billing", "notes")


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = ("full_name", "email", "phone", "status", "created_at")
    list_filter = ("status",)
    search_fields = ("full_name", "email", "phone")
    readonly_fields = ("created_at", "updated_at", "deleted_at")
    inlines = [CustomerPaymentSettingsInline]
    actions = ["activate_customers", "deactivate_customers"]

    @admin.action(description="Mark selected customers active")
    def activate_customers(self, request, queryset):
        queryset.update(status=Customer.Status.ACTIVE)

    @admin.action(description="Mark selected customers inactive")
    def deactivate_customers(self, request, queryset):
        queryset.update(status=Customer.Status.INACTIVE)
