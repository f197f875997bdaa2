from django.contrib import admin
from .models import Notification


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ("id", "event", "recipient", "payment", "level", "unread", "created_at")
    list_filter = ("event", "level", "unread", "created_at")
    search_fields = ("event", "title", "message", "recipient__email", "recipient__full_name")
    autocomplete_fields = ("recipient", "payment")
    ordering = ("-created_at",)
    date_hierarchy = "created_at"
    readonly_fields = ("created_at",)
    list_select_related = ("recipient", "payment")
