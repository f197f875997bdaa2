from django.contrib import admin
from .models import Property, FoodMenu, Room


class FoodMenuInline(admin.StackedInline):
    model = FoodMenu
    extra = 0
    fields = ("price", "description")


class RoomInline(admin.TabularInline):
    model = Room
    extra = 0
    fields = ("number", "monthly_rent", "is_active")


@admin.register(Property)
class PropertyAdmin(admin.ModelAdmin):
    list_display = ("name", "city", "food_price", "is_active", "created_at", "updated_at")
    list_filter = ("city", "is_active")
    search_fields = ("name", "slug", "city")
    prepopulated_fields = {"slug": ("name",)}
    readonly_fields = ("created_at", "updated_at")
    inlines = [FoodMenuInline, RoomInline]


@admin.register(Room)
class RoomAdmin(admin.ModelAdmin):
    list_display = ("number", "property", "monthly_rent", "is_active", "created_at")
    list_filter = ("is_active", "property")
    search_fields = ("number", "property__name")
    readonly_fields = ("created_at", "updated_at")
    autocomplete_fields = ("property",)
    list_select_related = ("property",)
