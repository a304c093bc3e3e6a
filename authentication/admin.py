from django.contrib import admin
from .models import CustomUser, Restaurant, Unit


@admin.register(CustomUser)
class CustomUserAdmin(admin.ModelAdmin):
    list_display = ['email', 'first_name', 'last_name', 'is_active', 'is_staff', 'date_joined']
    list_filter = ['is_active', 'is_staff']
    search_fields = ['email', 'first_name', 'last_name']
    ordering = ['email']
    exclude = ['password']


class UnitInline(admin.TabularInline):
    model = Unit
    extra = 0
    fields = ['name', 'slug', 'address', 'whatsapp']


@admin.register(Restaurant)
class RestaurantAdmin(admin.ModelAdmin):
    list_display = ['name', 'owner', 'plan', 'niche', 'created_at']
    list_filter = ['plan', 'niche']
    search_fields = ['name', 'owner__email']
    inlines = [UnitInline]


@admin.register(Unit)
class UnitAdmin(admin.ModelAdmin):
    list_display = ['name', 'slug', 'restaurant', 'city', 'created_at']
    search_fields = ['name', 'slug', 'restaurant__name']
    ordering = ['created_at']
