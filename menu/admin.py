from django.contrib import admin

from .models import Category, Product, ProductVariation


class ProductVariationInline(admin.TabularInline):
    model = ProductVariation
    extra = 0


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ['name', 'unit', 'type', 'order_index', 'created_at']
    list_filter = ['type']
    search_fields = ['name', 'unit__slug']


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ['name', 'category', 'unit', 'price_type', 'base_price', 'is_active']
    list_filter = ['price_type', 'is_active']
    search_fields = ['name', 'description', 'unit__slug']
    inlines = [ProductVariationInline]
