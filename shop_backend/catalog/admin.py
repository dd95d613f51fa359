# catalog/admin.py

from django.contrib import admin

from catalog.models import Product


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("name", "category", "price", "availability", "is_active", "created_at")
    list_filter = ("is_active", "availability", "category")
    search_fields = ("name", "description", "category")
    ordering = ("-created_at",)
    readonly_fields = ("created_at", "updated_at")
