# production/admin.py

from django.contrib import admin

from production.models import Material, Printer, ProductionQueueItem


@admin.register(Printer)
class PrinterAdmin(admin.ModelAdmin):
    list_display = ("name", "model", "status", "updated_at")
    list_filter = ("status",)
    search_fields = ("name", "model")


@admin.register(Material)
class MaterialAdmin(admin.ModelAdmin):
    list_display = ("name", "type", "color", "quantity_available", "quantity_unit", "is_active")
    list_filter = ("type", "is_active")
    search_fields = ("name", "color")


@admin.register(ProductionQueueItem)
class ProductionQueueItemAdmin(admin.ModelAdmin):
    list_display = ("order", "order_item_index", "status", "priority", "printer", "assigned_to")
    list_filter = ("status", "printer")
    search_fields = ("order__order_no", "notes")
    readonly_fields = ("order", "order_item_index", "started_at", "completed_at", "created_at")
