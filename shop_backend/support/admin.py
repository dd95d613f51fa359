# support/admin.py

from django.contrib import admin

from support.models import Message


@admin.register(Message)
class MessageAdmin(admin.ModelAdmin):
    list_display = ("sender_email", "subject", "status", "priority", "is_from_customer", "created_at")
    list_filter = ("status", "priority", "is_from_customer")
    search_fields = ("sender_email", "sender_name", "subject", "content")
    raw_id_fields = ("thread", "order", "user", "assigned_to")
    readonly_fields = ("created_at", "updated_at", "read_at")
