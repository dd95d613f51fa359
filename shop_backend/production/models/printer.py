# production/models/printer.py

import uuid

from django.db import models


class Printer(models.Model):
    STATUS_AVAILABLE = "available"
    STATUS_BUSY = "busy"
    STATUS_MAINTENANCE = "maintenance"
    STATUS_OFFLINE = "offline"

    STATUS_CHOICES = [
        (STATUS_AVAILABLE, "Available"),
        (STATUS_BUSY, "Busy"),
        (STATUS_MAINTENANCE, "Maintenance"),
        (STATUS_OFFLINE, "Offline"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    name = models.CharField(max_length=120, unique=True)
    model = models.CharField(max_length=120, blank=True, default="")
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_AVAILABLE)
    notes = models.TextField(blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return f"{self.name} ({self.status})"
