from __future__ import annotations

from django.db import models


class Setting(models.Model):
    """Runtime-editable store setting (read through checkout.services.settings_store)."""

    key = models.CharField(max_length=120, unique=True)
    value = models.JSONField(null=True, blank=True)
    group = models.CharField(max_length=64, blank=True, default="general", db_index=True)
    description = models.CharField(max_length=255, blank=True, default="")

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["group", "key"]

    def __str__(self) -> str:
        return self.key
