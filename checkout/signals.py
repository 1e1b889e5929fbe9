"""
checkout.signals

Any write to a Setting row drops the settings-store cache entry so the next
read rebuilds it from the database.
"""

from __future__ import annotations

from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from checkout.models import Setting
from checkout.services import settings_store


@receiver(post_save, sender=Setting)
@receiver(post_delete, sender=Setting)
def invalidate_settings_cache(sender, **kwargs):
    settings_store.invalidate()
