"""
checkout.services.settings_store

Read-through cache over the Setting table.

All settings are cached together under one key (CACHE_KEY). A write to any
Setting row invalidates that key via checkout.signals, so there are no
per-key cache entries to keep in sync.

Lookup order for get(key):
  1) Setting row (through the cache)
  2) DEFAULTS below, which point at Django settings
  3) the caller's default
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Dict

from django.conf import settings
from django.core.cache import cache

log = logging.getLogger(__name__)

CACHE_KEY = "checkout:settings:all"
CACHE_TIMEOUT = 60 * 60

_MISSING = object()


def _defaults() -> Dict[str, Any]:
    return {
        "payments.card_enabled": True,
        "payments.wallet_enabled": True,
        "payments.deferred_enabled": True,
        "payments.cod_enabled": True,
        "payments.cod_max_amount": str(getattr(settings, "COD_MAX_AMOUNT", "500.00")),
        "checkout.currency": getattr(settings, "CHECKOUT_CURRENCY", "AUD"),
        "checkout.reservation_minutes": getattr(settings, "CHECKOUT_RESERVATION_MINUTES", 15),
    }


def all_settings() -> Dict[str, Any]:
    data = cache.get(CACHE_KEY)
    if data is None:
        from checkout.models import Setting

        data = {row.key: row.value for row in Setting.objects.all()}
        cache.set(CACHE_KEY, data, timeout=CACHE_TIMEOUT)
        log.debug("Settings cache rebuilt keys=%s", len(data))
    return data


def get(key: str, default: Any = None) -> Any:
    value = all_settings().get(key, _MISSING)
    if value is not _MISSING:
        return value
    return _defaults().get(key, default)


def get_bool(key: str, default: bool = False) -> bool:
    value = get(key, default)
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def get_decimal(key: str, default: Any = "0") -> Decimal:
    value = get(key, default)
    return Decimal(str(value))


def set_value(key: str, value: Any, group: str = "general"):
    from checkout.models import Setting

    obj, _ = Setting.objects.update_or_create(key=key, defaults={"value": value, "group": group})
    return obj


def invalidate() -> None:
    cache.delete(CACHE_KEY)
