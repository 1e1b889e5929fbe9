from __future__ import annotations

from django.conf import settings
from django.db import models


class Address(models.Model):
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="addresses",
    )
    label = models.CharField(max_length=64, default="Delivery Address")
    street = models.CharField(max_length=255)
    suburb = models.CharField(max_length=120, blank=True, default="")
    city = models.CharField(max_length=120, blank=True, default="")
    state = models.CharField(max_length=64, blank=True, default="")
    postcode = models.CharField(max_length=16)
    country = models.CharField(max_length=2, default="AU")
    is_default = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-is_default", "-created_at"]
        verbose_name_plural = "addresses"

    def __str__(self) -> str:
        return f"{self.label}: {self.full_address}"

    @property
    def full_address(self) -> str:
        parts = [self.street]
        if self.suburb:
            parts.append(self.suburb)
        if self.city:
            parts.append(self.city)
        parts.append(f"{self.state} {self.postcode}".strip())
        parts.append(self.country)
        return ", ".join(p for p in parts if p)
