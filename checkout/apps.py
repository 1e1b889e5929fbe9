from django.apps import AppConfig


class CheckoutConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "checkout"
    verbose_name = "Checkout"  # Admin section name

    def ready(self):
        # Settings-store cache invalidation hooks.
        from . import signals  # noqa: F401
