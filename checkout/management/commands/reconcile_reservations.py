"""
Restore stock held by reservations that outlived their expiry.

  python manage.py reconcile_reservations                 # one pass
  python manage.py reconcile_reservations --loop          # every CHECKOUT_RECONCILE_INTERVAL_SECONDS
  python manage.py reconcile_reservations --loop --interval 30
"""

import logging
import time

from django.conf import settings
from django.core.management.base import BaseCommand

from checkout.services.stock_reservation import reservations

log = logging.getLogger(__name__)


class Command(BaseCommand):
    help = "Expire lapsed stock reservations and put their stock back on sale."

    def add_arguments(self, parser):
        parser.add_argument("--loop", action="store_true", help="Keep running, one pass per interval.")
        parser.add_argument(
            "--interval",
            type=int,
            default=getattr(settings, "CHECKOUT_RECONCILE_INTERVAL_SECONDS", 60),
            help="Seconds between passes when --loop is set.",
        )

    def handle(self, *args, **opts):
        if not opts["loop"]:
            expired = reservations.reconcile_expired()
            self.stdout.write(self.style.SUCCESS(f"Expired {expired} reservation(s)."))
            return

        interval = max(1, opts["interval"])
        log.info("Reservation reconciler started interval=%s", interval)
        try:
            while True:
                expired = reservations.reconcile_expired()
                if expired:
                    self.stdout.write(f"Expired {expired} reservation(s).")
                time.sleep(interval)
        except KeyboardInterrupt:
            log.info("Reservation reconciler stopped")
