"""
checkout.services.orders

Status transitions after an order exists. Every accepted move writes an
OrderStatusHistory row.

- pending moves forward only once its payment is completed; its holds are
  confirmed on the way out
- cancelling releases held stock and cancels the invoice when there is one
"""

from __future__ import annotations

import logging
from typing import Optional

from django.db import transaction

from checkout.errors import InvalidTransitionError
from checkout.models import Invoice, Order, OrderStatus, OrderStatusHistory, Payment, PaymentStatus
from checkout.services import invoices
from checkout.services.stock_reservation import reservations

log = logging.getLogger(__name__)


def _actor(user):
    return user if getattr(user, "is_authenticated", False) else None


def record_history(order: Order, status: str, changed_by=None, notes: Optional[str] = None) -> OrderStatusHistory:
    return OrderStatusHistory.objects.create(
        order=order,
        status=status,
        notes=notes,
        changed_by=_actor(changed_by),
    )


def update_status(order: Order, status: str, changed_by=None, notes: Optional[str] = None) -> Order:
    with transaction.atomic():
        order = Order.objects.select_for_update().get(pk=order.pk)
        previous = order.status
        if not order.can_transition_to(status):
            raise InvalidTransitionError(
                f"Order {order.order_number} cannot move from {previous} to {status}.",
                current_status=previous,
                requested_status=status,
            )
        leaving_pending = previous == OrderStatus.PENDING and status != OrderStatus.CANCELLED
        if leaving_pending and not Payment.objects.filter(order=order, status=PaymentStatus.COMPLETED).exists():
            raise InvalidTransitionError(
                f"Order {order.order_number} is awaiting payment and cannot move to {status}.",
                current_status=previous,
                requested_status=status,
            )

        order.status = status
        order.save(update_fields=["status", "updated_at"])
        record_history(order, status, changed_by=changed_by, notes=notes)

        if leaving_pending:
            # Held stock must not lapse once the order is in fulfilment.
            reservations.confirm_order(order)
        elif status == OrderStatus.CANCELLED:
            released = reservations.release_order(order)
            invoice = Invoice.objects.filter(order=order).first()
            if invoice is not None:
                invoices.cancel(invoice)
            log.info("Order cancelled order=%s released=%s", order.order_number, released)

    log.info("Order status changed order=%s from=%s to=%s", order.order_number, previous, status)
    return order


def cancel_order(order: Order, changed_by=None, reason: Optional[str] = None) -> Order:
    return update_status(order, OrderStatus.CANCELLED, changed_by=changed_by, notes=reason or "Order cancelled")
