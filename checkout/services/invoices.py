"""
checkout.services.invoices

Invoice lifecycle for an order:
  generate_from_order → pending (idempotent, one invoice per order)
  mark_paid           → paid
  update_overdue_status → overdue once the due date has passed
  cancel              → cancelled (order cancellation)
"""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any, Dict

from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import IntegerField, Max
from django.db.models.functions import Cast, Substr
from django.utils import timezone

from checkout.models import Invoice, InvoiceStatus

log = logging.getLogger(__name__)

# Concurrent finalizations in one month can race for the same number.
NUMBERING_ATTEMPTS = 5


def next_invoice_number(issue_date=None) -> str:
    """Sequence is compared numerically so INV-202610-10000 follows -9999."""
    issue_date = issue_date or timezone.localdate()
    prefix = f"INV-{issue_date:%Y%m}-"
    last = (
        Invoice.objects
        .filter(invoice_number__startswith=prefix)
        .aggregate(last=Max(Cast(Substr("invoice_number", len(prefix) + 1), output_field=IntegerField())))
    )["last"]
    return f"{prefix}{(last or 0) + 1:04d}"


def generate_from_order(order) -> Invoice:
    existing = Invoice.objects.filter(order=order).first()
    if existing is not None:
        return existing

    issue_date = timezone.localdate()
    due_days = int(getattr(settings, "CHECKOUT_INVOICE_DUE_DAYS", 30))
    for attempt in range(1, NUMBERING_ATTEMPTS + 1):
        number = next_invoice_number(issue_date)
        try:
            with transaction.atomic():
                invoice = Invoice.objects.create(
                    order=order,
                    invoice_number=number,
                    subtotal=order.subtotal,
                    delivery_fee=order.delivery_fee,
                    discount=order.discount,
                    total=order.total,
                    currency=order.currency,
                    status=InvoiceStatus.PENDING,
                    issue_date=issue_date,
                    due_date=issue_date + timedelta(days=due_days),
                    notes=order.notes,
                )
            break
        except IntegrityError:
            existing = Invoice.objects.filter(order=order).first()
            if existing is not None:
                # Another request invoiced this order first.
                return existing
            log.warning("Invoice number taken invoice=%s order=%s attempt=%s", number, order.order_number, attempt)
            if attempt == NUMBERING_ATTEMPTS:
                raise

    log.info("Invoice generated invoice=%s order=%s total=%s", invoice.invoice_number, order.order_number, invoice.total)
    return invoice


def mark_paid(invoice: Invoice, paid_at=None) -> Invoice:
    if invoice.status != InvoiceStatus.PAID:
        invoice.status = InvoiceStatus.PAID
        invoice.paid_at = paid_at or timezone.now()
        invoice.save(update_fields=["status", "paid_at", "updated_at"])
        log.info("Invoice paid invoice=%s", invoice.invoice_number)
    return invoice


def update_overdue_status(invoice: Invoice) -> Invoice:
    if invoice.status == InvoiceStatus.PENDING and invoice.due_date < timezone.localdate():
        invoice.status = InvoiceStatus.OVERDUE
        invoice.save(update_fields=["status", "updated_at"])
        log.info("Invoice overdue invoice=%s due_date=%s", invoice.invoice_number, invoice.due_date)
    return invoice


def cancel(invoice: Invoice) -> Invoice:
    if invoice.status != InvoiceStatus.CANCELLED:
        invoice.status = InvoiceStatus.CANCELLED
        invoice.save(update_fields=["status", "updated_at"])
        log.info("Invoice cancelled invoice=%s", invoice.invoice_number)
    return invoice


def summary(invoice: Invoice) -> Dict[str, Any]:
    order = invoice.order
    user = order.user
    return {
        "invoice_number": invoice.invoice_number,
        "order_number": order.order_number,
        "customer_name": (user.get_full_name() or user.get_username()) if user else None,
        "customer_email": user.email if user else None,
        "issue_date": invoice.issue_date.isoformat(),
        "due_date": invoice.due_date.isoformat(),
        "subtotal": str(invoice.subtotal),
        "delivery_fee": str(invoice.delivery_fee),
        "discount": str(invoice.discount),
        "total": str(invoice.total),
        "currency": invoice.currency,
        "status": invoice.status,
        "paid_at": invoice.paid_at.isoformat() if invoice.paid_at else None,
        "is_overdue": invoice.is_overdue,
    }
