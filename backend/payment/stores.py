"""Database access used by the rent cycle resolver.

Each store wraps one collaborator of the resolver (customers, payments,
properties) so the resolver can be exercised with in-memory fakes.
"""
from __future__ import annotations
import logging
from datetime import date as _date
from typing import Iterable

from django.db import IntegrityError, transaction
from django.db.models import Prefetch, Q
from django.utils import timezone

from bookings.models import Booking
from customers.models import Customer
from properties.models import Property
from .exceptions import DuplicateObligation
from .models import Payment

logger = logging.getLogger(__name__)


class CustomerStore:
    def active_customers(
        self,
        exclude_ids: Iterable[int] = (),
        *,
        month: _date | None = None,
        due_date: _date | None = None,
    ) -> list[Customer]:
        """Active customers with their confirmed bookings prefetched as `billable_bookings`.

        With `month` and `due_date` given, only bookings whose stay covers that
        billing month are kept: started on or before the due date and not ended
        before the month began.
        """
        bookings_qs = Booking.objects.filter(status=Booking.Status.CONFIRMED, deleted_at__isnull=True)
        if due_date is not None:
            bookings_qs = bookings_qs.filter(start_date__lte=due_date)
        if month is not None:
            bookings_qs = bookings_qs.filter(Q(end_date__isnull=True) | Q(end_date__gte=month))
        bookings_qs = bookings_qs.select_related("property", "room").order_by("id")
        qs = (
            Customer.objects.active()
            .select_related("payment_settings")
            .prefetch_related(Prefetch("bookings", queryset=bookings_qs, to_attr="billable_bookings"))
            .order_by("id")
        )
        exclude_ids = set(exclude_ids or ())
        if exclude_ids:
            qs = qs.exclude(id__in=exclude_ids)
        customers = [c for c in qs if not c.excluded_from_billing]
        logger.debug("Loaded %s active customer(s) for billing", len(customers))
        return customers


class PaymentStore:
    def recent_payments(self, customer_id: int, booking_id: int | None = None, limit: int = 2) -> list[Payment]:
        """Newest payments of a customer (optionally one booking), newest first."""
        qs = Payment.objects.for_customer(customer_id, booking_id).newest_first()
        return list(qs[:limit])

    def create_obligation(
        self,
        *,
        customer: Customer,
        booking: Booking,
        month: _date,
        amount: int,
        due_date: _date,
        snapshot: dict | None = None,
    ) -> Payment:
        """Insert one `notified` payment; a second one for the same month raises DuplicateObligation."""
        try:
            with transaction.atomic():
                payment = Payment.objects.create(
                    customer=customer,
                    booking=booking,
                    amount=int(amount),
                    payment_for_date=month,
                    due_date=due_date,
                    status=Payment.Status.NOTIFIED,
                    booking_snapshot=snapshot or {},
                    notes=f"Monthly rent for {month:%Y-%m}",
                )
        except IntegrityError as exc:
            raise DuplicateObligation(customer.pk, booking.pk, month) from exc
        logger.info(
            "Created payment %s for customer %s booking %s (%s, ₹%s, due %s)",
            payment.pk, customer.pk, booking.pk, month.strftime("%Y-%m"), payment.amount, due_date,
        )
        return payment

    def mark_reminded(self, payment: Payment) -> None:
        now = timezone.now()
        Payment.objects.filter(pk=payment.pk).update(reminder_sent_at=now, updated_at=now)
        payment.reminder_sent_at = now

    def mark_late_warned(self, payment: Payment) -> None:
        now = timezone.now()
        Payment.objects.filter(pk=payment.pk).update(late_warned_at=now, updated_at=now)
        payment.late_warned_at = now


class PropertyStore:
    def get(self, property_id: int) -> Property:
        return Property.objects.select_related("food_menu").get(pk=property_id)


def food_amount(booking, properties: PropertyStore) -> int:
    """Monthly food charge of a booking; 0 unless the booking includes food."""
    if not booking.food_included:
        return 0
    prop = properties.get(booking.property_id)
    return int(prop.food_price or 0)


def booking_snapshot(booking, food: int) -> dict:
    return {
        "property": booking.property_id,
        "room": booking.room_id,
        "price": int(booking.price or 0),
        "food_included": bool(booking.food_included),
        "food_amount": int(food),
        "start_date": booking.start_date.isoformat() if booking.start_date else None,
        "end_date": booking.end_date.isoformat() if booking.end_date else None,
    }
