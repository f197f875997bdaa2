"""In-memory fakes of the rent cycle resolver's collaborators."""
import threading
from dataclasses import dataclass, field
from datetime import date
from itertools import count
from types import SimpleNamespace
from typing import Optional

from payment.cycle import billing_month
from payment.exceptions import DuplicateObligation


@dataclass
class FakePayment:
    pk: int
    customer_id: int
    booking_id: int
    status: str
    payment_for_date: date
    due_date: Optional[date] = None
    amount: int = 0
    late_warned_at: object = None
    reminder_sent_at: object = None
    snapshot: dict = field(default_factory=dict)


class FakePaymentStore:
    """Thread-safe stand-in for PaymentStore with per-booking failure injection."""

    def __init__(self, fail_create_for=(), fail_history_for=()):
        self.rows: list[FakePayment] = []
        self.fail_create_for = set(fail_create_for)
        self.fail_history_for = set(fail_history_for)
        self.late_warned: list[int] = []
        self.reminded: list[int] = []
        self._created: list[FakePayment] = []
        self._ids = count(1)
        self._lock = threading.Lock()

    def add(self, customer_id, booking_id, status, month, **extra) -> FakePayment:
        with self._lock:
            row = FakePayment(next(self._ids), customer_id, booking_id, status, billing_month(month), **extra)
            self.rows.append(row)
            return row

    def recent_payments(self, customer_id, booking_id=None, limit=2):
        if booking_id in self.fail_history_for:
            raise ConnectionError(f"history fetch failed for booking {booking_id}")
        with self._lock:
            rows = [
                r for r in self.rows
                if r.customer_id == customer_id and (booking_id is None or r.booking_id == booking_id)
            ]
        return sorted(rows, key=lambda r: r.pk, reverse=True)[:limit]

    def create_obligation(self, *, customer, booking, month, amount, due_date, snapshot=None):
        if booking.pk in self.fail_create_for:
            raise RuntimeError(f"write failed for booking {booking.pk}")
        with self._lock:
            for r in self.rows:
                if (r.customer_id, r.booking_id, r.payment_for_date) == (customer.pk, booking.pk, month):
                    raise DuplicateObligation(customer.pk, booking.pk, month)
            row = FakePayment(
                next(self._ids), customer.pk, booking.pk, "notified", month,
                due_date=due_date, amount=amount, snapshot=snapshot or {},
            )
            self.rows.append(row)
            self._created.append(row)
            return row

    def mark_reminded(self, payment):
        self.reminded.append(payment.pk)

    def mark_late_warned(self, payment):
        self.late_warned.append(payment.pk)

    def created(self):
        return list(self._created)


class FakeCustomerStore:
    def __init__(self, customers):
        self.customers = list(customers)
        self.windows = []

    def active_customers(self, exclude_ids=(), *, month=None, due_date=None):
        self.windows.append((month, due_date))
        exclude_ids = set(exclude_ids or ())
        return [c for c in self.customers if c.status == "active" and c.pk not in exclude_ids]


class FakePropertyStore:
    def __init__(self, food_prices=None):
        self.food_prices = food_prices or {}
        self.calls: list[int] = []

    def get(self, property_id):
        self.calls.append(property_id)
        return SimpleNamespace(pk=property_id, food_price=self.food_prices.get(property_id, 0))


def fake_booking(pk, price=5000, food_included=False, property_id=1):
    return SimpleNamespace(
        pk=pk, price=price, food_included=food_included, property_id=property_id,
        room_id=pk, start_date=date(2024, 6, 1), end_date=None,
    )


def fake_customer(pk, bookings=(), status="active"):
    return SimpleNamespace(
        pk=pk, full_name=f"Customer {pk}", email=f"c{pk}@example.com",
        status=status, notifications_enabled=True, billable_bookings=list(bookings),
    )


