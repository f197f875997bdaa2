"""Database-backed stores and a full resolver run against them."""
from datetime import date
from unittest import mock

import pytest

from notifications.models import Notification
from payment.config import RentCycleConfig
from payment.exceptions import DuplicateObligation
from payment.models import Payment
from payment.resolver import RentCycleResolver
from payment.stores import CustomerStore, PaymentStore, PropertyStore, booking_snapshot, food_amount

pytestmark = pytest.mark.django_db


class TestCustomerStore:
    def test_only_active_customers_with_confirmed_bookings(self, make_customer, make_booking):
        active = make_customer()
        confirmed = make_booking(active, status="confirmed")
        make_booking(active, status="pending")
        inactive = make_customer(status="inactive")
        make_booking(inactive)

        customers = CustomerStore().active_customers()

        assert customers == [active]
        assert customers[0].billable_bookings == [confirmed]

    def test_only_bookings_covering_the_billing_month(self, make_customer, make_booking):
        customer = make_customer()
        make_booking(customer, start_date=date(2024, 1, 1), end_date=date(2024, 3, 31))
        make_booking(customer, start_date=date(2025, 6, 1))
        open_ended = make_booking(customer, start_date=date(2024, 6, 1))
        ends_mid_month = make_booking(customer, start_date=date(2024, 6, 1), end_date=date(2025, 1, 20))
        starts_before_due = make_booking(customer, start_date=date(2025, 1, 5))
        make_booking(customer, start_date=date(2025, 1, 8))

        [loaded] = CustomerStore().active_customers(month=date(2025, 1, 1), due_date=date(2025, 1, 7))

        assert loaded.billable_bookings == [open_ended, ends_mid_month, starts_before_due]

    def test_exclusions(self, make_customer):
        kept = make_customer()
        excluded_by_config = make_customer()
        make_customer(excluded=True)

        customers = CustomerStore().active_customers(exclude_ids={excluded_by_config.pk})

        assert customers == [kept]


class TestPaymentStore:
    def test_recent_payments_newest_first_and_limited(self, make_customer, make_booking):
        customer = make_customer()
        booking = make_booking(customer)
        other = make_booking(customer)
        for month in (1, 2, 3):
            Payment.objects.create(customer=customer, booking=booking, amount=1, payment_for_date=date(2025, month, 1))
        Payment.objects.create(customer=customer, booking=other, amount=1, payment_for_date=date(2025, 4, 1))

        history = PaymentStore().recent_payments(customer.pk, booking.pk, limit=2)

        assert [p.payment_for_date.month for p in history] == [3, 2]

    def test_recent_payments_empty(self, make_customer):
        assert PaymentStore().recent_payments(make_customer().pk) == []

    def test_create_obligation_rejects_duplicate_month(self, make_customer, make_booking):
        customer = make_customer()
        booking = make_booking(customer)
        store = PaymentStore()
        kwargs = dict(customer=customer, booking=booking, month=date(2025, 1, 1), amount=5000, due_date=date(2025, 1, 7))

        created = store.create_obligation(**kwargs)
        with pytest.raises(DuplicateObligation):
            store.create_obligation(**kwargs)

        assert created.status == Payment.Status.NOTIFIED
        assert Payment.objects.count() == 1

    def test_mark_late_warned(self, make_customer, make_booking):
        customer = make_customer()
        payment = Payment.objects.create(
            customer=customer, booking=make_booking(customer), amount=1, payment_for_date=date(2025, 1, 1)
        )
        PaymentStore().mark_late_warned(payment)
        payment.refresh_from_db()
        assert payment.late_warned_at is not None


class TestFoodAmount:
    def test_uses_property_menu(self, make_customer, make_booking):
        booking = make_booking(make_customer(), food_included=True, food_price=1200)
        assert food_amount(booking, PropertyStore()) == 1200

    def test_zero_without_menu(self, make_customer, make_booking):
        booking = make_booking(make_customer(), food_included=True)
        assert food_amount(booking, PropertyStore()) == 0

    def test_zero_when_food_not_included(self, make_customer, make_booking):
        booking = make_booking(make_customer(), food_included=False, food_price=1200)
        assert food_amount(booking, PropertyStore()) == 0

    def test_snapshot(self, make_customer, make_booking):
        booking = make_booking(make_customer(), price=5000, food_included=True, food_price=1000)
        snap = booking_snapshot(booking, 1000)
        assert snap["price"] == 5000
        assert snap["food_amount"] == 1000
        assert snap["start_date"] == "2024-06-01"


@pytest.mark.usefixtures("inline_rent_cycle")
class TestRentCycleAgainstDatabase:
    def run(self, day):
        return RentCycleResolver(RentCycleConfig.from_settings()).run(day)

    def test_first_of_month(self, mailoutbox, make_customer, make_booking):
        customer = make_customer(email="asha@example.com")
        booking = make_booking(customer, price=5000)

        report = self.run(date(2025, 1, 1))

        payment = Payment.objects.get()
        assert payment.booking == booking
        assert payment.amount == 5000
        assert payment.status == Payment.Status.NOTIFIED
        assert payment.due_date == date(2025, 1, 7)
        assert payment.reminder_sent_at is not None
        assert [m.subject for m in mailoutbox] == ["Rent Payment Reminder - Due 07 Jan 2025"]
        assert mailoutbox[0].from_email == "rent@example.com"
        assert Notification.objects.filter(recipient=customer, payment=payment).count() == 1
        assert report.success

    def test_food_included(self, mailoutbox, make_customer, make_booking):
        make_booking(make_customer(), price=5000, food_included=True, food_price=1000)

        self.run(date(2025, 1, 1))

        assert Payment.objects.get().amount == 6000

    def test_second_run_same_day_creates_nothing(self, mailoutbox, make_customer, make_booking):
        make_booking(make_customer())

        self.run(date(2025, 1, 1))
        self.run(date(2025, 1, 1))

        assert Payment.objects.count() == 1

    def test_day_ten_late_warning(self, mailoutbox, make_customer, make_booking):
        customer = make_customer()
        booking = make_booking(customer)
        payment = Payment.objects.create(customer=customer, booking=booking, amount=5000, payment_for_date=date(2025, 1, 1))

        report = self.run(date(2025, 1, 10))

        payment.refresh_from_db()
        assert Payment.objects.count() == 1
        assert payment.status == Payment.Status.NOTIFIED
        assert payment.late_warned_at is not None
        assert [m.subject for m in mailoutbox] == ["Late Payment Warning - Rent overdue since 07 Jan 2025"]
        assert report.late_warnings == 1

    def test_inactive_customer_untouched(self, mailoutbox, make_customer, make_booking):
        make_booking(make_customer(status="inactive"))

        report = self.run(date(2025, 1, 1))

        assert Payment.objects.count() == 0
        assert mailoutbox == []
        assert report.customers == 0

    def test_ended_and_future_stays_are_not_billed(self, mailoutbox, make_customer, make_booking):
        customer = make_customer()
        make_booking(customer, start_date=date(2024, 1, 1), end_date=date(2024, 3, 31))
        make_booking(customer, start_date=date(2025, 6, 1))

        report = self.run(date(2025, 1, 1))

        assert Payment.objects.count() == 0
        assert mailoutbox == []
        assert report.bookings == 0

    def test_completed_previous_month(self, mailoutbox, make_customer, make_booking):
        customer = make_customer()
        booking = make_booking(customer)
        previous = Payment.objects.create(customer=customer, booking=booking, amount=5000, payment_for_date=date(2024, 12, 1))
        previous.mark_completed()

        self.run(date(2025, 1, 15))

        assert Payment.objects.filter(payment_for_date=date(2025, 1, 1)).count() == 1
        assert len(mailoutbox) == 1


@pytest.mark.django_db(transaction=True)
class TestPooledRentCycle:
    @pytest.fixture(autouse=True)
    def pooled(self, settings):
        settings.RENT_CYCLE = {"customer_workers": 4, "booking_workers": 2, "job_max_retries": 1}
        settings.NOTIFICATIONS_EMAIL_FROM = "rent@example.com"

    def test_sqlite_runs_on_one_thread(self, mailoutbox, make_customer, make_booking):
        for _ in range(6):
            customer = make_customer()
            make_booking(customer)
            make_booking(customer)
        resolver = RentCycleResolver(RentCycleConfig.from_settings())

        report = resolver.run(date(2025, 1, 1))

        assert (resolver.customer_workers, resolver.booking_workers) == (1, 1)
        assert report.failed == 0
        assert report.obligations_created == 12
        assert report.gentle_reminders == 12
        assert Payment.objects.count() == 12
        assert len(mailoutbox) == 12

    def test_other_databases_keep_configured_pools(self):
        resolver = RentCycleResolver(RentCycleConfig.from_settings())

        with mock.patch("payment.resolver.connection") as conn:
            conn.vendor = "postgresql"
            assert (resolver.customer_workers, resolver.booking_workers) == (4, 2)
