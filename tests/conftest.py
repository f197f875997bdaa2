"""
Shared fixtures: database factories for the rent cycle models and a mock
e-mail notifier. In-memory store fakes live in ``fakes.py``.
"""
from datetime import date
from itertools import count
from unittest import mock

import pytest


# =============================================================================
# DATABASE FACTORIES
# =============================================================================

_seq = count(1)


@pytest.fixture
def make_customer(db):
    from customers.models import Customer, CustomerPaymentSettings

    def _make(full_name="Asha Rao", email=None, status="active", notifications_enabled=None, excluded=None):
        n = next(_seq)
        customer = Customer.objects.create(
            full_name=full_name,
            email=email if email is not None else f"customer{n}@example.com",
            status=status,
        )
        if notifications_enabled is not None or excluded is not None:
            CustomerPaymentSettings.objects.create(
                customer=customer,
                notifications_enabled=True if notifications_enabled is None else notifications_enabled,
                excluded_from_billing=bool(excluded),
            )
        return customer

    return _make


@pytest.fixture
def make_property(db):
    from properties.models import FoodMenu, Property, Room

    def _make(name="Green View PG", food_price=None, rent=5000):
        n = next(_seq)
        prop = Property.objects.create(name=name, slug=f"property-{n}", city="Pune")
        if food_price is not None:
            FoodMenu.objects.create(property=prop, price=food_price)
        room = Room.objects.create(property=prop, number=f"{100 + n}", monthly_rent=rent)
        return prop, room

    return _make


@pytest.fixture
def make_booking(db, make_property):
    from bookings.models import Booking

    def _make(
        customer, price=5000, food_included=False, status="confirmed", food_price=None,
        start_date=date(2024, 6, 1), end_date=None,
    ):
        prop, room = make_property(food_price=food_price, rent=price)
        return Booking.objects.create(
            customer=customer,
            property=prop,
            room=room,
            price=price,
            food_included=food_included,
            status=status,
            start_date=start_date,
            end_date=end_date,
        )

    return _make


@pytest.fixture
def inline_rent_cycle(settings):
    """Run the resolver without worker threads so it shares the test transaction."""
    settings.RENT_CYCLE = {"customer_workers": 1, "booking_workers": 1, "job_max_retries": 1}
    settings.NOTIFICATIONS_EMAIL_FROM = "rent@example.com"
    return settings


@pytest.fixture
def notifier():
    n = mock.Mock(name="notifier")
    n.notify.return_value = mock.sentinel.notification
    return n
