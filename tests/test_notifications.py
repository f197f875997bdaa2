from datetime import date
from types import SimpleNamespace

import pytest

from notifications.models import Notification
from notifications.services import (
    EMAIL_TEMPLATES,
    GENTLE_REMINDER,
    LATE_PAYMENT_WARNING,
    EmailNotifier,
    NotificationError,
    UnknownTemplate,
    payment_context,
    render_template,
    send_payment_email,
)
from payment.models import Payment


def payment_stub(amount=5000, month=date(2025, 1, 1), due=date(2025, 1, 7)):
    return SimpleNamespace(pk=None, amount=amount, payment_for_date=month, due_date=due)


class TestTemplates:
    def test_registry_has_both_keys(self):
        assert set(EMAIL_TEMPLATES) == {GENTLE_REMINDER, LATE_PAYMENT_WARNING}

    def test_render_gentle_reminder(self):
        customer = SimpleNamespace(full_name="Asha Rao")
        rendered = render_template(GENTLE_REMINDER, payment_context(customer, payment_stub()))
        assert rendered["subject"] == "Rent Payment Reminder - Due 07 Jan 2025"
        assert "Asha Rao" in rendered["text"]
        assert "₹5,000" in rendered["html"]
        assert "January 2025" in rendered["text"]

    def test_missing_placeholders_render_empty(self):
        rendered = render_template(LATE_PAYMENT_WARNING, {})
        assert rendered["subject"] == "Late Payment Warning - Rent overdue since "

    def test_unknown_template(self):
        with pytest.raises(UnknownTemplate):
            render_template("WELCOME", {})


class TestSendPaymentEmail:
    def test_sends_text_and_html(self, mailoutbox, settings):
        settings.NOTIFICATIONS_EMAIL_FROM = "rent@example.com"
        send_payment_email(GENTLE_REMINDER, "asha@example.com", {"due_date": "07 Jan 2025"})

        [message] = mailoutbox
        assert message.to == ["asha@example.com"]
        assert message.from_email == "rent@example.com"
        assert message.subject == "Rent Payment Reminder - Due 07 Jan 2025"
        assert message.alternatives[0][1] == "text/html"

    def test_requires_recipient(self, mailoutbox):
        with pytest.raises(NotificationError):
            send_payment_email(GENTLE_REMINDER, "")
        assert mailoutbox == []

    def test_send_failure_propagates(self, monkeypatch):
        def broken(*args, **kwargs):
            raise ConnectionError("smtp down")

        monkeypatch.setattr("notifications.services.send_mail", broken)
        with pytest.raises(ConnectionError):
            send_payment_email(LATE_PAYMENT_WARNING, "asha@example.com", from_email="rent@example.com")


@pytest.mark.django_db
class TestEmailNotifier:
    def test_sends_and_records_notification(self, mailoutbox, make_customer, make_booking):
        customer = make_customer(email="asha@example.com")
        booking = make_booking(customer)
        payment = Payment.objects.create(customer=customer, booking=booking, amount=5000, payment_for_date=date(2025, 1, 1))

        notification = EmailNotifier(from_email="rent@example.com").notify(LATE_PAYMENT_WARNING, customer, payment)

        assert len(mailoutbox) == 1
        assert mailoutbox[0].subject.startswith("Late Payment Warning")
        assert notification.recipient == customer
        assert notification.payment == payment
        assert notification.event == LATE_PAYMENT_WARNING
        assert notification.level == "warning"
        assert notification.channels == ["email"]
        assert notification.payload["payment_id"] == payment.pk

    def test_disabled_customer_gets_nothing(self, mailoutbox, make_customer):
        customer = make_customer(notifications_enabled=False)

        result = EmailNotifier(from_email="rent@example.com").notify(GENTLE_REMINDER, customer, payment_stub())

        assert result is None
        assert mailoutbox == []
        assert Notification.objects.count() == 0

    def test_no_notification_row_when_send_fails(self, monkeypatch, make_customer, make_booking):
        customer = make_customer()
        payment = Payment.objects.create(
            customer=customer, booking=make_booking(customer), amount=1, payment_for_date=date(2025, 1, 1)
        )

        def broken(*args, **kwargs):
            raise OSError("down")

        monkeypatch.setattr("notifications.services.send_mail", broken)

        with pytest.raises(OSError):
            EmailNotifier(from_email="rent@example.com").notify(GENTLE_REMINDER, customer, payment)
        assert Notification.objects.count() == 0
