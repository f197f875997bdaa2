from __future__ import annotations
import logging
from django.conf import settings
from django.core.mail import send_mail
from django.utils import timezone

from .models import Notification

logger = logging.getLogger(__name__)

GENTLE_REMINDER = "GENTLE_REMINDER"
LATE_PAYMENT_WARNING = "LATE_PAYMENT_WARNING"


class NotificationError(Exception):
    """An e-mail could not be dispatched."""


class UnknownTemplate(NotificationError):
    pass


# ---- Template registry ----
# subject/text/html use str.format() with keys from the dispatch context
EMAIL_TEMPLATES: dict[str, dict] = {
    GENTLE_REMINDER: {
        "subject": "Rent Payment Reminder - Due {due_date}",
        "text": (
            "Hi {customer_name},\n\n"
            "This is a friendly reminder that your rent of ₹{amount} for {month} "
            "is due on {due_date}.\n"
            "Please complete the payment from your dashboard before the due date.\n\n"
            "Thank you,\n{sender_name}"
        ),
        "html": (
            "<p>Hi {customer_name},</p>"
            "<p>This is a friendly reminder that your rent of <strong>₹{amount}</strong> for {month} "
            "is due on <strong>{due_date}</strong>.</p>"
            "<p>Please complete the payment from your dashboard before the due date.</p>"
            "<p>Thank you,<br>{sender_name}</p>"
        ),
        "title": "Rent due soon",
        "level": "info",
    },
    LATE_PAYMENT_WARNING: {
        "subject": "Late Payment Warning - Rent overdue since {due_date}",
        "text": (
            "Hi {customer_name},\n\n"
            "Your rent of ₹{amount} for {month} was due on {due_date} and has not been received yet.\n"
            "Please pay as soon as possible to avoid late fees.\n\n"
            "If you have already paid, please ignore this message.\n\n"
            "{sender_name}"
        ),
        "html": (
            "<p>Hi {customer_name},</p>"
            "<p>Your rent of <strong>₹{amount}</strong> for {month} was due on "
            "<strong>{due_date}</strong> and has not been received yet.</p>"
            "<p>Please pay as soon as possible to avoid late fees.</p>"
            "<p>If you have already paid, please ignore this message.</p>"
            "<p>{sender_name}</p>"
        ),
        "title": "Rent overdue",
        "level": "warning",
    },
}


class _SafeDict(dict):
    def __missing__(self, key):
        return ""


def render_template(template_key: str, context: dict | None = None) -> dict[str, str]:
    tpl = EMAIL_TEMPLATES.get(template_key)
    if tpl is None:
        raise UnknownTemplate(f"Unknown e-mail template: {template_key}")
    ctx = _SafeDict(sender_name=getattr(settings, "NOTIFICATIONS_SENDER_NAME", "PG Management"))
    ctx.update(context or {})
    return {key: str(tpl.get(key, "")).format_map(ctx) for key in ("subject", "text", "html", "title")}


def payment_context(customer, payment) -> dict:
    return {
        "customer_name": getattr(customer, "full_name", "") or "there",
        "amount": f"{int(payment.amount):,}",
        "month": payment.payment_for_date.strftime("%B %Y"),
        "due_date": payment.due_date.strftime("%d %b %Y"),
    }


def send_payment_email(
    template_key: str,
    recipient: str,
    context: dict | None = None,
    *,
    from_email: str | None = None,
) -> dict[str, str]:
    """Send one fixed-template e-mail. Failures propagate to the caller; no retry here."""
    if not recipient:
        raise NotificationError(f"No recipient address for {template_key}")
    rendered = render_template(template_key, context)
    from_email = from_email or getattr(settings, "NOTIFICATIONS_EMAIL_FROM", getattr(settings, "DEFAULT_FROM_EMAIL", None))
    if not from_email:
        raise NotificationError("Email FROM not configured; set NOTIFICATIONS_EMAIL_FROM or DEFAULT_FROM_EMAIL")

    try:
        send_mail(
            rendered["subject"],
            rendered["text"],
            from_email,
            [recipient],
            html_message=rendered["html"],
            fail_silently=False,
        )
    except Exception as e:
        logger.exception("Failed to send %s email to %s: %s", template_key, recipient, e)
        raise
    logger.info("Sent %s email to %s", template_key, recipient)
    return rendered


class EmailNotifier:
    """Dispatches rent e-mails to customers and records them as in-app notifications."""

    def __init__(self, from_email: str | None = None):
        self.from_email = from_email

    def notify(self, template_key: str, customer, payment) -> Notification | None:
        if not customer.notifications_enabled:
            logger.info("Notifications disabled for customer %s; skipping %s", customer.pk, template_key)
            return None
        context = payment_context(customer, payment)
        rendered = send_payment_email(template_key, customer.email, context, from_email=self.from_email)
        tpl = EMAIL_TEMPLATES[template_key]
        return Notification.objects.create(
            recipient=customer,
            event=template_key,
            title=rendered["title"],
            message=rendered["text"],
            level=tpl.get("level") or "info",
            payment=payment if getattr(payment, "pk", None) else None,
            channels=["email"],
            payload={**context, "payment_id": getattr(payment, "pk", None)},
            unread=True,
            created_at=timezone.now(),
        )
