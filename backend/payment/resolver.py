"""Monthly rent cycle resolver.

For every active customer and each of their confirmed bookings, reads the
newest payments, decides via :mod:`payment.cycle` and applies the resulting
actions: create the month's obligation and/or send a reminder e-mail.

Customers are processed on a bounded thread pool and the bookings of one
customer on a second, smaller one. Every task is settled: a failure is logged
and recorded in the report, it never cancels sibling tasks.
"""
from __future__ import annotations
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import date as _date
from typing import Any, Callable, Iterable, Optional

from django.db import connection, connections
from django.utils import timezone

from notifications.services import EmailNotifier, GENTLE_REMINDER, LATE_PAYMENT_WARNING
from .config import RentCycleConfig
from .cycle import Action, CycleState, billing_month, decide, due_date_for
from .exceptions import BookingFailed, CustomerFetchError, DuplicateObligation
from .stores import CustomerStore, PaymentStore, PropertyStore, booking_snapshot, food_amount

logger = logging.getLogger(__name__)

EMAIL_ACTIONS = {
    Action.GENTLE_REMINDER: GENTLE_REMINDER,
    Action.LATE_WARNING: LATE_PAYMENT_WARNING,
}


# ---- Bounded all-settled execution ----

@dataclass(frozen=True)
class Settled:
    item: Any
    value: Any = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _settle_one(fn: Callable, item) -> Settled:
    try:
        return Settled(item, fn(item))
    except Exception as exc:
        return Settled(item, error=exc)


def _in_worker(fn: Callable, item):
    try:
        return fn(item)
    finally:
        # Worker threads own their DB connections
        connections.close_all()


def settle_all(fn: Callable, items: Iterable, max_workers: int = 1) -> list[Settled]:
    """Run `fn` over `items` with at most `max_workers` in flight; wait for all, keep order."""
    items = list(items)
    if max_workers <= 1 or len(items) <= 1:
        return [_settle_one(fn, item) for item in items]

    results: list[Settled] = []
    with ThreadPoolExecutor(max_workers=min(max_workers, len(items)), thread_name_prefix="rent-cycle") as executor:
        futures = [(item, executor.submit(_in_worker, fn, item)) for item in items]
        for item, future in futures:
            try:
                results.append(Settled(item, future.result()))
            except Exception as exc:
                results.append(Settled(item, error=exc))
    return results


# ---- Outcomes ----

@dataclass
class BookingOutcome:
    customer_id: int
    booking_id: int
    state: Optional[CycleState] = None
    actions: list[Action] = field(default_factory=list)
    payment_id: Optional[int] = None
    skipped: bool = False
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class CycleReport:
    run_date: _date
    dry_run: bool = False
    customers: int = 0
    bookings: int = 0
    succeeded: int = 0
    failed: int = 0
    skipped: int = 0
    obligations_created: int = 0
    gentle_reminders: int = 0
    late_warnings: int = 0
    failures: list[dict] = field(default_factory=list)

    def add(self, outcome: BookingOutcome) -> None:
        self.bookings += 1
        if outcome.skipped:
            self.skipped += 1
        if outcome.ok:
            self.succeeded += 1
        else:
            self.failed += 1
            self.failures.append({
                "customer_id": outcome.customer_id,
                "booking_id": outcome.booking_id,
                "error": outcome.error,
            })
        for action in outcome.actions:
            if action is Action.CREATE_OBLIGATION:
                self.obligations_created += 1
            elif action is Action.GENTLE_REMINDER:
                self.gentle_reminders += 1
            elif action is Action.LATE_WARNING:
                self.late_warnings += 1

    def add_customer_failure(self, customer_id, error: BaseException) -> None:
        self.failed += 1
        self.failures.append({"customer_id": customer_id, "booking_id": None, "error": str(error)})

    @property
    def success(self) -> bool:
        return self.failed == 0

    def as_dict(self) -> dict:
        return {
            "run_date": self.run_date.isoformat(),
            "dry_run": self.dry_run,
            "customers": self.customers,
            "bookings": self.bookings,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "skipped": self.skipped,
            "obligations_created": self.obligations_created,
            "gentle_reminders": self.gentle_reminders,
            "late_warnings": self.late_warnings,
            "failures": list(self.failures),
        }


# ---- Resolver ----

class RentCycleResolver:
    def __init__(
        self,
        config: RentCycleConfig | None = None,
        *,
        customers: CustomerStore | None = None,
        payments: PaymentStore | None = None,
        properties: PropertyStore | None = None,
        notifier: EmailNotifier | None = None,
        clock: Callable[[], _date] | None = None,
    ):
        self.config = config or RentCycleConfig.from_settings()
        self.customers = customers or CustomerStore()
        self.payments = payments or PaymentStore()
        self.properties = properties or PropertyStore()
        self.notifier = notifier or EmailNotifier(from_email=self.config.from_email)
        self.clock = clock or timezone.localdate

    def _pool_size(self, workers: int) -> int:
        # SQLite allows a single writer; ORM-backed runs stay on one thread there
        if workers > 1 and isinstance(self.payments, PaymentStore) and connection.vendor == "sqlite":
            return 1
        return workers

    @property
    def customer_workers(self) -> int:
        return self._pool_size(self.config.customer_workers)

    @property
    def booking_workers(self) -> int:
        return self._pool_size(self.config.booking_workers)

    def run(self, today: _date | None = None, *, exclude_customer_ids: Iterable[int] = (), dry_run: bool = False) -> CycleReport:
        today = today or self.clock()
        month = billing_month(today)
        try:
            customers = self.customers.active_customers(
                exclude_ids=exclude_customer_ids,
                month=month,
                due_date=due_date_for(month, self.config.due_day),
            )
        except Exception as exc:
            logger.exception("Failed to load active customers for rent cycle %s", today)
            raise CustomerFetchError(str(exc)) from exc

        report = CycleReport(run_date=today, dry_run=dry_run, customers=len(customers))
        settled = settle_all(
            lambda customer: self.process_customer(customer, today, dry_run=dry_run),
            customers,
            self.customer_workers,
        )
        for result in settled:
            if result.ok:
                for outcome in result.value:
                    report.add(outcome)
            else:
                logger.error("Rent cycle failed for customer %s: %s", result.item.pk, result.error, exc_info=result.error)
                report.add_customer_failure(result.item.pk, result.error)

        logger.info(
            "Rent cycle %s%s: customers=%s bookings=%s succeeded=%s failed=%s created=%s gentle=%s late=%s",
            today, " (dry run)" if dry_run else "", report.customers, report.bookings, report.succeeded,
            report.failed, report.obligations_created, report.gentle_reminders, report.late_warnings,
        )
        return report

    def process_customer(self, customer, today: _date, *, dry_run: bool = False) -> list[BookingOutcome]:
        bookings = list(getattr(customer, "billable_bookings", None) or [])
        settled = settle_all(
            lambda booking: self.process_booking(customer, booking, today, dry_run=dry_run),
            bookings,
            self.booking_workers,
        )
        outcomes: list[BookingOutcome] = []
        for result in settled:
            if result.ok:
                outcomes.append(result.value)
                continue
            error = result.error
            logger.error(
                "Rent cycle failed for customer %s booking %s: %s",
                customer.pk, result.item.pk, error, exc_info=error,
            )
            if isinstance(error, BookingFailed):
                outcome = error.outcome
                outcome.error = str(error.cause)
            else:
                outcome = BookingOutcome(customer.pk, result.item.pk, error=str(error))
            outcomes.append(outcome)
        return outcomes

    def process_booking(self, customer, booking, today: _date, *, dry_run: bool = False) -> BookingOutcome:
        """Decide and apply this booking's actions for `today`. Raises on fetch/write/e-mail failure."""
        history = self.payments.recent_payments(customer.pk, booking.pk, limit=self.config.history_limit)
        last = history[0] if history else None
        step = decide(last, today, self.config.due_day)
        outcome = BookingOutcome(customer.pk, booking.pk, state=step.state)

        if dry_run:
            outcome.actions = list(step.actions)
            return outcome
        if not step.actions:
            return outcome

        target = last
        try:
            if step.creates_obligation:
                try:
                    target = self.create_obligation(customer, booking, today)
                except DuplicateObligation as exc:
                    logger.info("%s; skipping", exc)
                    outcome.skipped = True
                    return outcome
                outcome.actions.append(Action.CREATE_OBLIGATION)
                outcome.payment_id = target.pk

            for action in step.actions:
                template_key = EMAIL_ACTIONS.get(action)
                if template_key is None:
                    continue
                sent = self.notifier.notify(template_key, customer, target)
                if action is Action.LATE_WARNING:
                    self.payments.mark_late_warned(target)
                if sent is not None:
                    if action is Action.GENTLE_REMINDER:
                        self.payments.mark_reminded(target)
                    outcome.actions.append(action)
        except Exception as exc:
            raise BookingFailed(outcome, exc) from exc
        return outcome

    def create_obligation(self, customer, booking, today: _date):
        month = billing_month(today)
        food = food_amount(booking, self.properties)
        return self.payments.create_obligation(
            customer=customer,
            booking=booking,
            month=month,
            amount=int(booking.price or 0) + food,
            due_date=due_date_for(month, self.config.due_day),
            snapshot=booking_snapshot(booking, food),
        )
