"""Monthly rent cycle as an explicit state machine.

A booking's cycle state is derived from its newest payment; ``transition``
maps ``(state, today)`` to the next state and the actions to perform. The
functions here are pure: no database access, no clock reads.
"""
from __future__ import annotations
import enum
from dataclasses import dataclass
from datetime import date as _date
from typing import Optional, Protocol


class CycleState(str, enum.Enum):
    NO_OBLIGATION = "no_obligation"
    NOTIFIED = "notified"
    LATE_WARNED = "late_warned"
    COMPLETED = "completed"
    FAILED = "failed"


class Action(str, enum.Enum):
    CREATE_OBLIGATION = "create_obligation"
    GENTLE_REMINDER = "gentle_reminder"
    LATE_WARNING = "late_warning"


# States in which the customer owes the current obligation
OUTSTANDING_STATES = frozenset({CycleState.NOTIFIED, CycleState.LATE_WARNED})


class PaymentLike(Protocol):
    status: str
    payment_for_date: _date
    late_warned_at: object


@dataclass(frozen=True)
class Transition:
    state: CycleState
    actions: tuple[Action, ...] = ()

    @property
    def creates_obligation(self) -> bool:
        return Action.CREATE_OBLIGATION in self.actions


def billing_month(d: _date) -> _date:
    return _date(d.year, d.month, 1)


def previous_month(d: _date) -> _date:
    if d.month == 1:
        return _date(d.year - 1, 12, 1)
    return _date(d.year, d.month - 1, 1)


def due_date_for(month: _date, due_day: int = 7) -> _date:
    """Due date of a billing month: the `due_day`-th of that month."""
    return _date(month.year, month.month, due_day)


def state_of(payment: Optional[PaymentLike]) -> CycleState:
    """Derive the cycle state from the newest payment of a booking."""
    if payment is None:
        return CycleState.NO_OBLIGATION
    status = str(payment.status)
    if status == "notified":
        if getattr(payment, "late_warned_at", None):
            return CycleState.LATE_WARNED
        return CycleState.NOTIFIED
    if status == "completed":
        return CycleState.COMPLETED
    if status == "failed":
        return CycleState.FAILED
    # "pending": a gateway attempt is in flight; nothing to remind about
    return CycleState.NO_OBLIGATION


def should_create_obligation(state: CycleState, today: _date, last_billing_month: Optional[_date]) -> bool:
    current = billing_month(today)
    if last_billing_month is not None and billing_month(last_billing_month) == current:
        return False
    if today.day == 1:
        return True
    return (
        state == CycleState.COMPLETED
        and last_billing_month is not None
        and billing_month(last_billing_month) == previous_month(today)
    )


def transition(
    state: CycleState,
    today: _date,
    last_billing_month: Optional[_date] = None,
    due_day: int = 7,
) -> Transition:
    # Obligation creation is exclusive: a fresh obligation gets exactly one
    # reminder and the reminder checks never run on the pre-creation snapshot.
    if should_create_obligation(state, today, last_billing_month):
        return Transition(CycleState.NOTIFIED, (Action.CREATE_OBLIGATION, Action.GENTLE_REMINDER))

    if state in OUTSTANDING_STATES:
        if today.day > due_day:
            return Transition(CycleState.LATE_WARNED, (Action.LATE_WARNING,))
        if today.day < due_day:
            return Transition(state, (Action.GENTLE_REMINDER,))

    return Transition(state)


def decide(payment: Optional[PaymentLike], today: _date, due_day: int = 7) -> Transition:
    """Convenience wrapper: derive the state from `payment` and transition it."""
    last_month = getattr(payment, "payment_for_date", None) if payment is not None else None
    return transition(state_of(payment), today, last_month, due_day)
