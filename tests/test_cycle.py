"""Tests for the pure rent cycle state machine."""
from datetime import date
from types import SimpleNamespace

import pytest

from payment.cycle import (
    Action,
    CycleState,
    billing_month,
    decide,
    due_date_for,
    previous_month,
    should_create_obligation,
    state_of,
    transition,
)


def payment(status, month, late_warned_at=None):
    return SimpleNamespace(status=status, payment_for_date=month, late_warned_at=late_warned_at)


class TestDateHelpers:
    def test_billing_month_is_first_day(self):
        assert billing_month(date(2025, 3, 17)) == date(2025, 3, 1)

    def test_previous_month_wraps_year(self):
        assert previous_month(date(2025, 1, 15)) == date(2024, 12, 1)
        assert previous_month(date(2025, 7, 1)) == date(2025, 6, 1)

    def test_due_date_is_seventh_by_default(self):
        assert due_date_for(date(2025, 2, 1)) == date(2025, 2, 7)
        assert due_date_for(date(2025, 2, 1), due_day=5) == date(2025, 2, 5)


class TestStateOf:
    def test_no_payment(self):
        assert state_of(None) is CycleState.NO_OBLIGATION

    @pytest.mark.parametrize("status,expected", [
        ("notified", CycleState.NOTIFIED),
        ("completed", CycleState.COMPLETED),
        ("failed", CycleState.FAILED),
        ("pending", CycleState.NO_OBLIGATION),
    ])
    def test_maps_status(self, status, expected):
        assert state_of(payment(status, date(2025, 1, 1))) is expected

    def test_late_warned_notified_payment(self):
        p = payment("notified", date(2025, 1, 1), late_warned_at="2025-01-08T09:00:00Z")
        assert state_of(p) is CycleState.LATE_WARNED


class TestShouldCreateObligation:
    def test_first_of_month_without_history(self):
        assert should_create_obligation(CycleState.NO_OBLIGATION, date(2025, 1, 1), None)

    def test_first_of_month_with_unpaid_previous_month(self):
        assert should_create_obligation(CycleState.NOTIFIED, date(2025, 2, 1), date(2025, 1, 1))

    def test_not_twice_in_same_month(self):
        assert not should_create_obligation(CycleState.NOTIFIED, date(2025, 1, 1), date(2025, 1, 1))

    def test_completed_previous_month_mid_cycle(self):
        assert should_create_obligation(CycleState.COMPLETED, date(2025, 2, 15), date(2025, 1, 1))

    def test_completed_older_month_mid_cycle(self):
        assert not should_create_obligation(CycleState.COMPLETED, date(2025, 3, 15), date(2025, 1, 1))

    def test_completed_previous_month_across_year(self):
        assert should_create_obligation(CycleState.COMPLETED, date(2025, 1, 20), date(2024, 12, 1))

    def test_notified_previous_month_mid_cycle(self):
        assert not should_create_obligation(CycleState.NOTIFIED, date(2025, 2, 15), date(2025, 1, 1))


class TestTransition:
    def test_creation_is_exclusive_with_single_reminder(self):
        step = transition(CycleState.NOTIFIED, date(2025, 2, 1), date(2025, 1, 1))
        assert step.state is CycleState.NOTIFIED
        assert step.actions == (Action.CREATE_OBLIGATION, Action.GENTLE_REMINDER)
        assert step.creates_obligation

    def test_gentle_reminder_before_due_day(self):
        step = transition(CycleState.NOTIFIED, date(2025, 1, 3), date(2025, 1, 1))
        assert step.actions == (Action.GENTLE_REMINDER,)
        assert step.state is CycleState.NOTIFIED

    def test_nothing_on_due_day(self):
        step = transition(CycleState.NOTIFIED, date(2025, 1, 7), date(2025, 1, 1))
        assert step.actions == ()

    def test_late_warning_after_due_day(self):
        step = transition(CycleState.NOTIFIED, date(2025, 1, 10), date(2025, 1, 1))
        assert step.state is CycleState.LATE_WARNED
        assert step.actions == (Action.LATE_WARNING,)

    def test_late_warning_repeats_while_unpaid(self):
        step = transition(CycleState.LATE_WARNED, date(2025, 1, 11), date(2025, 1, 1))
        assert step.actions == (Action.LATE_WARNING,)

    def test_custom_due_day(self):
        step = transition(CycleState.NOTIFIED, date(2025, 1, 6), date(2025, 1, 1), due_day=5)
        assert step.actions == (Action.LATE_WARNING,)

    @pytest.mark.parametrize("state", [CycleState.COMPLETED, CycleState.FAILED, CycleState.NO_OBLIGATION])
    def test_settled_states_are_quiet_mid_cycle(self, state):
        step = transition(state, date(2025, 1, 12), date(2024, 10, 1))
        assert step.state is state
        assert step.actions == ()


class TestDecide:
    def test_no_history_on_first(self):
        step = decide(None, date(2025, 1, 1))
        assert step.creates_obligation

    def test_no_history_mid_month(self):
        assert decide(None, date(2025, 1, 15)).actions == ()

    def test_completed_last_month(self):
        step = decide(payment("completed", date(2024, 12, 1)), date(2025, 1, 9))
        assert step.actions == (Action.CREATE_OBLIGATION, Action.GENTLE_REMINDER)

    def test_notified_day_ten(self):
        step = decide(payment("notified", date(2025, 1, 1)), date(2025, 1, 10))
        assert step.actions == (Action.LATE_WARNING,)
