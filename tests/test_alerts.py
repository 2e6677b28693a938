"""Tests for the alert evaluator."""

from datetime import datetime, timezone
from decimal import Decimal

from home_ledger.ledger.alerts import dismissal_key, evaluate_alerts, suggested_savings
from home_ledger.models.ledger import Goal
from home_ledger.models.reports import AlertDismissals


def _goal(goal_id="goal-1") -> Goal:
    return Goal(
        id=goal_id,
        description="New car",
        target_amount=Decimal("1000"),
        target_date=datetime(2024, 7, 1, tzinfo=timezone.utc),
        created_at=datetime(2024, 1, 15, tzinfo=timezone.utc),
    )


def _evaluate(store, rates, now, goals=(), dismissals=None, threshold=100000, percentage=15):
    return evaluate_alerts(
        store,
        goals,
        rates,
        savings_threshold=threshold,
        savings_percentage=percentage,
        dismissals=dismissals or AlertDismissals(),
        now=now,
    )


class TestSavingsAlert:
    """Tests for the savings suggestion."""

    def test_fires_above_threshold(self, store, rates, now):
        alerts = _evaluate(store, rates, now)
        assert alerts.savings is not None
        assert alerts.savings.suggested_amount == Decimal("175575")

    def test_silent_below_threshold(self, store, rates, now):
        alerts = _evaluate(store, rates, now, threshold=2000000)
        assert alerts.savings is None

    def test_dismissed(self, store, rates, now):
        alerts = _evaluate(store, rates, now, dismissals=AlertDismissals(savings=True))
        assert alerts.savings is None

    def test_suggestion_is_floored(self):
        assert suggested_savings(Decimal("1001"), 15) == Decimal("150")


class TestDebtAlert:
    """Tests for the outstanding debt reminder."""

    def test_reports_outstanding_liabilities(self, store, rates, now):
        alerts = _evaluate(store, rates, now)
        assert alerts.debt.outstanding_liabilities == Decimal("80000")

    def test_silent_without_liabilities(self, store, ledger, rates, now):
        cleared = ledger.delete_transaction(store, "trans-2")
        cleared = ledger.delete_transaction(cleared, "trans-3")
        assert _evaluate(cleared, rates, now).debt is None

    def test_silent_when_fully_settled(self, store, ledger, rates, now):
        settled = ledger.settle_debt(store, "trans-2", Decimal("25000"), "safe-yer")
        settled = ledger.settle_debt(settled, "trans-3", Decimal("100"), "safe-usd")
        assert _evaluate(settled, rates, now).debt is None

    def test_dismissed(self, store, rates, now):
        alerts = _evaluate(store, rates, now, dismissals=AlertDismissals(debt=True))
        assert alerts.debt is None


class TestGoalAlerts:
    """Tests for the monthly goal reminders."""

    def test_dismissal_key_uses_calendar_month(self, now):
        assert dismissal_key("goal-1", now) == "goal-1-2024-6"

    def test_one_alert_per_goal(self, store, rates, now):
        alerts = _evaluate(store, rates, now, goals=(_goal("goal-1"), _goal("goal-2")))
        assert [alert.goal.id for alert in alerts.goals] == ["goal-1", "goal-2"]
        assert alerts.goals[0].monthly_contribution == Decimal("167")
        assert alerts.goals[0].dismissal_key == "goal-1-2024-6"
        assert alerts.count == 4

    def test_dismissal_only_covers_its_month(self, store, rates, now):
        """Test that last month's dismissal does not hide this month's alert."""
        last_month = AlertDismissals(goal_keys=frozenset({"goal-1-2024-5"}))
        alerts = _evaluate(store, rates, now, goals=(_goal(),), dismissals=last_month)
        assert len(alerts.goals) == 1

        this_month = AlertDismissals(goal_keys=frozenset({"goal-1-2024-6"}))
        alerts = _evaluate(store, rates, now, goals=(_goal(),), dismissals=this_month)
        assert alerts.goals == []
