from datetime import datetime, timedelta

import pytest

from finbot.aggregation import (
    balance_data,
    category_breakdown,
    filter_by_categories,
    filter_by_period,
    largest_expense,
    period_comparison,
    search,
    totals,
)
from finbot.core.models import AppendTransaction, BudgetConfig, Transaction, apply_mutation

NOW = datetime(2024, 3, 10, 12, 0, 0)


def tx(id, amount, when, category="Food", type="expense", title=None):
    return Transaction(
        id=id,
        type=type,
        title=title or f"Item {id}",
        amount=amount,
        category="Income" if type == "income" else category,
        payment_mode="One-time" if type == "income" else "Cash",
        date=when,
    )


def test_rolling_week_excludes_eight_days_and_includes_six():
    old = tx("old", 10, NOW - timedelta(days=8))
    recent = tx("recent", 20, NOW - timedelta(days=6))
    result = filter_by_period([old, recent], "Week", NOW)
    assert result == [recent]


def test_all_period_is_identity():
    ledger = [tx("a", 1, datetime(2001, 1, 1)), tx("b", 2, NOW)]
    assert filter_by_period(ledger, "All", NOW) == ledger


def test_today_uses_start_of_day():
    early = tx("early", 5, datetime(2024, 3, 10, 0, 0, 0))
    late_yesterday = tx("late", 5, datetime(2024, 3, 9, 23, 59, 59))
    assert filter_by_period([early, late_yesterday], "Today", NOW) == [early]


def test_category_breakdown_empty():
    assert category_breakdown([]) == []


def test_category_breakdown_sorted_with_percentages():
    ledger = [
        tx("a", 100, NOW, "Food"),
        tx("b", 250, NOW, "Travel"),
        tx("c", 50, NOW, "Food"),
        tx("d", 200, NOW, "Bills"),
    ]
    shares = category_breakdown(ledger)
    assert [(s.category, s.total) for s in shares] == [
        ("Travel", 250), ("Bills", 200), ("Food", 150),
    ]
    assert sum(s.percentage for s in shares) == pytest.approx(100.0)
    assert shares[0].percentage == pytest.approx(250 / 6)


def test_category_breakdown_zero_totals():
    shares = category_breakdown([tx("a", 0, NOW, "Food"), tx("b", 0, NOW, "Bills")])
    assert [s.percentage for s in shares] == [0.0, 0.0]


def test_totals_split_income_and_expense():
    ledger = [tx("a", 300, NOW), tx("b", 1000, NOW, type="income")]
    result = totals(ledger)
    assert (result.income, result.expense, result.net) == (1000, 300, 700)


def test_largest_expense_ignores_income():
    ledger = [tx("a", 300, NOW), tx("b", 5000, NOW, type="income"), tx("c", 900, NOW)]
    assert largest_expense(ledger).id == "c"
    assert largest_expense([tx("b", 5000, NOW, type="income")]) is None


def test_filter_by_categories_and_search():
    ledger = [
        tx("a", 120, NOW, "Food", title="Pizza night"),
        tx("b", 75.5, NOW, "Travel", title="Metro card"),
    ]
    assert filter_by_categories(ledger, []) == ledger
    assert filter_by_categories(ledger, ["Travel"]) == [ledger[1]]
    assert search(ledger, "pizza") == [ledger[0]]
    assert search(ledger, "75.5") == [ledger[1]]
    assert search(ledger, "") == ledger


class TestBalanceData:
    budget = BudgetConfig(amount=7000, period="Monthly")
    ledger = [
        tx("in-month", 500, datetime(2024, 3, 5)),
        tx("last-month", 300, datetime(2024, 2, 28)),
        tx("salary", 1000, datetime(2024, 3, 1), type="income"),
    ]

    def test_available_balance(self):
        data = balance_data(self.ledger, self.budget, NOW)
        assert data.spent_this_period == 500
        assert data.income_this_period == 1000
        assert data.available_balance == 7500
        assert data.window.start == datetime(2024, 3, 1)

    def test_is_idempotent(self):
        assert balance_data(self.ledger, self.budget, NOW) == balance_data(self.ledger, self.budget, NOW)

    def test_income_raises_and_expense_lowers_balance(self):
        base = balance_data(self.ledger, self.budget, NOW).available_balance

        with_income = apply_mutation(
            self.ledger, AppendTransaction(tx("bonus", 250, NOW, type="income")))
        assert balance_data(with_income, self.budget, NOW).available_balance == base + 250

        with_expense = apply_mutation(self.ledger, AppendTransaction(tx("shoes", 400, NOW)))
        assert balance_data(with_expense, self.budget, NOW).available_balance == base - 400

    def test_weekly_period_uses_calendar_week(self):
        weekly = BudgetConfig(amount=1000, period="Weekly")
        data = balance_data(self.ledger, weekly, NOW)
        assert data.spent_this_period == 0
        assert data.available_balance == 1000


def test_budget_period_is_validated():
    with pytest.raises(ValueError):
        BudgetConfig(amount=100, period="Daily")


def test_period_comparison_deltas():
    day_a = datetime(2024, 3, 10)
    day_b = datetime(2024, 3, 9)
    ledger = [
        tx("a1", 200, day_a.replace(hour=9), "Food"),
        tx("a2", 50, day_a.replace(hour=18), "Travel"),
        tx("b1", 100, day_b.replace(hour=13), "Food"),
        tx("b2", 300, day_b.replace(hour=20), "Shopping"),
        tx("inc", 4000, day_a, type="income"),
    ]
    result = period_comparison(ledger, day_a, day_b, "Day")
    assert result.total_a == 250
    assert result.total_b == 400
    assert result.difference == -150
    assert [(d.category, d.difference) for d in result.deltas] == [
        ("Shopping", -300), ("Food", 100), ("Travel", 50),
    ]
