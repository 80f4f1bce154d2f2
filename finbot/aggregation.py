# finbot/aggregation.py
"""Period filters, category breakdowns, budget balance and period comparison.

Every function takes the full ledger and returns a fresh result; nothing here
keeps state between calls.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Optional, Sequence

from finbot.core.models import BudgetConfig, Transaction, Window
from finbot.dates import MONTH, WEEK, YEAR, aligned_window, rolling_cutoff

_BUDGET_GRANULARITY = {"Weekly": WEEK, "Monthly": MONTH, "Yearly": YEAR}


@dataclass(frozen=True)
class CategoryShare:
    category: str
    total: float
    percentage: float


@dataclass(frozen=True)
class Totals:
    income: float
    expense: float
    net: float


@dataclass(frozen=True)
class BalanceData:
    spent_this_period: float
    income_this_period: float
    available_balance: float
    window: Window


@dataclass(frozen=True)
class CategoryDelta:
    category: str
    total_a: float
    total_b: float
    difference: float


@dataclass(frozen=True)
class PeriodComparison:
    total_a: float
    total_b: float
    difference: float
    deltas: List[CategoryDelta]


def filter_by_period(
    ledger: Sequence[Transaction], granularity: str, now: datetime
) -> List[Transaction]:
    """Transactions on or after the rolling cutoff for granularity."""
    cutoff = rolling_cutoff(granularity, now)
    if cutoff is None:
        return list(ledger)
    return [tx for tx in ledger if tx.date >= cutoff]


def filter_by_window(ledger: Iterable[Transaction], window: Window) -> List[Transaction]:
    return [tx for tx in ledger if window.contains(tx.date)]


def filter_by_categories(
    ledger: Iterable[Transaction], categories: Optional[Iterable[str]]
) -> List[Transaction]:
    selected = set(categories or [])
    if not selected:
        return list(ledger)
    return [tx for tx in ledger if tx.category in selected]


def search(ledger: Iterable[Transaction], query: Optional[str]) -> List[Transaction]:
    """Match on title or on the amount's text, case-insensitively."""
    needle = (query or "").strip().lower()
    if not needle:
        return list(ledger)
    results = []
    for tx in ledger:
        amount_text = f"{tx.amount:g}"
        if needle in tx.title.lower() or needle in amount_text:
            results.append(tx)
    return results


def expenses(ledger: Iterable[Transaction]) -> List[Transaction]:
    return [tx for tx in ledger if tx.is_expense]


def totals(ledger: Iterable[Transaction]) -> Totals:
    income = 0.0
    expense = 0.0
    for tx in ledger:
        if tx.is_expense:
            expense += tx.amount
        else:
            income += tx.amount
    return Totals(income=income, expense=expense, net=income - expense)


def category_totals(transactions: Iterable[Transaction]) -> dict:
    sums = defaultdict(float)
    for tx in transactions:
        sums[tx.category] += tx.amount
    return dict(sums)


def category_breakdown(transactions: Iterable[Transaction]) -> List[CategoryShare]:
    """
    Per-category totals with their share of the grand total, largest first.
    A zero grand total gives every category 0%.
    """
    sums = category_totals(transactions)
    grand = sum(sums.values())
    ordered = sorted(sums.items(), key=lambda item: item[1], reverse=True)
    return [
        CategoryShare(
            category=cat,
            total=total,
            percentage=(100.0 * total / grand) if grand else 0.0,
        )
        for cat, total in ordered
    ]


def largest_expense(ledger: Iterable[Transaction]) -> Optional[Transaction]:
    spending = expenses(ledger)
    if not spending:
        return None
    return max(spending, key=lambda tx: tx.amount)


def balance_data(
    ledger: Sequence[Transaction], budget: BudgetConfig, now: datetime
) -> BalanceData:
    """
    Spending and income inside the current budget period, and what is left:
    budget + income - spent. Recomputed from the ledger on every call.
    """
    window = aligned_window(_BUDGET_GRANULARITY[budget.period], now)
    period = totals(filter_by_window(ledger, window))
    return BalanceData(
        spent_this_period=period.expense,
        income_this_period=period.income,
        available_balance=budget.amount + period.income - period.expense,
        window=window,
    )


def period_comparison(
    ledger: Sequence[Transaction],
    date_a: datetime,
    date_b: datetime,
    granularity: str,
) -> PeriodComparison:
    spending = expenses(ledger)
    by_cat_a = category_totals(filter_by_window(spending, aligned_window(granularity, date_a)))
    by_cat_b = category_totals(filter_by_window(spending, aligned_window(granularity, date_b)))

    total_a = sum(by_cat_a.values())
    total_b = sum(by_cat_b.values())

    seen = list(by_cat_a)
    seen.extend(cat for cat in by_cat_b if cat not in by_cat_a)
    deltas = []
    for cat in seen:
        a = by_cat_a.get(cat, 0.0)
        b = by_cat_b.get(cat, 0.0)
        if a > 0 or b > 0:
            deltas.append(CategoryDelta(cat, a, b, a - b))
    deltas.sort(key=lambda d: abs(d.difference), reverse=True)

    return PeriodComparison(
        total_a=total_a,
        total_b=total_b,
        difference=total_a - total_b,
        deltas=deltas,
    )
