# finbot/core/models.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Sequence, Union

from finbot.utils import parse_instant

EXPENSE = "expense"
INCOME = "income"
INCOME_CATEGORY = "Income"
UPI_MODE = "UPI"

BUDGET_PERIODS = ("Weekly", "Monthly", "Yearly")


@dataclass(frozen=True)
class Transaction:
    id: str
    type: str
    title: str
    amount: float
    category: str
    payment_mode: str
    date: datetime
    payment_app: Optional[str] = None
    description: Optional[str] = None

    @property
    def is_expense(self) -> bool:
        # Records saved before income support carry no type.
        return self.type != INCOME

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.type,
            "title": self.title,
            "amount": self.amount,
            "category": self.category,
            "payment_mode": self.payment_mode,
            "payment_app": self.payment_app,
            "description": self.description,
            "date": self.date.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Transaction":
        """Build a Transaction from its stored form.

        Accepts both our snake_case keys and the camelCase keys written by the
        mobile app (``name``, ``paymentMode``, ``paymentApp``).
        """
        title = data.get("title", data.get("name"))
        if not title or not str(title).strip():
            raise ValueError(f"Missing 'title' in transaction: {data}")
        if data.get("date") is None:
            raise ValueError(f"Missing 'date' in transaction: {data}")
        return cls(
            id=str(data["id"]),
            type=data.get("type") or EXPENSE,
            title=str(title).strip(),
            amount=float(data.get("amount", 0.0)),
            category=data.get("category") or "Other",
            payment_mode=data.get("payment_mode", data.get("paymentMode")) or "Cash",
            payment_app=data.get("payment_app", data.get("paymentApp")),
            description=data.get("description"),
            date=parse_instant(data["date"]),
        )


@dataclass(frozen=True)
class BudgetConfig:
    amount: float
    period: str = "Monthly"

    def __post_init__(self):
        if self.period not in BUDGET_PERIODS:
            raise ValueError(
                f"Unsupported budget period '{self.period}'; "
                f"expected one of {', '.join(BUDGET_PERIODS)}."
            )


@dataclass(frozen=True)
class Window:
    """Closed time interval ``start <= x <= end``."""
    start: datetime
    end: datetime

    def contains(self, instant: datetime) -> bool:
        return self.start <= instant <= self.end


# -----------------------------------------------------------------------------
# Parse results
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class Success:
    transaction: Transaction


@dataclass(frozen=True)
class NeedsInput:
    missing_field: str
    prompt: str


@dataclass(frozen=True)
class Unrecognized:
    utterance: str = ""


ParseResult = Union[Success, NeedsInput, Unrecognized]


# -----------------------------------------------------------------------------
# Ledger mutations handed back to the store
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class AppendTransaction:
    transaction: Transaction


@dataclass(frozen=True)
class RemoveTransaction:
    transaction_id: str


@dataclass(frozen=True)
class ReplaceTransaction:
    transaction: Transaction


Mutation = Union[AppendTransaction, RemoveTransaction, ReplaceTransaction]


def apply_mutation(ledger: Sequence[Transaction], mutation: Mutation) -> List[Transaction]:
    """Return the ledger that results from committing *mutation*.

    New transactions go to the front, matching the newest-first order the
    store keeps.
    """
    if isinstance(mutation, AppendTransaction):
        return [mutation.transaction] + list(ledger)
    if isinstance(mutation, RemoveTransaction):
        return [tx for tx in ledger if tx.id != mutation.transaction_id]
    if isinstance(mutation, ReplaceTransaction):
        updated = mutation.transaction
        return [updated if tx.id == updated.id else tx for tx in ledger]
    raise TypeError(f"Unknown mutation: {mutation!r}")


@dataclass
class Response:
    text: str
    kind: str = "text"
    data: list = field(default_factory=list)
    total: Optional[float] = None
    show_undo: bool = False
    mutation: Optional[Mutation] = None
