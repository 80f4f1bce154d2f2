# finbot/core/lexicon.py
from dataclasses import dataclass
from typing import Dict, List, Tuple

# Category -> recognition keywords. Order matters: the first category whose
# keyword appears in a message wins.
KEYWORD_MAP: Dict[str, List[str]] = {
    "Food": [
        "breakfast", "lunch", "dinner", "snack", "tea", "coffee", "burger",
        "pizza", "sandwich", "roti", "swiggy", "zomato", "restaurant", "milk",
        "water", "cake",
    ],
    "Travel": [
        "uber", "ola", "bus", "train", "flight", "petrol", "diesel", "fuel",
        "cab", "auto", "ticket", "metro", "parking",
    ],
    "Bills": [
        "recharge", "netflix", "wifi", "broadband", "electricity", "mobile",
        "dth", "gas", "rent", "emi", "hotstar",
    ],
    "Shopping": [
        "amazon", "flipkart", "myntra", "clothes", "shoes", "jeans", "shirt",
        "watch", "bag", "grocery", "shampoo", "soap",
    ],
    "Health": [
        "medicine", "doctor", "clinic", "gym", "hospital", "checkup", "test",
    ],
}

DEFAULT_CATEGORIES = ["Food", "Travel", "Bills", "Shopping", "Health", "Other"]
DEFAULT_PAYMENT_MODES = ["UPI", "Cash", "Card"]
DEFAULT_UPI_APPS = ["GPay", "PhonePe", "Paytm"]

FALLBACK_CATEGORY = "Other"
FALLBACK_PAYMENT_MODE = "Cash"

INCOME_FREQUENCIES = ["One-time", "Weekly", "Monthly", "Yearly"]


@dataclass(frozen=True)
class Vocabularies:
    """Snapshot of the user-configured lists consulted while parsing."""
    categories: Tuple[str, ...] = tuple(DEFAULT_CATEGORIES)
    payment_modes: Tuple[str, ...] = tuple(DEFAULT_PAYMENT_MODES)
    upi_apps: Tuple[str, ...] = tuple(DEFAULT_UPI_APPS)

    @classmethod
    def from_lists(cls, categories=None, payment_modes=None, upi_apps=None):
        return cls(
            categories=tuple(c for c in (categories or []) if c and c.strip()),
            payment_modes=tuple(m for m in (payment_modes or []) if m and m.strip()),
            upi_apps=tuple(a for a in (upi_apps or []) if a and a.strip()),
        )
