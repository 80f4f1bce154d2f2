# finbot/extractor.py
"""Turn a chat message such as "Paid 800 for Shoes via GPay" into a Transaction."""

from __future__ import annotations

import logging
import re
from datetime import datetime
from typing import Callable, Dict, List, Optional

from finbot.core.categorizer import categorize
from finbot.core.lexicon import (
    FALLBACK_PAYMENT_MODE,
    INCOME_FREQUENCIES,
    KEYWORD_MAP,
    Vocabularies,
)
from finbot.core.models import (
    EXPENSE,
    INCOME,
    INCOME_CATEGORY,
    UPI_MODE,
    NeedsInput,
    ParseResult,
    Success,
    Transaction,
    Unrecognized,
)
from finbot.dates import shift_relative

logger = logging.getLogger(__name__)

AMOUNT_PATTERN = re.compile(r"\d+(?:\.\d+)?")
INCOME_PATTERN = re.compile(
    r"\b(got|received|salary|earned|refund|credited|income)\b", re.IGNORECASE
)
INCOME_TITLE_PATTERN = re.compile(r"(salary|bonus|gift|refund)", re.IGNORECASE)
NOTE_PATTERN = re.compile(r"\b(?:description|desc|note)s?\b:?\s*(.*)", re.IGNORECASE)
FREQUENCY_PATTERN = re.compile(r"\b(weekly|monthly|yearly)\b", re.IGNORECASE)

STOPWORDS = (
    "got", "received", "salary", "earned", "refund",
    "yesterday", "add", "spent", "paid", "bought", "via", "on", "for",
)
_STOPWORD_PATTERN = re.compile(r"\b(" + "|".join(STOPWORDS) + r")\b", re.IGNORECASE)
_RELATIVE_DATE_PATTERN = re.compile(
    r"(day before yesterday|last (?:monday|tuesday|wednesday|thursday|friday|saturday|sunday))",
    re.IGNORECASE,
)
_NON_LETTERS = re.compile(r"[^a-zA-Z\s]")
_SPACES = re.compile(r"\s+")

MISSING_AMOUNT_PROMPT = "I need an amount! (e.g. '100')"
PROVENANCE = "Bot Entry: {utterance}"


def new_transaction_id(now: datetime) -> str:
    return str(int(now.timestamp() * 1000))


def _capitalize(word: str) -> str:
    return word[:1].upper() + word[1:]


def _match_payment(text: str, vocabularies: Vocabularies):
    lowered = text.lower()
    for app in vocabularies.upi_apps:
        if app.lower() in lowered:
            return UPI_MODE, app
    for mode in vocabularies.payment_modes:
        if mode.lower() in lowered:
            return mode, None
    return FALLBACK_PAYMENT_MODE, None


def _match_frequency(text: str) -> str:
    match = FREQUENCY_PATTERN.search(text)
    if match:
        wanted = match.group(1).lower()
        for freq in INCOME_FREQUENCIES:
            if freq.lower() == wanted:
                return freq
    return INCOME_FREQUENCIES[0]


def _strip_word(text: str, word: Optional[str]) -> str:
    if not word:
        return text
    return re.sub(r"\b" + re.escape(word) + r"\b", "", text, flags=re.IGNORECASE)


def _build_title(working, amount_text, removable, is_income, keyword, category):
    residue = working.replace(amount_text, "", 1)
    # Whole relative-date phrases go before the stoplist eats "yesterday".
    residue = _RELATIVE_DATE_PATTERN.sub("", residue)
    residue = _STOPWORD_PATTERN.sub("", residue)
    for word in removable:
        residue = _strip_word(residue, word)
    residue = _SPACES.sub(" ", _NON_LETTERS.sub("", residue)).strip()

    if is_income and len(residue) < 2:
        match = INCOME_TITLE_PATTERN.search(working)
        return _capitalize(match.group(1).lower()) if match else INCOME_CATEGORY
    if len(residue) > 1:
        return _capitalize(residue)
    if keyword:
        return _capitalize(keyword)
    return category


def extract(
    utterance: str,
    lexicon: Optional[Dict[str, List[str]]] = None,
    vocabularies: Optional[Vocabularies] = None,
    now: Optional[datetime] = None,
    id_factory: Optional[Callable[[], str]] = None,
) -> ParseResult:
    """
    Parse a free-form message into a transaction draft.

    Returns Success with the new Transaction, NeedsInput("amount") when no
    number is present, or Unrecognized for a blank message. Never raises for
    text input.
    """
    lexicon = KEYWORD_MAP if lexicon is None else lexicon
    vocabularies = vocabularies or Vocabularies()
    now = now or datetime.now()

    if not utterance or not utterance.strip():
        return Unrecognized(utterance or "")

    working = utterance.strip()
    note = None
    note_match = NOTE_PATTERN.search(working)
    if note_match:
        note = note_match.group(1).strip() or None
        working = working.replace(note_match.group(0), "").strip()

    amount_match = AMOUNT_PATTERN.search(working)
    if not amount_match:
        logger.debug("No amount found in %r", utterance)
        return NeedsInput("amount", MISSING_AMOUNT_PROMPT)
    amount = float(amount_match.group(0))

    date = shift_relative(working, now)
    is_income = bool(INCOME_PATTERN.search(working))

    keyword = ""
    if is_income:
        category = INCOME_CATEGORY
        payment_mode, payment_app = _match_frequency(working), None
    else:
        category, keyword = categorize(working, vocabularies.categories, lexicon)
        payment_mode, payment_app = _match_payment(working, vocabularies)

    title = _build_title(
        working,
        amount_match.group(0),
        (category, payment_mode, payment_app),
        is_income,
        keyword,
        category,
    )

    tx = Transaction(
        id=id_factory() if id_factory else new_transaction_id(now),
        type=INCOME if is_income else EXPENSE,
        title=title,
        amount=amount,
        category=category,
        payment_mode=payment_mode,
        payment_app=payment_app,
        description=note or PROVENANCE.format(utterance=utterance),
        date=date,
    )
    logger.debug("Parsed %r -> %s", utterance, tx)
    return Success(tx)
