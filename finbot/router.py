# finbot/router.py
"""Chat command routing for the FinBot conversation."""

from __future__ import annotations

import logging
import random
import re
from dataclasses import replace
from datetime import datetime
from typing import Callable, Dict, List, Optional, Sequence

from finbot.aggregation import (
    category_breakdown,
    expenses,
    filter_by_period,
    largest_expense,
    totals,
)
from finbot.core.categorizer import is_category_keyword
from finbot.core.lexicon import KEYWORD_MAP, Vocabularies
from finbot.core.models import (
    AppendTransaction,
    Mutation,
    NeedsInput,
    RemoveTransaction,
    ReplaceTransaction,
    Response,
    Success,
    Transaction,
)
from finbot.dates import ALL, DAY, WEEK
from finbot.extractor import AMOUNT_PATTERN, extract
from finbot.utils import format_amount

logger = logging.getLogger(__name__)

_DIGIT = re.compile(r"\d")
_ADD_TRIGGERS = ("add", "spent", "paid", "got", "salary", "yesterday", "for ")
_UPDATE_TRIGGERS = ("change last amount", "update last amount")

UNDO_DONE = "Done! I removed that entry. 🗑️"
NOT_UNDERSTOOD = (
    "Hmm, I didn't quite catch that. Try tapping the **?** icon above "
    "for some magic words! ✨"
)
NO_CHART_DATA = "No data yet!"
NO_ANALYSIS_DATA = "No data to analyze."
NO_LAST_ENTRY = "I don't remember your last entry! 😅"
UPDATE_NEEDS_AMOUNT = "Please specify the new amount (e.g., 'change last amount to 500')."
LAST_ENTRY_GONE = "Hmm, I couldn't find the last entry in the database."

CONFIRMATIONS = (
    "{emoji} Saved! **{currency}{amount}** for **{title}**.\n*(Cat: {category} | Mode: {mode})*",
    "{emoji} Got it! Logged **{currency}{amount}** under **{category}**.\n*({title} via {mode})*",
    "{emoji} Noted **{currency}{amount}** in **{category}** for **{title}**.\n*(Mode: {mode})*",
)

Commit = Callable[[Mutation], None]


class CommandRouter:
    """
    Classify chat messages and answer them.

    The router only remembers the id of the last transaction it created so
    that "undo" and "change last amount" can refer to it. Everything else is
    derived from the ledger passed to each route() call.
    """

    def __init__(self, currency: str = "₹", rng: Optional[random.Random] = None,
                 id_factory: Optional[Callable[[], str]] = None):
        self.currency = currency
        self.rng = rng or random.Random()
        self.id_factory = id_factory
        self.last_added_id: Optional[str] = None

    def route(
        self,
        utterance: str,
        ledger: Sequence[Transaction],
        vocabularies: Optional[Vocabularies] = None,
        now: Optional[datetime] = None,
        lexicon: Optional[Dict[str, List[str]]] = None,
        commit: Optional[Commit] = None,
    ) -> Response:
        vocabularies = vocabularies or Vocabularies()
        lexicon = KEYWORD_MAP if lexicon is None else lexicon
        now = now or datetime.now()
        text = utterance or ""
        lower = text.lower()

        if lower.strip() == "undo" and self.last_added_id:
            logger.debug("intent=undo id=%s", self.last_added_id)
            return self._undo(commit)
        if any(trigger in lower for trigger in _UPDATE_TRIGGERS):
            logger.debug("intent=update")
            return self._update_last(text, ledger, commit)
        if _DIGIT.search(lower) and (
            any(trigger in lower for trigger in _ADD_TRIGGERS)
            or is_category_keyword(lower, lexicon)
        ):
            logger.debug("intent=add")
            return self._add(text, lexicon, vocabularies, now, commit)
        if "summary" in lower or "total" in lower:
            logger.debug("intent=summary")
            return self._summary(lower, ledger, now)
        if "chart" in lower or "graph" in lower:
            logger.debug("intent=chart")
            return self._chart(ledger)
        if "biggest" in lower or "highest" in lower:
            logger.debug("intent=biggest")
            return self._biggest(ledger)

        logger.debug("intent=unknown text=%r", text)
        return Response(NOT_UNDERSTOOD)

    # ------------------------------------------------------------------

    def _commit(self, commit: Optional[Commit], mutation: Mutation) -> None:
        if commit is not None:
            commit(mutation)

    def _undo(self, commit):
        mutation = RemoveTransaction(self.last_added_id)
        self._commit(commit, mutation)
        self.last_added_id = None
        return Response(UNDO_DONE, mutation=mutation)

    def _update_last(self, text, ledger, commit):
        if not self.last_added_id:
            return Response(NO_LAST_ENTRY)
        amount_match = AMOUNT_PATTERN.search(text)
        if not amount_match:
            return Response(UPDATE_NEEDS_AMOUNT)
        last = next((tx for tx in ledger if tx.id == self.last_added_id), None)
        if last is None:
            return Response(LAST_ENTRY_GONE)

        new_amount = float(amount_match.group(0))
        mutation = ReplaceTransaction(replace(last, amount=new_amount))
        self._commit(commit, mutation)
        return Response(
            f"✏️ Done! Updated **{last.title}** to {self.currency}{format_amount(new_amount)}.",
            mutation=mutation,
        )

    def _add(self, text, lexicon, vocabularies, now, commit):
        result = extract(text, lexicon, vocabularies, now, id_factory=self.id_factory)
        if isinstance(result, NeedsInput):
            return Response(result.prompt)
        if not isinstance(result, Success):
            return Response(NOT_UNDERSTOOD)

        tx = result.transaction
        mutation = AppendTransaction(tx)
        self._commit(commit, mutation)
        self.last_added_id = tx.id

        template = self.rng.choice(CONFIRMATIONS)
        message = template.format(
            emoji="✅" if tx.is_expense else "💸",
            currency=self.currency,
            amount=format_amount(tx.amount),
            title=tx.title,
            category=tx.category,
            mode=tx.payment_app or tx.payment_mode,
        )
        return Response(message, show_undo=True, mutation=mutation)

    def _summary(self, lower, ledger, now):
        if "today" in lower:
            target, label = DAY, "Today"
        elif "week" in lower:
            target, label = WEEK, "Week"
        else:
            target, label = ALL, "All"
        # Total counts spending only; income is reported alongside it.
        sums = totals(filter_by_period(ledger, target, now))
        text = f"📊 {label} Total: {self.currency}{format_amount(sums.expense)}"
        if sums.income:
            text += f" (Income: {self.currency}{format_amount(sums.income)})"
        return Response(text, total=sums.expense)

    def _chart(self, ledger):
        spending = expenses(ledger)
        if not spending:
            return Response(NO_CHART_DATA)
        shares = category_breakdown(spending)
        data = [
            {
                "name": share.category,
                "total": share.total,
                "percentage": f"{share.percentage:.0f}%",
            }
            for share in shares
        ]
        return Response(
            "Spending Breakdown",
            kind="chart",
            data=data,
            total=sum(share.total for share in shares),
        )

    def _biggest(self, ledger):
        top = largest_expense(ledger)
        if top is None:
            return Response(NO_ANALYSIS_DATA)
        return Response(
            f"🏆 Biggest Expense: **{top.title}** ({self.currency}{format_amount(top.amount)})",
            total=top.amount,
        )
