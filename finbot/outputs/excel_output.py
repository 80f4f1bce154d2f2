# finbot/outputs/excel_output.py

"""Excel output module backed by XlsxWriter.

The workbook has an ``AllData`` worksheet with every transaction (newest
last) and a ``Summary`` worksheet with the expense category breakdown and
the income / expense / net totals.
"""

from __future__ import annotations

import logging
import os
import xlsxwriter

from finbot.aggregation import category_breakdown, expenses, totals
from finbot.outputs.base import BaseOutput

logger = logging.getLogger(__name__)


class ExcelOutput(BaseOutput):
    """Generate a local Excel workbook for the ledger."""

    ALL_DATA = "AllData"
    SUMMARY = "Summary"
    HEADERS = ["date", "type", "title", "category", "payment_mode", "payment_app", "amount"]

    def __init__(self, config: dict):
        self.config = config
        self.output_dir = config.get("output_dir", "data")
        os.makedirs(self.output_dir, exist_ok=True)

    def _build_summary_rows(self, transactions):
        rows = [["Category", "Total", "Share"]]
        for share in category_breakdown(expenses(transactions)):
            rows.append([share.category, share.total, round(share.percentage, 1)])
        overall = totals(transactions)
        rows.append([])
        rows.append(["Income", overall.income, None])
        rows.append(["Expense", overall.expense, None])
        rows.append(["Net", overall.net, None])
        return rows

    def write(self, transactions):
        if not transactions:
            logger.info("No transactions to write.")
            return None

        ordered = sorted(transactions, key=lambda tx: tx.date)
        year = ordered[0].date.year
        out_path = os.path.join(self.output_dir, f"Ledger{year}.xlsx")

        workbook = xlsxwriter.Workbook(out_path)
        amount_fmt = workbook.add_format({"num_format": "#,##0.00"})

        all_ws = workbook.add_worksheet(self.ALL_DATA)
        all_ws.freeze_panes(1, 0)
        all_ws.write_row(0, 0, self.HEADERS)
        for idx, tx in enumerate(ordered, start=1):
            all_ws.write_row(idx, 0, [
                tx.date.isoformat(),
                tx.type,
                tx.title,
                tx.category,
                tx.payment_mode,
                tx.payment_app or "",
            ])
            all_ws.write_number(idx, 6, float(tx.amount), amount_fmt)
        all_ws.add_table(0, 0, len(ordered), len(self.HEADERS) - 1, {
            "columns": [{"header": h} for h in self.HEADERS]
        })

        summary_ws = workbook.add_worksheet(self.SUMMARY)
        summary_ws.set_column(1, 1, None, amount_fmt)
        for idx, row in enumerate(self._build_summary_rows(ordered)):
            if row:
                summary_ws.write_row(idx, 0, row)

        workbook.close()
        logger.info("Written %d transactions to %s", len(ordered), out_path)
        return out_path
