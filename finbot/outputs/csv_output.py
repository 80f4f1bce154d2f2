# finbot/outputs/csv_output.py

import os
import csv
import logging
from decimal import Decimal
from finbot.outputs.base import BaseOutput

logger = logging.getLogger(__name__)

HEADERS = ['date', 'type', 'title', 'category', 'payment_mode', 'payment_app', 'amount', 'id']


class CSVOutput(BaseOutput):
    """
    Writes the ledger to a single CSV file named Ledger<Year>.csv,
    sorted by date (oldest to latest). The year is taken from the
    oldest transaction.
    """
    def __init__(self, config):
        self.config     = config
        self.output_dir = config.get('output_dir', 'data')
        os.makedirs(self.output_dir, exist_ok=True)

    def write(self, transactions):
        if not transactions:
            logger.info("No transactions to write.")
            return None

        ordered = sorted(transactions, key=lambda tx: tx.date)
        year = ordered[0].date.year
        out_path = os.path.join(self.output_dir, f"Ledger{year}.csv")

        with open(out_path, 'w', newline='', encoding='utf-8') as f:
            writer = csv.writer(f)
            writer.writerow(HEADERS)
            for tx in ordered:
                writer.writerow([
                    tx.date.isoformat(),
                    tx.type,
                    tx.title,
                    tx.category,
                    tx.payment_mode,
                    tx.payment_app or '',
                    f"{Decimal(str(tx.amount)):.2f}",
                    tx.id,
                ])

        logger.info("Written %d transactions to %s", len(ordered), out_path)
        return out_path
