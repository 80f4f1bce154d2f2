import logging
import sqlite3
from pathlib import Path
from typing import List

from finbot.core.models import (
    AppendTransaction,
    Mutation,
    RemoveTransaction,
    ReplaceTransaction,
    Transaction,
)

logger = logging.getLogger(__name__)

_COLUMNS = (
    "id, type, title, amount, category, payment_mode, payment_app, description, date"
)


def _init_db(conn: sqlite3.Connection) -> None:
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS transactions (
            seq INTEGER PRIMARY KEY AUTOINCREMENT,
            id TEXT NOT NULL UNIQUE,
            type TEXT NOT NULL,
            title TEXT NOT NULL,
            amount REAL NOT NULL,
            category TEXT NOT NULL,
            payment_mode TEXT NOT NULL,
            payment_app TEXT,
            description TEXT,
            date TEXT NOT NULL
        )
        """
    )
    conn.commit()


def _connect(db_path: str) -> sqlite3.Connection:
    path = Path(db_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(path)
    _init_db(conn)
    return conn


def _row(tx: Transaction) -> tuple:
    return (
        tx.id,
        tx.type,
        tx.title.strip(),
        float(tx.amount),
        tx.category,
        tx.payment_mode,
        tx.payment_app,
        tx.description,
        tx.date.isoformat(),
    )


def append_transaction(tx: Transaction, db_path: str) -> None:
    """Store a new transaction. Re-adding an existing id replaces it."""
    conn = _connect(db_path)
    try:
        conn.execute(
            f"INSERT OR REPLACE INTO transactions ({_COLUMNS}) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
            _row(tx),
        )
        conn.commit()
    finally:
        conn.close()
    logger.debug("Appended %s to %s", tx.id, db_path)


def remove_transaction(transaction_id: str, db_path: str) -> bool:
    """Delete a transaction by id. Returns False when nothing matched."""
    conn = _connect(db_path)
    try:
        cur = conn.execute("DELETE FROM transactions WHERE id = ?", (transaction_id,))
        conn.commit()
        removed = cur.rowcount > 0
    finally:
        conn.close()
    logger.debug("Removed %s from %s: %s", transaction_id, db_path, removed)
    return removed


def replace_transaction(tx: Transaction, db_path: str) -> bool:
    """Overwrite the stored transaction with the same id."""
    conn = _connect(db_path)
    try:
        cur = conn.execute(
            """
            UPDATE transactions
            SET type = ?, title = ?, amount = ?, category = ?, payment_mode = ?,
                payment_app = ?, description = ?, date = ?
            WHERE id = ?
            """,
            _row(tx)[1:] + (tx.id,),
        )
        conn.commit()
        return cur.rowcount > 0
    finally:
        conn.close()


def apply_mutation(mutation: Mutation, db_path: str) -> None:
    if isinstance(mutation, AppendTransaction):
        append_transaction(mutation.transaction, db_path)
    elif isinstance(mutation, RemoveTransaction):
        remove_transaction(mutation.transaction_id, db_path)
    elif isinstance(mutation, ReplaceTransaction):
        replace_transaction(mutation.transaction, db_path)
    else:
        raise TypeError(f"Unknown mutation: {mutation!r}")


def fetch_transactions(db_path: str) -> List[Transaction]:
    """Return every stored transaction, newest insertion first."""
    if not Path(db_path).exists():
        return []
    conn = _connect(db_path)
    try:
        rows = conn.execute(
            f"SELECT {_COLUMNS} FROM transactions ORDER BY seq DESC"
        ).fetchall()
    finally:
        conn.close()
    return [
        Transaction.from_dict(
            {
                "id": r[0],
                "type": r[1],
                "title": r[2],
                "amount": r[3],
                "category": r[4],
                "payment_mode": r[5],
                "payment_app": r[6],
                "description": r[7],
                "date": r[8],
            }
        )
        for r in rows
    ]


def clear_transactions(db_path: str) -> None:
    if not Path(db_path).exists():
        return
    conn = _connect(db_path)
    try:
        conn.execute("DELETE FROM transactions")
        conn.commit()
    finally:
        conn.close()
