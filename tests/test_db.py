from dataclasses import replace
from datetime import datetime

from finbot.core.models import (
    AppendTransaction,
    RemoveTransaction,
    ReplaceTransaction,
    Transaction,
)
from finbot.database import (
    append_transaction,
    apply_mutation,
    clear_transactions,
    fetch_transactions,
    remove_transaction,
    replace_transaction,
)


def make_tx(id, amount=100.0, **kwargs):
    fields = dict(
        id=id,
        type="expense",
        title=f"Item {id}",
        amount=amount,
        category="Food",
        payment_mode="UPI",
        payment_app="GPay",
        description="Bot Entry: test",
        date=datetime(2024, 3, 9, 12, 30),
    )
    fields.update(kwargs)
    return Transaction(**fields)


def test_missing_db_is_empty(tmp_path):
    assert fetch_transactions(str(tmp_path / "none.db")) == []


def test_append_fetch_newest_first(tmp_path):
    db = str(tmp_path / "nested" / "ledger.db")
    append_transaction(make_tx("1"), db)
    append_transaction(make_tx("2", 50.5), db)

    txs = fetch_transactions(db)
    assert [tx.id for tx in txs] == ["2", "1"]
    assert txs[0] == make_tx("2", 50.5)


def test_remove_and_replace(tmp_path):
    db = str(tmp_path / "ledger.db")
    append_transaction(make_tx("1"), db)
    append_transaction(make_tx("2"), db)

    assert replace_transaction(replace(make_tx("1"), amount=999.0), db)
    assert remove_transaction("2", db)
    assert not remove_transaction("2", db)

    txs = fetch_transactions(db)
    assert len(txs) == 1
    assert txs[0].amount == 999.0


def test_apply_mutation_round_trip(tmp_path):
    db = str(tmp_path / "ledger.db")
    tx = make_tx("1", payment_mode="Cash", payment_app=None, description=None)
    apply_mutation(AppendTransaction(tx), db)
    assert fetch_transactions(db) == [tx]

    apply_mutation(ReplaceTransaction(replace(tx, title="Dinner")), db)
    assert fetch_transactions(db)[0].title == "Dinner"

    apply_mutation(RemoveTransaction("1"), db)
    assert fetch_transactions(db) == []


def test_clear_transactions(tmp_path):
    db = str(tmp_path / "ledger.db")
    append_transaction(make_tx("1"), db)
    clear_transactions(db)
    assert fetch_transactions(db) == []
