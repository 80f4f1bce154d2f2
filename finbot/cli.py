# finbot/cli.py
import logging
import os
import uuid
from datetime import datetime, timedelta

import click
from dotenv import load_dotenv

from finbot.aggregation import (
    balance_data,
    category_breakdown,
    expenses,
    filter_by_categories,
    filter_by_period,
    period_comparison,
    search,
    totals,
)
from finbot.config import (
    VOCABULARY_KEYS,
    build_budget,
    build_lexicon,
    build_vocabularies,
    edit_vocabulary,
    load_config,
    update_config_file,
)
from finbot.core.lexicon import INCOME_FREQUENCIES
from finbot.core.models import (
    BUDGET_PERIODS,
    EXPENSE,
    INCOME,
    INCOME_CATEGORY,
    UPI_MODE,
    Transaction,
)
from finbot.database import (
    append_transaction,
    apply_mutation,
    fetch_transactions,
    remove_transaction,
)
from finbot.dates import DAY, MONTH, WEEK, add_months, normalize_granularity, window_label
from finbot.extractor import new_transaction_id
from finbot.outputs import get_output
from finbot.router import CommandRouter
from finbot.utils import format_amount, parse_instant

PERIOD_CHOICES = ['All', 'Today', 'Week', 'Month', 'Year']
EXIT_WORDS = ('exit', 'quit', 'bye')


def _new_id():
    # epoch millis + random suffix
    return f"{new_transaction_id(datetime.now())}-{uuid.uuid4().hex[:6]}"


class AppState:
    def __init__(self, config_path, config, db_path):
        self.config_path = config_path
        self.config = config
        self.db_path = db_path

    @property
    def currency(self):
        return self.config.get('currency', '₹')

    def money(self, value):
        return f"{self.currency}{format_amount(value)}"


def _parse_date_option(ctx, param, value):
    if value is None:
        return None
    try:
        return parse_instant(value)
    except ValueError:
        raise click.BadParameter(f"'{value}' is not an ISO date (YYYY-MM-DD).")


@click.group()
@click.option(
    '--config', 'config_path',
    default='config.yaml',
    type=click.Path(dir_okay=False),
    help='Path to config.yaml (defaults are used if it does not exist)'
)
@click.option(
    '--db', 'db_path',
    default=None,
    type=click.Path(dir_okay=False),
    help='SQLite ledger file (overrides db_path from config)'
)
@click.option(
    '--env-file', 'env_file',
    default=None,
    type=click.Path(exists=True, dir_okay=False),
    help='Optional .env file with FINBOT_* settings'
)
@click.pass_context
def main(ctx, config_path, db_path, env_file):
    """
    FinBot: log spending by chatting ("Lunch 200 via GPay") and review
    totals, category breakdowns and budget balance from the command line.
    """
    if env_file:
        load_dotenv(env_file)
    logging.basicConfig(level=os.getenv('FINBOT_LOG_LEVEL', 'WARNING').upper())

    try:
        cfg = load_config(config_path)
    except (OSError, ValueError) as e:
        raise click.ClickException(f"Could not load config: {e}")
    ctx.obj = AppState(config_path, cfg, db_path or cfg['db_path'])


def _reply(state, router, text):
    ledger = fetch_transactions(state.db_path)
    response = router.route(
        text,
        ledger,
        vocabularies=build_vocabularies(state.config),
        now=datetime.now(),
        lexicon=build_lexicon(state.config),
        commit=lambda mutation: apply_mutation(mutation, state.db_path),
    )
    click.echo(response.text)
    if response.kind == 'chart':
        for row in response.data:
            click.echo(f"  {row['name']:<12} {state.money(row['total']):>14}  {row['percentage']:>4}")
        click.echo(f"  {'Total':<12} {state.money(response.total):>14}")


@main.command()
@click.argument('message', nargs=-1)
@click.pass_obj
def chat(state, message):
    """Send MESSAGE to FinBot, or start an interactive chat if omitted."""
    router = CommandRouter(currency=state.currency, id_factory=_new_id)
    if message:
        _reply(state, router, ' '.join(message))
        return

    click.echo("Hi! I'm FinBot. Type 'Lunch 200', 'show chart' or 'undo'. 'exit' to leave.")
    while True:
        try:
            text = click.prompt('you', prompt_suffix='> ')
        except (EOFError, click.Abort):
            break
        if text.strip().lower() in EXIT_WORDS:
            break
        _reply(state, router, text)


@main.command()
@click.option('--title', required=True, help='What the money was for')
@click.option('--amount', required=True, type=click.FloatRange(min=0), help='Amount')
@click.option('--type', 'tx_type', default=EXPENSE, type=click.Choice([EXPENSE, INCOME]))
@click.option('--category', default=None, help='Expense category')
@click.option('--mode', 'payment_mode', default=None, help='Payment mode, or frequency for income')
@click.option('--app', 'payment_app', default=None, help='UPI app (only with --mode UPI)')
@click.option('--date', 'when', default=None, callback=_parse_date_option, help='ISO date; defaults to now')
@click.option('--note', default=None, help='Optional description')
@click.pass_obj
def add(state, title, amount, tx_type, category, payment_mode, payment_app, when, note):
    """Add a transaction by hand."""
    if not title.strip():
        raise click.BadParameter('Title must not be empty.', param_hint='--title')
    vocab = build_vocabularies(state.config)
    now = datetime.now()

    if tx_type == INCOME:
        category = INCOME_CATEGORY
        payment_mode = payment_mode or INCOME_FREQUENCIES[0]
        if payment_mode not in INCOME_FREQUENCIES:
            raise click.BadParameter(
                f"Income frequency must be one of {', '.join(INCOME_FREQUENCIES)}.",
                param_hint='--mode')
        payment_app = None
    else:
        category = category or 'Other'
        if vocab.categories and category not in vocab.categories:
            raise click.BadParameter(
                f"Unknown category '{category}'; configured: {', '.join(vocab.categories)}.",
                param_hint='--category')
        payment_mode = payment_mode or ('UPI' if payment_app else 'Cash')
        if payment_app and payment_mode != UPI_MODE:
            raise click.BadParameter('--app is only valid with --mode UPI.', param_hint='--app')

    tx = Transaction(
        id=_new_id(),
        type=tx_type,
        title=title.strip(),
        amount=amount,
        category=category,
        payment_mode=payment_mode,
        payment_app=payment_app,
        description=note,
        date=when or now,
    )
    append_transaction(tx, state.db_path)
    click.echo(f"Saved {tx.title}: {state.money(tx.amount)} ({tx.category}) [id {tx.id}]")


@main.command()
@click.argument('transaction_id')
@click.pass_obj
def delete(state, transaction_id):
    """Delete the transaction with TRANSACTION_ID."""
    if not remove_transaction(transaction_id, state.db_path):
        raise click.ClickException(f"No transaction with id {transaction_id}.")
    click.echo(f"Deleted {transaction_id}.")


@main.command(name='list')
@click.option('--period', default='All', type=click.Choice(PERIOD_CHOICES, case_sensitive=False))
@click.option('--category', 'categories', multiple=True, help='Only these categories (repeatable)')
@click.option('--search', 'query', default=None, help='Match title or amount')
@click.pass_obj
def list_cmd(state, period, categories, query):
    """List transactions, newest first."""
    ledger = filter_by_period(fetch_transactions(state.db_path), period, datetime.now())
    ledger = search(filter_by_categories(ledger, categories), query)
    if not ledger:
        click.echo('No transactions.')
        return
    for tx in ledger:
        sign = '+' if tx.type == INCOME else '-'
        mode = tx.payment_app or tx.payment_mode
        click.echo(
            f"{tx.date:%Y-%m-%d}  {tx.title:<20} {sign}{state.money(tx.amount):>12}  "
            f"{tx.category:<10} {mode:<8} {tx.id}"
        )
    overall = totals(ledger)
    click.echo(f"Total spent: {state.money(overall.expense)}  Income: {state.money(overall.income)}")


@main.command()
@click.option('--period', default='All', type=click.Choice(PERIOD_CHOICES, case_sensitive=False))
@click.pass_obj
def breakdown(state, period):
    """Spending per category."""
    ledger = filter_by_period(fetch_transactions(state.db_path), period, datetime.now())
    shares = category_breakdown(expenses(ledger))
    if not shares:
        click.echo('No data yet!')
        return
    for share in shares:
        click.echo(f"{share.category:<12} {state.money(share.total):>14}  {share.percentage:5.1f}%")


@main.command()
@click.pass_obj
def balance(state):
    """Spent, income and available balance for the current budget period."""
    try:
        budget = build_budget(state.config)
    except ValueError as e:
        raise click.ClickException(str(e))
    data = balance_data(fetch_transactions(state.db_path), budget, datetime.now())
    click.echo(f"{budget.period} budget: {state.money(budget.amount)}")
    click.echo(f"Spent:     {state.money(data.spent_this_period)}")
    click.echo(f"Income:    {state.money(data.income_this_period)}")
    click.echo(f"Available: {state.money(data.available_balance)}")
    if data.available_balance < 0:
        click.echo(f"{state.money(-data.available_balance)} over budget")


def _previous_reference(mode, now):
    if mode == DAY:
        return now - timedelta(days=1)
    if mode == WEEK:
        return now - timedelta(days=7)
    return add_months(now, -1)


@main.command()
@click.option('--mode', default='Day', type=click.Choice([DAY, WEEK, MONTH], case_sensitive=False))
@click.option('--date-a', default=None, callback=_parse_date_option, help='Reference date (default today)')
@click.option('--date-b', default=None, callback=_parse_date_option, help='Date to compare against')
@click.pass_obj
def compare(state, mode, date_a, date_b):
    """Compare spending between two days, weeks or months."""
    mode = normalize_granularity(mode)
    now = datetime.now()
    date_a = date_a or now
    date_b = date_b or _previous_reference(mode, date_a)

    result = period_comparison(fetch_transactions(state.db_path), date_a, date_b, mode)
    label_a = window_label(mode, date_a, now)
    label_b = window_label(mode, date_b, now)
    click.echo(f"{label_a}: {state.money(result.total_a)}")
    click.echo(f"{label_b}: {state.money(result.total_b)}")
    if result.difference < 0:
        click.echo(f"You saved {state.money(-result.difference)}")
    elif result.difference > 0:
        click.echo(f"You spent {state.money(result.difference)} more")
    for delta in result.deltas:
        sign = '+' if delta.difference >= 0 else '-'
        click.echo(f"  {delta.category:<12} {sign}{state.money(abs(delta.difference))}")


@main.command()
@click.option('--amount', type=click.FloatRange(min=0), default=None, help='Budget amount')
@click.option('--period', type=click.Choice(BUDGET_PERIODS), default=None, help='Budget period')
@click.pass_obj
def budget(state, amount, period):
    """Show or update the budget stored in the config file."""
    current = dict(state.config.get('budget') or {})
    if amount is None and period is None:
        click.echo(f"{current.get('period')} budget: {state.money(current.get('amount', 0))}")
        return
    if amount is not None:
        current['amount'] = amount
    if period is not None:
        current['period'] = period
    state.config['budget'] = current
    update_config_file(state.config_path, 'budget', current)
    click.echo(f"Budget set to {state.money(current['amount'])} ({current['period']}).")


@main.command()
@click.argument('kind', type=click.Choice(VOCABULARY_KEYS))
@click.option('--add', 'added', multiple=True, help='Entry to add (repeatable)')
@click.option('--remove', 'removed', multiple=True, help='Entry to remove (repeatable)')
@click.pass_obj
def vocab(state, kind, added, removed):
    """Show or edit the configured categories, payment_modes or upi_apps."""
    current = list(state.config.get(kind) or [])
    if added or removed:
        unknown = [entry for entry in removed if entry not in current]
        if unknown:
            raise click.ClickException(f"Not in {kind}: {', '.join(unknown)}.")
        current = edit_vocabulary(current, added, removed)
        state.config[kind] = current
        update_config_file(state.config_path, kind, current)
    click.echo(', '.join(current) if current else f"No {kind} configured.")


@main.command()
@click.option(
    '--output', 'output_format',
    default='csv',
    type=click.Choice(['csv', 'excel']),
    help='Output target: csv or excel'
)
@click.option('--period', default='All', type=click.Choice(PERIOD_CHOICES, case_sensitive=False))
@click.pass_obj
def export(state, output_format, period):
    """Export the ledger to CSV or Excel in output_dir."""
    ledger = filter_by_period(fetch_transactions(state.db_path), period, datetime.now())
    outputter = get_output(output_format, state.config)
    path = outputter.write(ledger)
    if path is None:
        click.echo('No transactions to write.')
        return
    click.echo(f"Exported {len(ledger)} transaction(s) to {path}.")


if __name__ == '__main__':
    main()
