# finbot/utils.py
from datetime import date, datetime


def parse_instant(value):
    """
    Parse an ISO-8601 date or datetime into a naive local datetime.
    Aware values (including a trailing 'Z') are converted to local time.
    """
    if isinstance(value, datetime):
        instant = value
    elif isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        instant = datetime.fromisoformat(text)
    else:
        raise ValueError(f"Unrecognized date value: {value!r}")
    if instant.tzinfo is not None:
        instant = instant.astimezone().replace(tzinfo=None)
    return instant


def _group_indian(whole):
    # Last three digits, then pairs: 12,34,567
    if len(whole) <= 3:
        return whole
    head, tail = whole[:-3], whole[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ",".join(groups + [tail])


def format_amount(value):
    """
    Render an amount the way the app displays money: en-IN digit grouping,
    at most two decimals, trailing zeros dropped (1234.5 -> '1,234.5').
    """
    rounded = round(float(value), 2)
    whole, _, frac = f"{abs(rounded):.2f}".partition(".")
    frac = frac.rstrip("0")
    text = _group_indian(whole) + (f".{frac}" if frac else "")
    return f"-{text}" if rounded < 0 else text
