# finbot/config.py
from __future__ import annotations

import copy
import os
from pathlib import Path
from typing import Dict, List, Optional

import yaml

from finbot.core.lexicon import (
    DEFAULT_CATEGORIES,
    DEFAULT_PAYMENT_MODES,
    DEFAULT_UPI_APPS,
    KEYWORD_MAP,
    Vocabularies,
)
from finbot.core.models import BudgetConfig

DEFAULT_CONFIG: Dict[str, object] = {
    "currency": "₹",
    "categories": list(DEFAULT_CATEGORIES),
    "payment_modes": list(DEFAULT_PAYMENT_MODES),
    "upi_apps": list(DEFAULT_UPI_APPS),
    # Extra recognition keywords per category, merged into the built-in table.
    "keywords": {},
    "budget": {
        "amount": 7000,
        "period": "Monthly",
    },
    "db_path": "finbot.db",
    "output_dir": "data",
    "output_modules": {
        "csv": "finbot.outputs.csv_output.CSVOutput",
        "excel": "finbot.outputs.excel_output.ExcelOutput",
    },
}

ENV_OVERRIDES = {
    "FINBOT_DB_PATH": "db_path",
    "FINBOT_CURRENCY": "currency",
}


def _merge_defaults(current: Dict[str, object], defaults: Dict[str, object]) -> Dict[str, object]:
    """Merge missing default keys into the current config recursively."""
    merged = dict(current)
    for key, value in defaults.items():
        if key not in merged:
            merged[key] = copy.deepcopy(value)
        elif isinstance(value, dict) and isinstance(merged[key], dict):
            merged[key] = _merge_defaults(merged[key], value)
    return merged


def read_config_file(path: Optional[str]) -> Dict[str, object]:
    """The file's own mapping, without defaults or overrides."""
    if not path or not Path(path).exists():
        return {}
    with open(path, encoding="utf-8") as f:
        loaded = yaml.safe_load(f)
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ValueError(f"Config file {path} must contain a mapping.")
    return loaded


def load_config(path: Optional[str] = None) -> Dict[str, object]:
    """
    Read config.yaml (if it exists), fill in defaults and apply environment
    overrides. A missing file yields the defaults.
    """
    cfg = _merge_defaults(read_config_file(path), DEFAULT_CONFIG)
    for env_name, key in ENV_OVERRIDES.items():
        value = os.environ.get(env_name)
        if value:
            cfg[key] = value
    return cfg


def update_config_file(path: str, key: str, value: object) -> None:
    """Set one top-level key in the file, leaving the rest of it untouched."""
    data = read_config_file(path)
    data[key] = value
    save_config(data, path)


def save_config(config: Dict[str, object], path: str) -> None:
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    with open(target, "w", encoding="utf-8") as f:
        yaml.safe_dump(config, f, sort_keys=False, allow_unicode=True)


VOCABULARY_KEYS = ("categories", "payment_modes", "upi_apps")


def edit_vocabulary(current, add=(), remove=()) -> List[str]:
    """Append new entries (duplicates skipped) and drop exact matches."""
    values = [v for v in (current or []) if v not in remove]
    for entry in add:
        entry = str(entry).strip()
        if entry and entry not in values:
            values.append(entry)
    return values


def build_vocabularies(config: Dict[str, object]) -> Vocabularies:
    return Vocabularies.from_lists(
        categories=config.get("categories"),
        payment_modes=config.get("payment_modes"),
        upi_apps=config.get("upi_apps"),
    )


def build_lexicon(config: Dict[str, object]) -> Dict[str, List[str]]:
    """Built-in keyword table with any configured keywords appended."""
    lexicon = {cat: list(words) for cat, words in KEYWORD_MAP.items()}
    extra = config.get("keywords") or {}
    if not isinstance(extra, dict):
        raise ValueError("'keywords' must map category names to keyword lists.")
    for cat, words in extra.items():
        bucket = lexicon.setdefault(cat, [])
        for word in words or []:
            word = str(word).strip().lower()
            if word and word not in bucket:
                bucket.append(word)
    return lexicon


def build_budget(config: Dict[str, object]) -> BudgetConfig:
    budget = config.get("budget") or {}
    try:
        amount = float(budget.get("amount", 0))
    except (TypeError, ValueError):
        raise ValueError(f"Budget amount must be a number, got {budget.get('amount')!r}")
    return BudgetConfig(amount=amount, period=budget.get("period", "Monthly"))
