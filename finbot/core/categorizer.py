# finbot/core/categorizer.py
from finbot.core.lexicon import FALLBACK_CATEGORY


def match_category_name(text, categories):
    # The fallback never counts as a literal mention ("mother", "another").
    lowered = text.lower()
    for cat in categories:
        if cat == FALLBACK_CATEGORY:
            continue
        if cat.lower() in lowered:
            return cat
    return None


def match_keyword(text, keyword_map):
    """Return (category, keyword) for the first keyword found in text."""
    lowered = text.lower()
    for cat, keywords in keyword_map.items():
        for kw in keywords:
            if kw.lower() in lowered:
                return cat, kw
    return None, None


def is_category_keyword(text, keyword_map):
    return match_keyword(text, keyword_map)[0] is not None


def categorize(text, categories, keyword_map):
    """
    Pick a category for free text. A configured category name mentioned
    literally beats any keyword; otherwise the first keyword match decides.
    Returns (category, matched_keyword); the keyword is '' unless the
    keyword table was used.
    """
    literal = match_category_name(text, categories)
    if literal:
        return literal, ""
    cat, kw = match_keyword(text, keyword_map)
    if cat:
        return cat, kw
    return FALLBACK_CATEGORY, ""
