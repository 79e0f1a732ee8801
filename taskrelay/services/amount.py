"""
TaskRelay Backend — Expense Amount Heuristic
=============================================

What:  Picks the expense total out of text recognized from a receipt photo.
How:   Collect every decimal-looking token, strip thousands separators, drop
       tokens that are too short or too long to be a price, parse, drop
       non-positive values, take the maximum.

This is best-effort. The maximum (not the first match) is chosen so the
printed total beats the smaller line items above it. The length filter keeps
long digit runs such as item numbers or card references from winning.
"""

import re
from typing import List, Optional

# Grouped thousands first ("1,234.50"), then a plain run ("1234.50").
AMOUNT_PATTERN = re.compile(r"\d{1,3}(?:,\d{3})+(?:\.\d+)?|\d+(?:\.\d+)?")

DEFAULT_MIN_LENGTH = 1
DEFAULT_MAX_LENGTH = 10


def amount_candidates(
    text: str,
    min_length: int = DEFAULT_MIN_LENGTH,
    max_length: int = DEFAULT_MAX_LENGTH,
) -> List[float]:
    """Every plausible positive amount in `text`, in reading order."""
    candidates = []
    for match in AMOUNT_PATTERN.findall(text):
        token = match.replace(",", "")
        if not min_length <= len(token) <= max_length:
            continue
        try:
            value = float(token)
        except ValueError:
            continue
        if value > 0:
            candidates.append(value)
    return candidates


def extract_amount(
    text: str,
    min_length: int = DEFAULT_MIN_LENGTH,
    max_length: int = DEFAULT_MAX_LENGTH,
) -> Optional[float]:
    """
    Largest plausible amount in `text`, or None when nothing survives.

    >>> extract_amount("Total 1,234.50 Item#88812340001")
    1234.5
    """
    candidates = amount_candidates(text, min_length, max_length)
    if not candidates:
        return None
    return max(candidates)
