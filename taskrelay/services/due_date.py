"""
TaskRelay Backend — Natural-Language Due-Date Extraction
=========================================================

What:  Pulls a date/time phrase ("tomorrow", "next friday at 5pm") out of
       free-form task text.
Why:   The frontend sends one line of text. Todoist accepts the phrase as its
       own `due_string`, so we only need to find it and lift it out.
How:   dateparser.search.search_dates() reports phrases left to right; the
       first one that is more than a bare number is removed once from the
       text and returned separately.

No match is a normal outcome, not an error: the text comes back unchanged.
"""

import logging
import re
from typing import Optional, Tuple

from dateparser.search import search_dates

logger = logging.getLogger(__name__)

# English only: language autodetection on short task titles produces
# false positives from words that happen to be month names elsewhere.
SEARCH_LANGUAGES = ["en"]
SEARCH_SETTINGS = {
    "PREFER_DATES_FROM": "future",
    "RETURN_AS_TIMEZONE_AWARE": False,
}

_WHITESPACE = re.compile(r"\s+")

# A lone number ("1234", "3.5") is a ticket number or a quantity, not a date.
# Numeric dates such as "10/20" or "2030-01-02" keep their separators.
_NUMERIC_ONLY = re.compile(r"\d+(?:[.,]\d+)?")
_LEADING_NUMBER = re.compile(r"^(\d+)\s+(\S+)")

# Words that make a leading number part of the date ("5 pm", "15 march").
_DATE_UNITS = {
    "am", "pm", "a.m.", "p.m.", "o'clock",
    "minute", "minutes", "hour", "hours", "day", "days",
    "week", "weeks", "month", "months", "year", "years",
    "jan", "january", "feb", "february", "mar", "march", "apr", "april",
    "may", "jun", "june", "jul", "july", "aug", "august", "sep", "sept",
    "september", "oct", "october", "nov", "november", "dec", "december",
}


def _clean_phrase(phrase: str) -> Optional[str]:
    """
    Drop phrases that are only a number, and a bare number in front of a
    relative phrase ("3 tomorrow" becomes "tomorrow").
    """
    phrase = phrase.strip()
    if not phrase or _NUMERIC_ONLY.fullmatch(phrase):
        return None
    leading = _LEADING_NUMBER.match(phrase)
    word = leading.group(2).lower() if leading else ""
    if leading and word not in _DATE_UNITS and word.rstrip(".,") not in _DATE_UNITS:
        phrase = phrase[leading.end(1):].strip()
    return phrase


def extract_due_date(text: str) -> Tuple[str, Optional[str]]:
    """
    Split `text` into (remaining_text, due_phrase).

    Examples:
        >>> extract_due_date("Buy milk tomorrow")
        ('Buy milk', 'tomorrow')
        >>> extract_due_date("Buy milk")
        ('Buy milk', None)

    If removing the phrase would leave nothing (the whole text is a date),
    the original text is kept as the content and the phrase is still returned.
    """
    matches = search_dates(text, languages=SEARCH_LANGUAGES, settings=SEARCH_SETTINGS)
    if not matches:
        return text, None

    phrase = next(
        (cleaned for cleaned in (_clean_phrase(m[0]) for m in matches) if cleaned), None
    )
    if phrase is None:
        return text, None

    remaining = _WHITESPACE.sub(" ", text.replace(phrase, " ", 1)).strip()
    logger.debug("Extracted due phrase %r from task text", phrase)
    if not remaining:
        return text.strip(), phrase
    return remaining, phrase
