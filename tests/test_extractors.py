"""
TaskRelay Backend — Due-Date and Amount Extraction Tests
=========================================================

What:  The two text heuristics: date phrase extraction for new tasks and
       the largest-plausible-number rule for receipts.
"""

from datetime import datetime
from unittest.mock import patch

import pytest

from taskrelay.services.amount import amount_candidates, extract_amount
from taskrelay.services.due_date import extract_due_date


class TestExtractDueDate:
    def test_trailing_phrase_is_removed(self):
        content, due = extract_due_date("Buy milk tomorrow")
        assert content == "Buy milk"
        assert due

    def test_no_phrase_returns_text_unchanged(self):
        assert extract_due_date("Buy milk") == ("Buy milk", None)

    def test_phrase_in_the_middle(self):
        content, due = extract_due_date("Call mom on friday at 5pm")
        assert due
        assert content.startswith("Call mom")
        assert "friday" not in content.lower()

    def test_first_match_wins_and_is_removed_once(self):
        matches = [("today", datetime(2030, 1, 1)), ("tomorrow", datetime(2030, 1, 2))]
        with patch("taskrelay.services.due_date.search_dates", return_value=matches):
            content, due = extract_due_date("Plan today  for   tomorrow")
        assert due == "today"
        assert content == "Plan for tomorrow"

    def test_text_that_is_only_a_date_keeps_content(self):
        with patch(
            "taskrelay.services.due_date.search_dates",
            return_value=[("tomorrow", datetime(2030, 1, 2))],
        ):
            assert extract_due_date(" tomorrow ") == ("tomorrow", "tomorrow")

    def test_search_returning_none(self):
        with patch("taskrelay.services.due_date.search_dates", return_value=None):
            assert extract_due_date("anything") == ("anything", None)

    def test_bare_number_is_skipped_for_next_match(self):
        matches = [("1234", datetime(1234, 1, 1)), ("next monday", datetime(2030, 1, 7))]
        with patch("taskrelay.services.due_date.search_dates", return_value=matches):
            assert extract_due_date("Fix bug 1234 next monday") == ("Fix bug 1234", "next monday")

    def test_only_bare_numbers_means_no_due_date(self):
        with patch(
            "taskrelay.services.due_date.search_dates",
            return_value=[("42", datetime(2030, 1, 1))],
        ):
            assert extract_due_date("Order 42 screws") == ("Order 42 screws", None)

    def test_leading_number_stays_in_content(self):
        with patch(
            "taskrelay.services.due_date.search_dates",
            return_value=[("3 tomorrow", datetime(2030, 1, 2))],
        ):
            assert extract_due_date("Read chapter 3 tomorrow") == ("Read chapter 3", "tomorrow")

    @pytest.mark.parametrize("phrase", ["5 pm tomorrow", "15 march", "2 days from now"])
    def test_number_that_belongs_to_the_date_is_kept(self, phrase):
        with patch(
            "taskrelay.services.due_date.search_dates",
            return_value=[(phrase, datetime(2030, 3, 15))],
        ):
            assert extract_due_date(f"Ship it {phrase}") == ("Ship it", phrase)

    def test_numeric_date_is_not_treated_as_a_bare_number(self):
        with patch(
            "taskrelay.services.due_date.search_dates",
            return_value=[("2030-01-02", datetime(2030, 1, 2))],
        ):
            assert extract_due_date("Renew passport 2030-01-02") == ("Renew passport", "2030-01-02")

    def test_ticket_number_before_real_date(self):
        content, due = extract_due_date("Fix bug 1234 next monday")
        assert due == "next monday"
        assert content == "Fix bug 1234"

    def test_chapter_number_before_relative_date(self):
        content, due = extract_due_date("Read chapter 3 tomorrow")
        assert due == "tomorrow"
        assert content == "Read chapter 3"


class TestExtractAmount:
    def test_long_identifier_is_not_the_amount(self):
        assert extract_amount("Total 1,234.50 Item#88812340001") == pytest.approx(1234.50)

    def test_maximum_not_first(self):
        text = "Coffee 3.50\nBagel 2.25\nTOTAL 5.75"
        assert extract_amount(text) == pytest.approx(5.75)

    def test_order_independent(self):
        assert extract_amount("TOTAL 5.75 Coffee 3.50") == extract_amount("Coffee 3.50 TOTAL 5.75")

    def test_no_numbers(self):
        assert extract_amount("THANK YOU FOR SHOPPING") is None

    def test_only_zero_or_too_long(self):
        assert extract_amount("0.00 123456789012345") is None

    def test_thousands_separators_are_stripped(self):
        assert extract_amount("Grand total 1,234,567.89") == pytest.approx(1234567.89)

    def test_length_bounds_are_configurable(self):
        assert extract_amount("Ref 88812340001 Total 9.99", max_length=11) == pytest.approx(
            88812340001
        )
        assert extract_amount("Qty 2", min_length=3) is None

    def test_candidates_in_reading_order(self):
        assert amount_candidates("a 3 b 1,000 c 0 d 2.5") == [3.0, 1000.0, 2.5]
