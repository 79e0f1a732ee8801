"""
TaskRelay Backend — Settings Validation Tests
==============================================

What:  Field validators on Settings reject bad values at load time, before
       create_app() builds any service from them.
"""

import pytest
from pydantic import ValidationError as SettingsValidationError

from taskrelay.config import Settings


class TestSettingsValidation:
    def test_known_timezone_accepted(self):
        assert Settings(timezone="Europe/Berlin").timezone == "Europe/Berlin"

    def test_unknown_timezone_rejected(self):
        with pytest.raises(SettingsValidationError, match="timezone"):
            Settings(timezone="Mars/Olympus_Mons")

    def test_log_level_is_normalized(self):
        assert Settings(log_level="debug").log_level == "DEBUG"

    def test_amount_bounds_must_be_ordered(self):
        with pytest.raises(SettingsValidationError):
            Settings(amount_min_length=5, amount_max_length=3)
