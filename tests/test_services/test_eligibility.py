"""
Tests for the PLI Santosh eligibility rules.

Test Coverage:
- Age from date of birth, before/on/after the birthday
- Entry age window 19-55
- Maturity choices at least 5 years after the current age
- Sum assured step and term length
"""

import pytest
from datetime import date

from pli_assistant.services.eligibility import (
    MATURITY_AGE_CATALOG,
    age_from_date,
    is_age_eligible,
    is_sum_assured_valid,
    is_term_valid,
    valid_maturity_choices,
)


class TestAgeFromDate:
    """Whole-year age calculation"""

    def test_day_before_birthday(self):
        assert age_from_date(date(1990, 6, 15), date(2026, 6, 14)) == 35

    def test_on_birthday(self):
        assert age_from_date(date(1990, 6, 15), date(2026, 6, 15)) == 36

    def test_earlier_month_than_birthday(self):
        assert age_from_date(date(1990, 12, 1), date(2026, 3, 1)) == 35

    def test_leap_day_birthday(self):
        """A 29 February birthday counts from 1 March in common years"""
        assert age_from_date(date(2000, 2, 29), date(2026, 2, 28)) == 25
        assert age_from_date(date(2000, 2, 29), date(2026, 3, 1)) == 26


class TestAgeEligibility:
    """Entry age window"""

    @pytest.mark.parametrize("age", [19, 30, 55])
    def test_inside_window(self, age):
        assert is_age_eligible(age) is True

    @pytest.mark.parametrize("age", [0, 18, 56, 119])
    def test_outside_window(self, age):
        assert is_age_eligible(age) is False

    def test_unknown_age_not_eligible(self):
        assert is_age_eligible(None) is False


class TestMaturityChoices:
    """Catalog filtering by current age"""

    def test_age_38(self):
        assert valid_maturity_choices(38) == (45, 50, 55, 58, 60)

    def test_age_30_gets_full_catalog(self):
        assert valid_maturity_choices(30) == MATURITY_AGE_CATALOG

    def test_age_55_only_sixty(self):
        assert valid_maturity_choices(55) == (60,)

    def test_no_age_offers_full_catalog(self):
        assert valid_maturity_choices(None) == MATURITY_AGE_CATALOG

    def test_exactly_catalog_entries_five_years_out(self):
        for age in range(19, 56):
            expected = tuple(c for c in MATURITY_AGE_CATALOG if c >= age + 5)
            assert valid_maturity_choices(age) == expected
            assert list(expected) == sorted(expected)


class TestSumAssuredAndTerm:
    @pytest.mark.parametrize("amount", [5000, 100000, 5000000])
    def test_valid_amounts(self, amount):
        assert is_sum_assured_valid(amount) is True

    @pytest.mark.parametrize("amount", [None, 0, -5000, 4999, 12345])
    def test_invalid_amounts(self, amount):
        assert is_sum_assured_valid(amount) is False

    def test_term_boundary(self):
        assert is_term_valid(50, 55) is True
        assert is_term_valid(51, 55) is False
