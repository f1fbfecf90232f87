"""Eligibility Rules for PLI Santosh

Stateless predicates shared by the manual form path and the voice tool path.
Every eligibility decision in the application goes through these functions.
"""

from datetime import date
from typing import Optional, Tuple

MIN_ENTRY_AGE = 19
MAX_ENTRY_AGE = 55
MATURITY_AGE_CATALOG: Tuple[int, ...] = (35, 40, 45, 50, 55, 58, 60)
MIN_TERM_YEARS = 5
SUM_ASSURED_STEP = 5000
REBATE_STEP = 20000


def age_from_date(birth_date: date, today: Optional[date] = None) -> int:
    """Whole years between birth_date and today.

    Subtracts calendar years and takes one off when today's month/day is
    still before the birthday.
    """
    today = today or date.today()
    age = today.year - birth_date.year
    if (today.month, today.day) < (birth_date.month, birth_date.day):
        age -= 1
    return age


def is_age_eligible(age: Optional[int]) -> bool:
    """Entry age must be within 19-55 inclusive"""
    return age is not None and MIN_ENTRY_AGE <= age <= MAX_ENTRY_AGE


def valid_maturity_choices(age: Optional[int]) -> Tuple[int, ...]:
    """Catalog maturity ages at least MIN_TERM_YEARS after the current age.

    With no known age every catalog entry is offered.
    """
    if age is None:
        return MATURITY_AGE_CATALOG
    return tuple(choice for choice in MATURITY_AGE_CATALOG if choice >= age + MIN_TERM_YEARS)


def is_sum_assured_valid(amount: Optional[int]) -> bool:
    """Sum assured must be a positive multiple of 5000"""
    return amount is not None and amount > 0 and amount % SUM_ASSURED_STEP == 0


def is_term_valid(entry_age: int, maturity_age: int) -> bool:
    return maturity_age - entry_age >= MIN_TERM_YEARS
