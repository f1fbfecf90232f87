"""Premium Engine

Pure calculation of premium, rebate, bonus and maturity value from the
policy inputs and the current entry age. No state, no side effects: call it
again whenever the inputs or the date change.
"""

import math
from typing import Optional

from pli_assistant.models.policy import (
    PAYMENT_TEXT,
    CalculationResult,
    Frequency,
    PolicyInputs,
)
from pli_assistant.services.eligibility import (
    REBATE_STEP,
    SUM_ASSURED_STEP,
    is_age_eligible,
    is_sum_assured_valid,
    is_term_valid,
    valid_maturity_choices,
)
from pli_assistant.services.rate_tables import RateTables

# frequency -> (payments per year, rebate multiplier per payment)
FREQUENCY_FACTORS = {
    Frequency.MONTHLY: (12, 1),
    Frequency.HALF_YEARLY: (2, 6),
    Frequency.YEARLY: (1, 12),
}


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def calculate_premium(
    inputs: PolicyInputs,
    entry_age: Optional[int],
    rate_tables: RateTables,
    bonus_rate: float,
) -> Optional[CalculationResult]:
    """Compute the quote for the given inputs.

    Args:
        inputs: Current policy form inputs
        entry_age: Age derived from the date of birth at calculation time
        rate_tables: Premium rates per 5000 sum assured
        bonus_rate: Bonus per 1000 sum assured per policy year

    Returns:
        CalculationResult, or None when the inputs are incomplete, ineligible
        or the age/maturity pair is not in the rate table
    """
    if inputs.date_of_birth is None or entry_age is None:
        return None
    if inputs.sum_assured is None or inputs.maturity_age is None:
        return None
    if not is_age_eligible(entry_age):
        return None
    if not is_sum_assured_valid(inputs.sum_assured):
        return None
    if inputs.maturity_age not in valid_maturity_choices(entry_age):
        return None
    if not is_term_valid(entry_age, inputs.maturity_age):
        return None

    sum_assured = inputs.sum_assured
    maturity_age = inputs.maturity_age
    frequency = inputs.payment_frequency
    term = maturity_age - entry_age
    payments_per_year, rebate_multiplier = FREQUENCY_FACTORS[frequency]

    rate = rate_tables.rate(frequency, entry_age, maturity_age)
    if rate is None:
        return None

    base_premium = _round_half_up(sum_assured / SUM_ASSURED_STEP * rate)
    rebate_per_month = sum_assured // REBATE_STEP
    rebate = rebate_per_month * rebate_multiplier
    final_premium = max(0, base_premium - rebate)

    bonus_per_year = sum_assured / 1000 * bonus_rate
    total_bonus = bonus_per_year * term
    maturity_amount = sum_assured + total_bonus
    total_premium_paid = final_premium * payments_per_year * term

    return CalculationResult(
        entry_age=entry_age,
        policy_term=term,
        sum_assured=sum_assured,
        maturity_age=maturity_age,
        frequency=frequency,
        payment_text=PAYMENT_TEXT[frequency],
        date_of_birth=inputs.date_of_birth,
        base_premium=base_premium,
        rebate_per_month=rebate_per_month,
        rebate=rebate,
        final_premium=final_premium,
        bonus_rate=bonus_rate,
        bonus_per_year=bonus_per_year,
        total_bonus=total_bonus,
        maturity_amount=maturity_amount,
        total_premium_paid=total_premium_paid,
        net_return=maturity_amount - total_premium_paid,
    )
