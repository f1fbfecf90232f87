"""Policy Data Models"""

from datetime import date
from enum import Enum
from typing import Optional, Tuple

from pydantic import BaseModel, Field


class Frequency(str, Enum):
    """Premium payment frequency"""

    MONTHLY = "monthly"
    HALF_YEARLY = "half-yearly"
    YEARLY = "yearly"


PAYMENT_TEXT = {
    Frequency.MONTHLY: "Monthly",
    Frequency.HALF_YEARLY: "Half Yearly",
    Frequency.YEARLY: "Yearly",
}


class PolicyField(str, Enum):
    """Form fields that can be highlighted after a voice update"""

    DATE_OF_BIRTH = "date_of_birth"
    SUM_ASSURED = "sum_assured"
    MATURITY_AGE = "maturity_age"


class PolicyInputs(BaseModel):
    """Policy form inputs.

    The single source of truth for both the manual form and the voice
    assistant. Empty fields are None.
    """

    date_of_birth: Optional[date] = None
    sum_assured: Optional[int] = None
    maturity_age: Optional[int] = None
    payment_frequency: Frequency = Frequency.MONTHLY


class CalculationResult(BaseModel):
    """Premium and maturity figures for one complete set of inputs"""

    entry_age: int
    policy_term: int
    sum_assured: int
    maturity_age: int
    frequency: Frequency
    payment_text: str
    date_of_birth: date

    base_premium: int
    rebate_per_month: int
    rebate: int
    final_premium: int

    bonus_rate: float
    bonus_per_year: float
    total_bonus: float
    maturity_amount: float
    total_premium_paid: int
    net_return: float

    class Config:
        frozen = True


class PolicySnapshot(BaseModel):
    """Consistent read of the policy state at one instant"""

    inputs: PolicyInputs
    current_age: Optional[int] = None
    age_eligible: bool = False
    valid_maturity_choices: Tuple[int, ...] = Field(default_factory=tuple)
    result: Optional[CalculationResult] = None

    class Config:
        frozen = True


class PolicyUpdate(BaseModel):
    """Partial manual edit of the policy form"""

    date_of_birth: Optional[date] = None
    sum_assured: Optional[int] = Field(None, ge=0)
    maturity_age: Optional[int] = None
    payment_frequency: Optional[Frequency] = None
