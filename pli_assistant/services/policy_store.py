"""Policy State Container

Owns the single PolicyInputs instance. The manual form path and the voice
tool router both write through this container, and every read used for a
validation decision is taken from it at call time. Derived values (age,
maturity choices, the quote) are recomputed on every read so they never go
stale across a date boundary.
"""

from datetime import date
from functools import lru_cache
from typing import Callable, List, Optional, Tuple

from pli_assistant.config import get_settings
from pli_assistant.models.policy import (
    CalculationResult,
    Frequency,
    PolicyInputs,
    PolicySnapshot,
    PolicyUpdate,
)
from pli_assistant.services.eligibility import (
    age_from_date,
    is_age_eligible,
    valid_maturity_choices,
)
from pli_assistant.services.premium_engine import calculate_premium
from pli_assistant.services.rate_tables import RateTables
from pli_assistant.utils.logger import get_logger

logger = get_logger(__name__)

PolicyListener = Callable[[PolicySnapshot], None]


class PolicyValidationError(ValueError):
    """Raised when a manual edit is rejected by the eligibility rules."""

    pass


class PolicyStore:
    """Single mutation point for the policy form inputs."""

    def __init__(
        self,
        rate_tables: RateTables,
        bonus_rate: float,
        today: Callable[[], date] = date.today,
    ):
        self._rate_tables = rate_tables
        self._bonus_rate = bonus_rate
        self._today = today
        self._inputs = PolicyInputs()
        self._listeners: List[PolicyListener] = []

    @property
    def rate_tables(self) -> RateTables:
        return self._rate_tables

    @property
    def inputs(self) -> PolicyInputs:
        return self._inputs.model_copy()

    def subscribe(self, listener: PolicyListener) -> None:
        """Register a callback invoked with a fresh snapshot after every change"""
        self._listeners.append(listener)

    # Derived reads

    def age_for(self, birth_date: Optional[date]) -> Optional[int]:
        if birth_date is None:
            return None
        return age_from_date(birth_date, self._today())

    def current_age(self) -> Optional[int]:
        return self.age_for(self._inputs.date_of_birth)

    def valid_maturity_choices(self) -> Tuple[int, ...]:
        return valid_maturity_choices(self.current_age())

    def calculate(self) -> Optional[CalculationResult]:
        return calculate_premium(
            self._inputs, self.current_age(), self._rate_tables, self._bonus_rate
        )

    def snapshot(self) -> PolicySnapshot:
        age = self.current_age()
        return PolicySnapshot(
            inputs=self.inputs,
            current_age=age,
            age_eligible=is_age_eligible(age),
            valid_maturity_choices=valid_maturity_choices(age),
            result=calculate_premium(self._inputs, age, self._rate_tables, self._bonus_rate),
        )

    # Writes

    def set_date_of_birth(self, birth_date: Optional[date]) -> None:
        self._inputs.date_of_birth = birth_date
        self._sync_maturity_age()
        self._changed("date_of_birth")

    def set_sum_assured(self, amount: Optional[int]) -> None:
        self._inputs.sum_assured = amount
        self._changed("sum_assured")

    def set_maturity_age(self, maturity_age: Optional[int]) -> None:
        self._inputs.maturity_age = maturity_age
        self._changed("maturity_age")

    def set_frequency(self, frequency: Frequency) -> None:
        self._inputs.payment_frequency = frequency
        self._changed("payment_frequency")

    def apply_update(self, update: PolicyUpdate) -> PolicySnapshot:
        """Apply a manual form edit.

        The maturity age is checked against the choices for the date of birth
        the edit leaves in place; a rejected edit changes nothing.

        Raises:
            PolicyValidationError: If the maturity age is not a valid choice
        """
        fields = update.model_fields_set

        if "maturity_age" in fields and update.maturity_age is not None:
            birth_date = (
                update.date_of_birth if "date_of_birth" in fields else self._inputs.date_of_birth
            )
            choices = valid_maturity_choices(self.age_for(birth_date))
            if update.maturity_age not in choices:
                raise PolicyValidationError(
                    f"Maturity age {update.maturity_age} is not one of {list(choices)}"
                )

        if "date_of_birth" in fields:
            self.set_date_of_birth(update.date_of_birth)
        if "sum_assured" in fields:
            self.set_sum_assured(update.sum_assured)
        if "payment_frequency" in fields and update.payment_frequency is not None:
            self.set_frequency(update.payment_frequency)
        if "maturity_age" in fields:
            self.set_maturity_age(update.maturity_age)

        return self.snapshot()

    def reset(self) -> None:
        self._inputs = PolicyInputs()
        self._changed("reset")

    def _sync_maturity_age(self) -> None:
        """Keep the maturity age on a valid choice once a birth date is known"""
        if self._inputs.date_of_birth is None:
            return
        choices = self.valid_maturity_choices()
        if choices and self._inputs.maturity_age not in choices:
            logger.debug(
                "Maturity age moved to latest valid choice",
                previous=self._inputs.maturity_age,
                maturity_age=choices[-1],
            )
            self._inputs.maturity_age = choices[-1]

    def _changed(self, field: str) -> None:
        logger.debug("Policy input changed", field=field)
        if not self._listeners:
            return
        snapshot = self.snapshot()
        for listener in self._listeners:
            listener(snapshot)


@lru_cache()
def get_policy_store() -> PolicyStore:
    """Get the application-wide policy store"""
    settings = get_settings()
    rate_tables = RateTables.from_file(settings.resolved_rate_tables_path)
    return PolicyStore(rate_tables=rate_tables, bonus_rate=settings.bonus_rate)
