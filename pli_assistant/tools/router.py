"""Tool Invocation Router

Applies function calls from the voice model to the policy store. Each call is
validated against the eligibility rules using the store's state at the moment
the call is handled, so a date of birth set earlier in the same batch is
already in effect for a following maturity-age call.
"""

import math
from datetime import date
from typing import Any, Callable, Dict, Iterable, List

from pli_assistant.models.policy import PolicyField
from pli_assistant.models.tool_call import (
    OutcomeStatus,
    ToolCallOutcome,
    ToolCallRequest,
    ToolName,
)
from pli_assistant.services.eligibility import is_age_eligible
from pli_assistant.services.highlight import HighlightTracker
from pli_assistant.services.policy_store import PolicyStore
from pli_assistant.utils.logger import get_logger

logger = get_logger(__name__)

MSG_UPDATED = "Updated successfully."
MSG_AGE_INELIGIBLE = "Error: Eligibility age is 19 to 55 years."
MSG_MATURITY_TOO_CLOSE = "Error: Maturity must be at least 5 years away."
MSG_BAD_DATE = "Error: Date of birth must be in YYYY-MM-DD format."
MSG_BAD_AMOUNT = "Error: Sum assured must be a number."
MSG_BAD_MATURITY = "Error: Maturity age must be a whole number of years."


class ToolArgumentError(ValueError):
    """Raised when a tool call argument is missing or cannot be parsed."""

    def __init__(self, outcome_message: str):
        super().__init__(outcome_message)
        self.outcome_message = outcome_message


def _number_arg(args: Dict[str, Any], key: str, error_message: str) -> float:
    try:
        value = float(args[key])
    except (KeyError, TypeError, ValueError):
        raise ToolArgumentError(error_message)
    if not math.isfinite(value):
        raise ToolArgumentError(error_message)
    return value


def _date_arg(args: Dict[str, Any], key: str) -> date:
    try:
        return date.fromisoformat(str(args[key]).strip())
    except (KeyError, ValueError):
        raise ToolArgumentError(MSG_BAD_DATE)


class ToolInvocationRouter:
    """Maps model function calls onto validated policy store writes."""

    def __init__(self, store: PolicyStore, highlights: HighlightTracker):
        self._store = store
        self._highlights = highlights
        self._handlers: Dict[str, Callable[[ToolCallRequest], ToolCallOutcome]] = {
            ToolName.SET_DATE_OF_BIRTH.value: self._set_date_of_birth,
            ToolName.SET_SUM_ASSURED.value: self._set_sum_assured,
            ToolName.SET_MATURITY_AGE.value: self._set_maturity_age,
        }

    def apply_batch(self, requests: Iterable[ToolCallRequest]) -> List[ToolCallOutcome]:
        """Apply calls in arrival order, one outcome per call, same order"""
        return [self.apply(request) for request in requests]

    def apply(self, request: ToolCallRequest) -> ToolCallOutcome:
        handler = self._handlers.get(request.name)

        if handler is None:
            outcome = self._outcome(
                request, OutcomeStatus.ERROR, f"Error: Unknown function {request.name}."
            )
        else:
            try:
                outcome = handler(request)
            except ToolArgumentError as e:
                outcome = self._outcome(request, OutcomeStatus.ERROR, e.outcome_message)

        logger.log_tool_call(
            request.name,
            request.id,
            success=outcome.status == OutcomeStatus.SUCCESS,
            message=outcome.message,
            args=request.args,
        )
        return outcome

    def _set_date_of_birth(self, request: ToolCallRequest) -> ToolCallOutcome:
        birth_date = _date_arg(request.args, "date")
        age = self._store.age_for(birth_date)
        if not is_age_eligible(age):
            return self._outcome(request, OutcomeStatus.ERROR, MSG_AGE_INELIGIBLE)

        self._store.set_date_of_birth(birth_date)
        self._highlights.emit(PolicyField.DATE_OF_BIRTH)
        return self._outcome(request, OutcomeStatus.SUCCESS, MSG_UPDATED)

    def _set_sum_assured(self, request: ToolCallRequest) -> ToolCallOutcome:
        # Not checked against the 5000 step here; an invalid amount simply
        # leaves the quote uncomputable.
        amount = _number_arg(request.args, "amount", MSG_BAD_AMOUNT)
        self._store.set_sum_assured(int(math.floor(amount + 0.5)))
        self._highlights.emit(PolicyField.SUM_ASSURED)
        return self._outcome(request, OutcomeStatus.SUCCESS, MSG_UPDATED)

    def _set_maturity_age(self, request: ToolCallRequest) -> ToolCallOutcome:
        choice = _number_arg(request.args, "age", MSG_BAD_MATURITY)
        if not choice.is_integer():
            return self._outcome(request, OutcomeStatus.ERROR, MSG_BAD_MATURITY)

        maturity_age = int(choice)
        if maturity_age not in self._store.valid_maturity_choices():
            return self._outcome(request, OutcomeStatus.ERROR, MSG_MATURITY_TOO_CLOSE)

        self._store.set_maturity_age(maturity_age)
        self._highlights.emit(PolicyField.MATURITY_AGE)
        return self._outcome(request, OutcomeStatus.SUCCESS, MSG_UPDATED)

    @staticmethod
    def _outcome(
        request: ToolCallRequest, status: OutcomeStatus, message: str
    ) -> ToolCallOutcome:
        return ToolCallOutcome(id=request.id, name=request.name, status=status, message=message)
