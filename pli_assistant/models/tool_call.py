"""Tool Call Data Models"""

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class ToolName(str, Enum):
    """Functions the voice model may call"""

    SET_DATE_OF_BIRTH = "set_date_of_birth"
    SET_SUM_ASSURED = "set_sum_assured"
    SET_MATURITY_AGE = "set_maturity_age"


class OutcomeStatus(str, Enum):
    SUCCESS = "success"
    ERROR = "error"


class ToolCallRequest(BaseModel):
    """One function call emitted by the model.

    `name` is kept as a plain string so that unknown function names can be
    answered with an error outcome instead of failing validation.
    """

    id: Optional[str] = None
    name: str
    args: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_wire(cls, call: Any) -> "ToolCallRequest":
        """Build a request from one Live API functionCalls entry.

        Malformed fields are coerced to empty values so the router can answer
        the call with an error outcome instead of failing the whole batch.
        """
        if not isinstance(call, dict):
            call = {}
        call_id = call.get("id")
        name = call.get("name")
        args = call.get("args")
        return cls(
            id=str(call_id) if call_id is not None else None,
            name=name if isinstance(name, str) else "",
            args=args if isinstance(args, dict) else {},
        )


class ToolCallOutcome(BaseModel):
    """Result of one tool call, sent back to the model"""

    id: Optional[str] = None
    name: str
    status: OutcomeStatus
    message: str

    def to_function_response(self) -> Dict[str, Any]:
        """Wire form of a single Live API function response"""
        response: Dict[str, Any] = {
            "name": self.name,
            "response": {"result": self.message},
        }
        if self.id is not None:
            response["id"] = self.id
        return response
