"""Voice Session Data Models"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel

from pli_assistant.models.policy import PolicyField


class SessionState(str, Enum):
    """Realtime session lifecycle states.

    IDLE -> CONNECTING -> ACTIVE -> CLOSING -> CLOSED

    Any failure forces the session through cleanup to CLOSED. A closed
    session is never reopened; starting again creates a new session.
    """

    IDLE = "idle"
    CONNECTING = "connecting"
    ACTIVE = "active"
    CLOSING = "closing"
    CLOSED = "closed"


STATUS_READY = 'Assistant ready. Say "Hi Gopal"'
STATUS_INITIALIZING = "Initializing..."
STATUS_WAKE_WORD = 'Say "Hi Gopal"'
STATUS_LISTENING = "Gopal is listening..."
STATUS_SPEAKING = "Gopal is speaking..."
STATUS_ERROR = "Error happened."


class AssistantStatus(BaseModel):
    """API response model for the voice assistant"""

    state: SessionState
    active: bool
    status: str
    highlighted_field: Optional[PolicyField] = None

    class Config:
        use_enum_values = True
