"""Timed field highlight events

The voice path flags the form field it just changed so the presentation
layer can draw attention to it for a few seconds. The core only records the
event and its expiry; clearing is a matter of time passing.
"""

import time
from dataclasses import dataclass
from typing import Callable, List, Optional

from pli_assistant.models.policy import PolicyField


@dataclass(frozen=True)
class HighlightEvent:
    """A highlight for one field, valid until expires_at (monotonic seconds)"""

    field: PolicyField
    emitted_at: float
    expires_at: float

    def is_active(self, now: float) -> bool:
        return now < self.expires_at


class HighlightTracker:
    """Keeps the latest highlight; a newer event replaces an older one."""

    def __init__(
        self,
        duration_seconds: float = 3.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._duration = duration_seconds
        self._clock = clock
        self._latest: Optional[HighlightEvent] = None
        self._listeners: List[Callable[[HighlightEvent], None]] = []

    def subscribe(self, listener: Callable[[HighlightEvent], None]) -> None:
        self._listeners.append(listener)

    def emit(self, field: PolicyField) -> HighlightEvent:
        now = self._clock()
        event = HighlightEvent(field=field, emitted_at=now, expires_at=now + self._duration)
        self._latest = event
        for listener in self._listeners:
            listener(event)
        return event

    def active_field(self, now: Optional[float] = None) -> Optional[PolicyField]:
        if self._latest is None:
            return None
        if not self._latest.is_active(self._clock() if now is None else now):
            return None
        return self._latest.field

    def clear(self) -> None:
        self._latest = None
