"""Voice Assistant Service

Keeps at most one live RealtimeSession. A closed session is discarded and
the next start builds a fresh one; there is no automatic retry.
"""

from functools import lru_cache
from typing import Callable, Optional

from pli_assistant.audio.realtime_session import RealtimeSession
from pli_assistant.config import Settings, get_settings
from pli_assistant.models.session import (
    STATUS_READY,
    AssistantStatus,
    SessionState,
)
from pli_assistant.services.highlight import HighlightTracker
from pli_assistant.services.policy_store import PolicyStore, get_policy_store
from pli_assistant.tools.router import ToolInvocationRouter
from pli_assistant.utils.logger import get_logger

logger = get_logger(__name__)

SessionFactory = Callable[[PolicyStore, ToolInvocationRouter, Settings], RealtimeSession]

LIVE_STATES = (SessionState.CONNECTING, SessionState.ACTIVE)


def _default_session_factory(
    store: PolicyStore, router: ToolInvocationRouter, settings: Settings
) -> RealtimeSession:
    return RealtimeSession(store, router, settings)


class AssistantService:
    """Starts, stops and reports on the single voice session."""

    def __init__(
        self,
        store: PolicyStore,
        settings: Settings,
        highlights: Optional[HighlightTracker] = None,
        session_factory: SessionFactory = _default_session_factory,
    ):
        self._store = store
        self._settings = settings
        self.highlights = highlights or HighlightTracker(settings.highlight_seconds)
        self._router = ToolInvocationRouter(store, self.highlights)
        self._session_factory = session_factory
        self._session: Optional[RealtimeSession] = None

    @property
    def session(self) -> Optional[RealtimeSession]:
        return self._session

    def _is_live(self) -> bool:
        return self._session is not None and self._session.state in LIVE_STATES

    async def start(self) -> AssistantStatus:
        if self._is_live():
            logger.info(
                "Voice session already live",
                session_id=self._session.session_id,
                state=self._session.state.value,
            )
            return self.status()

        self._session = self._session_factory(self._store, self._router, self._settings)
        await self._session.start()
        return self.status()

    async def stop(self) -> AssistantStatus:
        if self._session is not None:
            await self._session.stop()
        self.highlights.clear()
        return self.status()

    def status(self) -> AssistantStatus:
        if self._session is None:
            return AssistantStatus(
                state=SessionState.IDLE,
                active=False,
                status=STATUS_READY,
                highlighted_field=self.highlights.active_field(),
            )
        return AssistantStatus(
            state=self._session.state,
            active=self._session.is_active,
            status=self._session.status,
            highlighted_field=self.highlights.active_field(),
        )


@lru_cache()
def get_assistant_service() -> AssistantService:
    """Get the application-wide assistant service"""
    return AssistantService(store=get_policy_store(), settings=get_settings())
