"""Tests for the single-session voice assistant service"""

import pytest
from unittest.mock import AsyncMock, Mock

from pli_assistant.config import Settings
from pli_assistant.models.policy import PolicyField
from pli_assistant.models.session import (
    STATUS_LISTENING,
    STATUS_READY,
    SessionState,
)
from pli_assistant.services.assistant_service import AssistantService


class FakeSession:
    """Session double that reaches ACTIVE on start."""

    def __init__(self, fail: bool = False):
        self.session_id = "voice-test"
        self.state = SessionState.IDLE
        self.status = STATUS_READY
        self.fail = fail
        self.start_calls = 0
        self.stop_calls = 0

    @property
    def is_active(self):
        return self.state == SessionState.ACTIVE

    async def start(self):
        self.start_calls += 1
        if self.fail:
            self.state = SessionState.CLOSED
            self.status = "Microphone unavailable: no device"
            return False
        self.state = SessionState.ACTIVE
        self.status = STATUS_LISTENING
        return True

    async def stop(self):
        self.stop_calls += 1
        self.state = SessionState.CLOSED
        self.status = STATUS_READY


@pytest.fixture
def settings():
    return Settings(gemini_api_key="test-key")


@pytest.fixture
def sessions():
    return []


@pytest.fixture
def service(store, settings, highlights, sessions):
    def factory(store, router, settings):
        session = FakeSession()
        sessions.append(session)
        return session

    return AssistantService(store, settings, highlights=highlights, session_factory=factory)


class TestAssistantService:
    def test_initial_status(self, service):
        status = service.status()

        assert status.state == SessionState.IDLE.value
        assert status.active is False
        assert status.status == STATUS_READY
        assert status.highlighted_field is None

    @pytest.mark.asyncio
    async def test_start_activates_session(self, service, sessions):
        status = await service.start()

        assert len(sessions) == 1
        assert status.active is True
        assert status.status == STATUS_LISTENING

    @pytest.mark.asyncio
    async def test_second_start_reuses_live_session(self, service, sessions):
        await service.start()
        await service.start()

        assert len(sessions) == 1
        assert sessions[0].start_calls == 1

    @pytest.mark.asyncio
    async def test_start_after_stop_builds_new_session(self, service, sessions):
        await service.start()
        await service.stop()
        status = await service.start()

        assert len(sessions) == 2
        assert status.active is True

    @pytest.mark.asyncio
    async def test_stop_without_session(self, service):
        status = await service.stop()
        assert status.state == SessionState.IDLE.value

    @pytest.mark.asyncio
    async def test_stop_clears_highlight(self, service):
        await service.start()
        service.highlights.emit(PolicyField.SUM_ASSURED)
        assert service.status().highlighted_field == PolicyField.SUM_ASSURED.value

        status = await service.stop()

        assert status.highlighted_field is None
        assert status.state == SessionState.CLOSED.value

    @pytest.mark.asyncio
    async def test_failed_start_reports_reason(self, store, settings):
        service = AssistantService(
            store, settings, session_factory=lambda *args: FakeSession(fail=True)
        )

        status = await service.start()

        assert status.active is False
        assert status.status.startswith("Microphone unavailable")

    def test_tool_router_shares_store(self, service, store):
        """Tool calls routed by the service land in the same policy store"""
        from pli_assistant.models.tool_call import ToolCallRequest

        service._router.apply(
            ToolCallRequest(id="1", name="set_sum_assured", args={"amount": 100000})
        )

        assert store.inputs.sum_assured == 100000
        assert service.status().highlighted_field == PolicyField.SUM_ASSURED.value
