"""Realtime voice session with the Gemini Live API

Owns one start-to-stop conversation: the microphone, the speaker, the live
transport and the receive loop that routes inbound speech to playback and
inbound tool calls to the tool router.

Lifecycle:
    IDLE -> CONNECTING   start(): acquire speaker and microphone
    CONNECTING -> ACTIVE handshake done, capture begins
    ACTIVE -> CLOSING -> CLOSED
                         stop(), transport error or server close

Every exit path releases, in order, the capture stream, the microphone, the
speaker and the transport. Each release is attempted even if an earlier one
fails.
"""

import asyncio
import uuid
from typing import Any, Callable, Dict, List, Optional

from pli_assistant.agents.gopal_agent import build_setup_message
from pli_assistant.audio.capture import AudioCaptureEncoder
from pli_assistant.audio.codec import (
    AudioCodecError,
    decode_base64_to_pcm16,
    frames_to_playable_buffer,
    sample_rate_from_mime,
)
from pli_assistant.audio.devices import (
    AudioDeviceError,
    AudioDeviceFactory,
    InputDevice,
    OutputDevice,
    SoundDeviceFactory,
)
from pli_assistant.audio.live_transport import (
    GeminiLiveTransport,
    LiveTransportError,
    extract_audio_parts,
    extract_function_calls,
    realtime_audio_message,
    tool_response_message,
)
from pli_assistant.audio.playback import AudioPlaybackScheduler
from pli_assistant.config import Settings
from pli_assistant.models.session import (
    STATUS_ERROR,
    STATUS_INITIALIZING,
    STATUS_LISTENING,
    STATUS_READY,
    STATUS_SPEAKING,
    STATUS_WAKE_WORD,
    SessionState,
)
from pli_assistant.models.tool_call import ToolCallRequest
from pli_assistant.services.policy_store import PolicyStore
from pli_assistant.tools.router import ToolInvocationRouter
from pli_assistant.utils.logger import get_logger, set_trace_id

logger = get_logger(__name__)

TransportFactory = Callable[[Settings], Any]
StatusListener = Callable[[str], None]


class RealtimeSession:
    """One voice conversation with the remote model."""

    def __init__(
        self,
        store: PolicyStore,
        router: ToolInvocationRouter,
        settings: Settings,
        devices: Optional[AudioDeviceFactory] = None,
        transport_factory: TransportFactory = GeminiLiveTransport,
        on_status: Optional[StatusListener] = None,
    ):
        self.session_id = f"voice-{uuid.uuid4().hex[:12]}"
        self._store = store
        self._router = router
        self._settings = settings
        self._devices = devices or SoundDeviceFactory()
        self._transport_factory = transport_factory
        self._on_status = on_status

        self._state = SessionState.IDLE
        self._status = STATUS_READY
        self._capture: Optional[AudioCaptureEncoder] = None
        self._input: Optional[InputDevice] = None
        self._output: Optional[OutputDevice] = None
        self._transport: Any = None
        self._scheduler: Optional[AudioPlaybackScheduler] = None
        self._receiver: Optional[asyncio.Task] = None

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def status(self) -> str:
        return self._status

    @property
    def is_active(self) -> bool:
        return self._state == SessionState.ACTIVE

    def _set_status(self, status: str) -> None:
        self._status = status
        if self._on_status is not None:
            self._on_status(status)

    async def start(self) -> bool:
        """Acquire devices, connect and begin the conversation.

        Returns:
            True when the session reached ACTIVE. On failure the session is
            CLOSED, everything acquired so far is released and the status
            explains what went wrong.
        """
        if self._state != SessionState.IDLE:
            logger.warning(
                "Session already started", session_id=self.session_id, state=self._state.value
            )
            return self._state == SessionState.ACTIVE

        set_trace_id(self.session_id)
        self._state = SessionState.CONNECTING
        self._set_status(STATUS_INITIALIZING)
        logger.info("Voice session starting", session_id=self.session_id)

        loop = asyncio.get_running_loop()
        try:
            self._output = self._devices.open_output(self._settings.output_sample_rate, loop)
            self._scheduler = AudioPlaybackScheduler(self._output)
            self._capture = AudioCaptureEncoder(
                self.send_audio, loop, max_pending=self._settings.capture_queue_size
            )
            self._input = self._devices.open_input(
                self._settings.input_sample_rate,
                self._settings.capture_block_size,
                self._capture.on_input_block,
            )
            self._set_status(STATUS_WAKE_WORD)

            transport = self._transport_factory(self._settings)
            self._transport = transport
            # Prompt reflects the form as it is right now, not at construction
            setup = build_setup_message(self._store.snapshot(), self._settings)
            await transport.connect(setup)
        except AudioDeviceError as e:
            logger.error("Audio device unavailable", session_id=self.session_id, error=str(e))
            await self._shutdown(f"Microphone unavailable: {e}")
            return False
        except Exception as e:
            logger.error(
                "Voice session failed to start",
                session_id=self.session_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            await self._shutdown(STATUS_ERROR)
            return False

        if self._state != SessionState.CONNECTING:
            # stop() ran while the handshake was in flight; its close found no
            # socket yet, so release the one the handshake just opened
            try:
                await transport.close()
            except Exception as e:
                logger.warning(
                    "Error closing transport opened after stop",
                    session_id=self.session_id,
                    error=str(e),
                )
            return False

        self._on_open()
        return True

    def _on_open(self) -> None:
        self._state = SessionState.ACTIVE
        self._capture.start()
        self._input.start()
        self._receiver = asyncio.get_running_loop().create_task(self._receive_loop())
        self._set_status(STATUS_LISTENING)
        logger.info("Voice session active", session_id=self.session_id)

    async def send_audio(self, encoded_pcm: str) -> None:
        """Forward one base64 PCM16 chunk; ignored unless the session is active"""
        if self._state != SessionState.ACTIVE:
            return
        await self._transport.send(
            realtime_audio_message(encoded_pcm, self._settings.input_sample_rate)
        )

    async def _receive_loop(self) -> None:
        try:
            async for message in self._transport.messages():
                await self.handle_message(message)
        except LiveTransportError as e:
            logger.error("Live transport error", session_id=self.session_id, error=str(e))
            await self._shutdown(STATUS_ERROR)
            return
        except Exception as e:
            logger.error(
                "Error handling Live API message",
                session_id=self.session_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            await self._shutdown(STATUS_ERROR)
            return

        logger.info("Live session closed by server", session_id=self.session_id)
        await self._shutdown(STATUS_READY)

    async def handle_message(self, message: Dict[str, Any]) -> None:
        """Dispatch one inbound message: speech audio and/or a tool-call batch"""
        if self._state != SessionState.ACTIVE:
            return

        for part in extract_audio_parts(message):
            self._play(part["data"], part["mime_type"])

        calls = extract_function_calls(message)
        if calls:
            await self._answer_tool_calls(calls)

        if "goAway" in message:
            logger.warning(
                "Live API announced disconnect",
                session_id=self.session_id,
                time_left=message["goAway"].get("timeLeft"),
            )

    def _play(self, encoded: str, mime_type: str) -> None:
        try:
            buffer = frames_to_playable_buffer(
                decode_base64_to_pcm16(encoded),
                sample_rate_from_mime(mime_type, self._settings.output_sample_rate),
            )
        except AudioCodecError as e:
            logger.warning("Dropping undecodable audio", session_id=self.session_id, error=str(e))
            return

        self._set_status(STATUS_SPEAKING)
        self._scheduler.schedule(buffer, on_ended=self._on_clip_ended)

    def _on_clip_ended(self) -> None:
        if self._state == SessionState.ACTIVE:
            self._set_status(STATUS_LISTENING)

    async def _answer_tool_calls(self, calls: List[Dict[str, Any]]) -> None:
        requests = [ToolCallRequest.from_wire(call) for call in calls]
        outcomes = self._router.apply_batch(requests)
        await self._transport.send(
            tool_response_message([outcome.to_function_response() for outcome in outcomes])
        )

    async def stop(self) -> None:
        """End the session; calling it again once closed does nothing"""
        await self._shutdown(STATUS_READY)

    async def _shutdown(self, final_status: str) -> None:
        if self._state in (SessionState.CLOSING, SessionState.CLOSED):
            return
        self._state = SessionState.CLOSING
        logger.info("Voice session closing", session_id=self.session_id)

        receiver, self._receiver = self._receiver, None
        if receiver is not None and receiver is not asyncio.current_task():
            receiver.cancel()
            try:
                await receiver
            except asyncio.CancelledError:
                pass

        if self._capture is not None:
            try:
                await self._capture.stop()
            except Exception as e:
                logger.warning("Error stopping capture", session_id=self.session_id, error=str(e))

        for name, device in (("input", self._input), ("output", self._output)):
            if device is None:
                continue
            try:
                device.close()
            except Exception as e:
                logger.warning(
                    "Error closing audio device",
                    session_id=self.session_id,
                    device=name,
                    error=str(e),
                )

        if self._transport is not None:
            try:
                await self._transport.close()
            except Exception as e:
                logger.warning("Error closing transport", session_id=self.session_id, error=str(e))

        self._capture = None
        self._input = None
        self._output = None
        self._transport = None
        self._state = SessionState.CLOSED
        self._set_status(final_status)
        logger.info("Voice session closed", session_id=self.session_id, status=final_status)
