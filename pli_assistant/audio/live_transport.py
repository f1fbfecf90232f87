"""Gemini Live API websocket transport

Speaks the BidiGenerateContent protocol directly: JSON frames whose audio
payloads are base64 text. The transport only moves messages; interpreting
them is the session's job.

Handshake: after the socket opens the client sends its `setup` message and
the server answers with `setupComplete`. Only then is the session open.
"""

import json
from typing import Any, AsyncIterator, Dict, List, Optional

import websockets
from websockets.exceptions import ConnectionClosed, ConnectionClosedOK

from pli_assistant.config import Settings
from pli_assistant.utils.logger import get_logger

logger = get_logger(__name__)


class LiveTransportError(Exception):
    """Raised when the Live API connection fails or misbehaves."""

    pass


def _parse_frame(raw: Any) -> Dict[str, Any]:
    if isinstance(raw, (bytes, bytearray)):
        raw = raw.decode("utf-8")
    try:
        message = json.loads(raw)
    except (ValueError, UnicodeDecodeError) as e:
        raise LiveTransportError(f"Malformed frame from Live API: {e}") from e
    if not isinstance(message, dict):
        raise LiveTransportError("Malformed frame from Live API: expected an object")
    return message


class GeminiLiveTransport:
    """One websocket connection to the Live API."""

    def __init__(self, settings: Settings):
        self._settings = settings
        self._ws: Any = None

    @property
    def connected(self) -> bool:
        return self._ws is not None

    async def connect(self, setup_message: Dict[str, Any]) -> Dict[str, Any]:
        """Open the socket, send setup and wait for setupComplete.

        Raises:
            LiveTransportError: If the key is missing, the socket cannot be
                opened or the server rejects the setup
        """
        if not self._settings.gemini_api_key:
            raise LiveTransportError("GEMINI_API_KEY is not configured")

        url = f"{self._settings.live_api_url}?key={self._settings.gemini_api_key}"
        try:
            self._ws = await websockets.connect(url, max_size=None)
            await self._ws.send(json.dumps(setup_message))
            reply = _parse_frame(await self._ws.recv())
        except ConnectionClosed as e:
            raise LiveTransportError(f"Live API closed during handshake: {e}") from e
        except (OSError, websockets.exceptions.InvalidHandshake) as e:
            raise LiveTransportError(f"Could not connect to Live API: {e}") from e

        if "setupComplete" not in reply:
            raise LiveTransportError(f"Unexpected handshake reply: {list(reply)}")

        logger.info("Live API session established", model=self._settings.live_model)
        return reply

    async def send(self, message: Dict[str, Any]) -> None:
        if self._ws is None:
            raise LiveTransportError("Live API transport is not connected")
        try:
            await self._ws.send(json.dumps(message))
        except ConnectionClosed as e:
            raise LiveTransportError(f"Live API connection closed: {e}") from e

    async def messages(self) -> AsyncIterator[Dict[str, Any]]:
        """Yield inbound messages in arrival order.

        Ends normally when the server closes cleanly.

        Raises:
            LiveTransportError: On an abnormal close or a malformed frame
        """
        if self._ws is None:
            raise LiveTransportError("Live API transport is not connected")
        while True:
            try:
                raw = await self._ws.recv()
            except ConnectionClosedOK:
                logger.info("Live API closed the connection")
                return
            except ConnectionClosed as e:
                raise LiveTransportError(f"Live API connection lost: {e}") from e
            yield _parse_frame(raw)

    async def close(self) -> None:
        ws, self._ws = self._ws, None
        if ws is not None:
            await ws.close()


def extract_audio_parts(message: Dict[str, Any]) -> List[Dict[str, str]]:
    """Inline audio parts of a serverContent message, in part order"""
    server_content: Optional[Dict[str, Any]] = message.get("serverContent")
    if not server_content:
        return []
    parts = (server_content.get("modelTurn") or {}).get("parts") or []
    audio = []
    for part in parts:
        inline = part.get("inlineData")
        if inline and inline.get("data"):
            audio.append(
                {"data": inline["data"], "mime_type": inline.get("mimeType", "audio/pcm")}
            )
    return audio


def extract_function_calls(message: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Function calls of a toolCall message, in arrival order"""
    tool_call = message.get("toolCall")
    if not tool_call:
        return []
    return list(tool_call.get("functionCalls") or [])


def tool_response_message(function_responses: List[Dict[str, Any]]) -> Dict[str, Any]:
    return {"toolResponse": {"functionResponses": function_responses}}


def realtime_audio_message(encoded_pcm: str, sample_rate: int) -> Dict[str, Any]:
    return {
        "realtimeInput": {
            "mediaChunks": [
                {"mimeType": f"audio/pcm;rate={sample_rate}", "data": encoded_pcm}
            ]
        }
    }
