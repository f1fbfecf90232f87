"""Audio Capture Encoder

Turns microphone blocks into base64 PCM16 chunks and hands them to the
session without ever waiting on the network inside the audio callback.

The callback runs on the sound card thread: it converts and encodes the
block (O(block size)) and posts the text to the event loop. On the loop the
chunk goes into a bounded queue; when the queue is full the chunk is
dropped, keeping latency bounded. One pump task drains the queue into the
session.
"""

import asyncio
from typing import Awaitable, Callable, Optional

import numpy as np

from pli_assistant.audio.codec import encode_pcm16_to_base64, float_to_pcm16
from pli_assistant.utils.logger import get_logger

logger = get_logger(__name__)

SendChunk = Callable[[str], Awaitable[None]]


class AudioCaptureEncoder:
    """Bridges microphone callbacks to the realtime session."""

    def __init__(
        self,
        send: SendChunk,
        loop: asyncio.AbstractEventLoop,
        max_pending: int = 32,
    ):
        self._send = send
        self._loop = loop
        self._queue: asyncio.Queue[str] = asyncio.Queue(maxsize=max_pending)
        self._running = False
        self._pump_task: Optional[asyncio.Task] = None
        self.chunks_sent = 0
        self.chunks_dropped = 0

    @property
    def running(self) -> bool:
        return self._running

    def start(self) -> None:
        """Begin forwarding; must be called on the event loop"""
        if self._running:
            return
        self._running = True
        self._pump_task = self._loop.create_task(self._pump())
        logger.info("Audio capture started")

    def on_input_block(self, samples: np.ndarray) -> None:
        """Sound card callback: encode one block and post it to the loop"""
        if not self._running:
            return
        encoded = encode_pcm16_to_base64(float_to_pcm16(samples))
        self._loop.call_soon_threadsafe(self._enqueue, encoded)

    def _enqueue(self, encoded: str) -> None:
        if not self._running:
            return
        try:
            self._queue.put_nowait(encoded)
        except asyncio.QueueFull:
            self.chunks_dropped += 1
            logger.debug("Capture chunk dropped", chunks_dropped=self.chunks_dropped)

    async def _pump(self) -> None:
        while self._running:
            encoded = await self._queue.get()
            if not self._running:
                break
            try:
                await self._send(encoded)
                self.chunks_sent += 1
            except Exception as e:
                logger.warning(
                    "Error sending capture chunk",
                    error=str(e),
                    error_type=type(e).__name__,
                )

    async def stop(self) -> None:
        """Stop forwarding and discard anything not yet sent"""
        if not self._running and self._pump_task is None:
            return
        self._running = False

        if self._pump_task is not None:
            self._pump_task.cancel()
            try:
                await self._pump_task
            except asyncio.CancelledError:
                pass
            self._pump_task = None

        discarded = 0
        while not self._queue.empty():
            self._queue.get_nowait()
            discarded += 1

        logger.info(
            "Audio capture stopped",
            chunks_sent=self.chunks_sent,
            chunks_dropped=self.chunks_dropped,
            chunks_discarded=discarded,
        )
