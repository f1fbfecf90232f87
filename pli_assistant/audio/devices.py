"""Sound card access for the voice assistant

Input and output devices are opened through `sounddevice` (PortAudio).
Both run their callbacks on the audio library's thread; anything that must
touch application state is handed to the event loop with
`call_soon_threadsafe`.

The output device keeps its own clock: seconds of audio rendered since the
stream opened. Clips are placed on that timeline at an absolute start time
and mixed in as the stream reaches them.
"""

import asyncio
import threading
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Protocol

import numpy as np

from pli_assistant.audio.codec import PlayableBuffer
from pli_assistant.utils.logger import get_logger

logger = get_logger(__name__)

BlockCallback = Callable[[np.ndarray], None]


class AudioDeviceError(Exception):
    """Raised when a microphone or speaker cannot be opened."""

    pass


class InputDevice(Protocol):
    def start(self) -> None: ...

    def close(self) -> None: ...


class OutputDevice(Protocol):
    @property
    def current_time(self) -> float: ...

    def play_at(
        self,
        buffer: PlayableBuffer,
        start_time: float,
        on_ended: Optional[Callable[[], None]] = None,
    ) -> float: ...

    def close(self) -> None: ...


class AudioDeviceFactory(Protocol):
    def open_input(
        self, sample_rate: int, block_size: int, on_block: BlockCallback
    ) -> InputDevice: ...

    def open_output(
        self, sample_rate: int, loop: asyncio.AbstractEventLoop
    ) -> OutputDevice: ...


def _sounddevice() -> Any:
    """Import sounddevice lazily; it loads PortAudio at import time"""
    try:
        import sounddevice
    except OSError as e:
        raise AudioDeviceError(f"PortAudio library not available: {e}") from e
    return sounddevice


class SoundDeviceInput:
    """Mono float32 microphone stream delivering fixed-size blocks."""

    def __init__(self, sample_rate: int, block_size: int, on_block: BlockCallback):
        sd = _sounddevice()
        self._on_block = on_block
        try:
            self._stream = sd.InputStream(
                samplerate=sample_rate,
                channels=1,
                dtype="float32",
                blocksize=block_size,
                callback=self._callback,
            )
        except sd.PortAudioError as e:
            raise AudioDeviceError(str(e)) from e

        logger.info("Input device opened", sample_rate=sample_rate, block_size=block_size)

    def _callback(self, indata, frames, time_info, status) -> None:
        if status:
            logger.debug("Input stream status", status=str(status))
        self._on_block(indata[:, 0])

    def start(self) -> None:
        self._stream.start()

    def close(self) -> None:
        self._stream.stop()
        self._stream.close()
        logger.info("Input device closed")


@dataclass
class _Clip:
    start_frame: int
    samples: np.ndarray
    on_ended: Optional[Callable[[], None]]

    @property
    def end_frame(self) -> int:
        return self.start_frame + len(self.samples)


class SoundDeviceOutput:
    """Mono float32 speaker stream that plays clips at scheduled times."""

    def __init__(self, sample_rate: int, loop: asyncio.AbstractEventLoop):
        sd = _sounddevice()
        self._sample_rate = sample_rate
        self._loop = loop
        self._lock = threading.Lock()
        self._clips: List[_Clip] = []
        self._frames_rendered = 0
        try:
            self._stream = sd.OutputStream(
                samplerate=sample_rate,
                channels=1,
                dtype="float32",
                callback=self._render,
            )
            self._stream.start()
        except sd.PortAudioError as e:
            raise AudioDeviceError(str(e)) from e

        logger.info("Output device opened", sample_rate=sample_rate)

    @property
    def current_time(self) -> float:
        with self._lock:
            return self._frames_rendered / self._sample_rate

    def play_at(
        self,
        buffer: PlayableBuffer,
        start_time: float,
        on_ended: Optional[Callable[[], None]] = None,
    ) -> float:
        """Queue a clip; returns the start time actually used, in seconds"""
        start_frame = int(round(start_time * self._sample_rate))
        with self._lock:
            # The stream may have moved past the requested start meanwhile
            start_frame = max(start_frame, self._frames_rendered)
            self._clips.append(_Clip(start_frame, buffer.channels[0], on_ended))
        return start_frame / self._sample_rate

    def _render(self, outdata, frames, time_info, status) -> None:
        outdata.fill(0)
        finished: List[_Clip] = []
        remaining: List[_Clip] = []
        with self._lock:
            window_start = self._frames_rendered
            window_end = window_start + frames
            for clip in self._clips:
                lo = max(clip.start_frame, window_start)
                hi = min(clip.end_frame, window_end)
                if hi > lo:
                    outdata[lo - window_start:hi - window_start, 0] += clip.samples[
                        lo - clip.start_frame:hi - clip.start_frame
                    ]
                if clip.end_frame <= window_end:
                    finished.append(clip)
                else:
                    remaining.append(clip)
            self._clips = remaining
            self._frames_rendered = window_end

        for clip in finished:
            if clip.on_ended is not None:
                self._loop.call_soon_threadsafe(clip.on_ended)

    def close(self) -> None:
        with self._lock:
            self._clips.clear()
        self._stream.stop()
        self._stream.close()
        logger.info("Output device closed")


class SoundDeviceFactory:
    """Opens real sound card streams."""

    def open_input(
        self, sample_rate: int, block_size: int, on_block: BlockCallback
    ) -> InputDevice:
        return SoundDeviceInput(sample_rate, block_size, on_block)

    def open_output(
        self, sample_rate: int, loop: asyncio.AbstractEventLoop
    ) -> OutputDevice:
        return SoundDeviceOutput(sample_rate, loop)
