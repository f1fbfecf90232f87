"""Audio Playback Scheduler

Plays received speech clips back to back on the output device clock. A
single cursor marks where the previous clip ends; each new clip starts at
the later of the cursor and the device's current time, so clips never
overlap and only leave a gap when the network was slower than playback.
"""

from dataclasses import dataclass
from typing import Callable, Optional

from pli_assistant.audio.codec import PlayableBuffer
from pli_assistant.audio.devices import OutputDevice
from pli_assistant.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ScheduledClip:
    """Placement of one clip on the output clock (seconds)"""

    start: float
    duration: float

    @property
    def end(self) -> float:
        return self.start + self.duration


class AudioPlaybackScheduler:
    """Schedules decoded clips on an output device in receive order."""

    def __init__(self, output: OutputDevice):
        self._output = output
        self._next_start_time = 0.0
        self._clips_scheduled = 0

    @property
    def next_start_time(self) -> float:
        return self._next_start_time

    def schedule(
        self,
        buffer: PlayableBuffer,
        on_ended: Optional[Callable[[], None]] = None,
    ) -> ScheduledClip:
        requested = max(self._next_start_time, self._output.current_time)
        # The device may push the clip later if its clock moved in between
        start = self._output.play_at(buffer, requested, on_ended)
        self._next_start_time = start + buffer.duration
        self._clips_scheduled += 1

        logger.debug(
            "Clip scheduled",
            start=start,
            duration=buffer.duration,
            clips_scheduled=self._clips_scheduled,
        )
        return ScheduledClip(start=start, duration=buffer.duration)

    def reset(self) -> None:
        self._next_start_time = 0.0
        self._clips_scheduled = 0
