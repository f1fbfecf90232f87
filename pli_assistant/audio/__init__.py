"""Audio module for the realtime voice assistant

This module provides:
- Audio codec utilities: PCM16/base64 encoding and playable buffer decoding
- AudioCaptureEncoder: microphone blocks to outbound base64 chunks
- AudioPlaybackScheduler: gap-free sequential playback of received speech
- RealtimeSession: Live API session lifecycle and inbound dispatch
"""

from pli_assistant.audio.codec import (
    encode_pcm16_to_base64,
    decode_base64_to_pcm16,
    frames_to_playable_buffer,
    AudioCodecError,
)
from pli_assistant.audio.capture import AudioCaptureEncoder
from pli_assistant.audio.playback import AudioPlaybackScheduler
from pli_assistant.audio.realtime_session import RealtimeSession

__all__ = [
    "encode_pcm16_to_base64",
    "decode_base64_to_pcm16",
    "frames_to_playable_buffer",
    "AudioCodecError",
    "AudioCaptureEncoder",
    "AudioPlaybackScheduler",
    "RealtimeSession",
]
