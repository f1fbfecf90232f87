"""Audio encoding/decoding utilities for real-time streaming

This module converts between float sample blocks, 16-bit PCM bytes and the
base64 text carried by the Live API messages.
"""

import base64
import binascii
from dataclasses import dataclass
from typing import List

import numpy as np

INPUT_SAMPLE_RATE = 16000
OUTPUT_SAMPLE_RATE = 24000
CHANNELS = 1
BIT_DEPTH = 16
BYTES_PER_SAMPLE = BIT_DEPTH // 8

# Security: Limit to 10MB base64 (~7.5MB audio = ~2.5 minutes at 24kHz 16-bit)
MAX_BASE64_LENGTH = 10 * 1024 * 1024
MAX_AUDIO_BYTES = 7.5 * 1024 * 1024


class AudioCodecError(Exception):
    """Raised when audio encoding/decoding fails."""

    pass


@dataclass(frozen=True)
class PlayableBuffer:
    """Decoded audio ready for scheduling.

    Attributes:
        channels: One float32 array per channel, samples in [-1.0, 1.0)
        sample_rate: Samples per second
    """

    channels: List[np.ndarray]
    sample_rate: int

    @property
    def frame_count(self) -> int:
        return len(self.channels[0]) if self.channels else 0

    @property
    def duration(self) -> float:
        return self.frame_count / self.sample_rate


def encode_pcm16_to_base64(audio_bytes: bytes) -> str:
    """
    Encode PCM16 audio bytes to base64 string for transmission.

    Args:
        audio_bytes: Raw PCM16 audio data

    Returns:
        Base64-encoded string representation of audio data

    Raises:
        AudioCodecError: If input is invalid or too large
    """
    if not isinstance(audio_bytes, (bytes, bytearray)):
        raise AudioCodecError(f"Expected bytes, got {type(audio_bytes).__name__}")

    if len(audio_bytes) > MAX_AUDIO_BYTES:
        raise AudioCodecError(
            f"Audio data too large: {len(audio_bytes)} bytes (max: {MAX_AUDIO_BYTES})"
        )

    return base64.b64encode(audio_bytes).decode("ascii")


def decode_base64_to_pcm16(encoded: str) -> bytes:
    """
    Decode base64 string back to PCM16 audio bytes.

    Exact inverse of encode_pcm16_to_base64; sample alignment is checked
    only when the bytes are interpreted as audio.

    Raises:
        AudioCodecError: If input is invalid, too large, or not valid base64
    """
    if not isinstance(encoded, str):
        raise AudioCodecError(f"Expected string, got {type(encoded).__name__}")

    if len(encoded) > MAX_BASE64_LENGTH:
        raise AudioCodecError(
            f"Encoded data too large: {len(encoded)} chars (max: {MAX_BASE64_LENGTH})"
        )

    try:
        return base64.b64decode(encoded.encode("ascii"), validate=True)
    except (binascii.Error, UnicodeEncodeError) as e:
        raise AudioCodecError(f"Invalid base64 encoding: {e}") from e


def float_to_pcm16(samples: np.ndarray) -> bytes:
    """Clamp float samples to [-1, 1], scale by 32767 and truncate to int16"""
    clipped = np.clip(np.asarray(samples, dtype=np.float32), -1.0, 1.0)
    return (clipped * 32767.0).astype("<i2").tobytes()


def frames_to_playable_buffer(
    pcm_bytes: bytes, sample_rate: int = OUTPUT_SAMPLE_RATE, channels: int = CHANNELS
) -> PlayableBuffer:
    """Interpret interleaved little-endian PCM16 as per-channel float arrays.

    Raises:
        AudioCodecError: If the byte count is not a whole number of frames
    """
    frame_bytes = BYTES_PER_SAMPLE * channels
    if len(pcm_bytes) % frame_bytes != 0:
        raise AudioCodecError(
            f"Invalid PCM16 format: {len(pcm_bytes)} bytes is not divisible by {frame_bytes}"
        )

    samples = np.frombuffer(pcm_bytes, dtype="<i2").astype(np.float32) / 32768.0
    interleaved = samples.reshape(-1, channels)
    return PlayableBuffer(
        channels=[np.ascontiguousarray(interleaved[:, ch]) for ch in range(channels)],
        sample_rate=sample_rate,
    )


def sample_rate_from_mime(mime_type: str, default: int = OUTPUT_SAMPLE_RATE) -> int:
    """Read the `rate=` parameter of an `audio/pcm;rate=N` mime type"""
    for param in mime_type.split(";")[1:]:
        key, _, value = param.strip().partition("=")
        if key.lower() == "rate" and value.isdigit():
            return int(value)
    return default
