"""Encode captured PCM fragments into an uploadable audio payload."""

from __future__ import annotations

import base64
import io
import wave
from typing import Iterable

from models import AudioFrame, AudioPayload

WAV_MIME_TYPE = "audio/wav"


def pcm_to_wav(
    pcm: bytes,
    sample_rate: int = 16000,
    channels: int = 1,
    sample_width: int = 2,
) -> bytes:
    """Wrap raw PCM bytes in a WAV container."""
    buf = io.BytesIO()
    with wave.open(buf, "wb") as wf:
        wf.setnchannels(channels)
        wf.setsampwidth(sample_width)
        wf.setframerate(sample_rate)
        wf.writeframes(pcm)
    return buf.getvalue()


def frames_to_payload(
    frames: Iterable[AudioFrame],
    sample_rate: int = 16000,
    channels: int = 1,
    mime_type: str = WAV_MIME_TYPE,
) -> AudioPayload:
    """Concatenate frames in order; an empty sequence yields a header-only WAV."""
    pcm = bytearray()
    for frame in frames:
        pcm.extend(frame.pcm16_bytes)
        sample_rate = frame.sample_rate
        channels = frame.channels
    return AudioPayload(data=pcm_to_wav(bytes(pcm), sample_rate, channels), mime_type=mime_type)


def to_data_uri(audio: bytes, mime_type: str) -> str:
    encoded = base64.b64encode(audio).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"
