"""Microphone recorder adapter."""

from __future__ import annotations

import logging
import threading
import time
from typing import Any, Callable, Optional

from audio_codec import WAV_MIME_TYPE
from errors import DeviceUnavailable
from models import AudioFrame

try:
    import numpy as np
except Exception:  # pragma: no cover
    np = None  # type: ignore

try:
    import sounddevice as sd
except Exception:  # pragma: no cover
    sd = None  # type: ignore

logger = logging.getLogger(__name__)


class SoundDeviceRecorder:
    mime_type = WAV_MIME_TYPE

    def __init__(
        self,
        sample_rate: int = 16000,
        channels: int = 1,
        chunk_ms: int = 100,
    ) -> None:
        self.sample_rate = sample_rate
        self.channels = channels
        self.chunk_ms = chunk_ms
        self._stream: Any = None
        self._running = False
        self._lock = threading.Lock()
        self._on_fragment: Optional[Callable[[AudioFrame], None]] = None

    @property
    def is_open(self) -> bool:
        return self._stream is not None

    def open(self, on_fragment: Callable[[AudioFrame], None]) -> None:
        """Open the default input device and start delivering fragments.

        Raises DeviceUnavailable when no device can be opened; nothing is
        left open in that case.
        """
        with self._lock:
            if self._running:
                return
            if sd is None:
                raise DeviceUnavailable("sounddevice is not installed")
            self._on_fragment = on_fragment
            blocksize = int(self.sample_rate * (self.chunk_ms / 1000.0))
            stream = None
            try:
                stream = sd.InputStream(
                    samplerate=self.sample_rate,
                    channels=self.channels,
                    dtype="int16",
                    blocksize=blocksize,
                    callback=self._on_audio,
                )
                stream.start()
            except Exception as exc:
                if stream is not None:
                    stream.close()
                self._on_fragment = None
                raise DeviceUnavailable(
                    f"Microphone access denied or not available: {exc}"
                ) from exc
            self._stream = stream
            self._running = True
            logger.debug("Input stream opened at %d Hz", self.sample_rate)

    def finalize(self) -> None:
        """Stop capturing; callbacks run while the stream drains are still delivered."""
        with self._lock:
            if not self._running:
                return
            try:
                if self._stream is not None:
                    self._stream.stop()
            finally:
                self._running = False

    def release(self) -> None:
        """Close the hardware stream. Safe to call more than once."""
        with self._lock:
            self._running = False
            self._on_fragment = None
            stream, self._stream = self._stream, None
        if stream is not None:
            stream.close()
            logger.debug("Input stream released")

    def _on_audio(self, indata: Any, frames: int, time_info: Any, status: Any) -> None:
        if status:
            logger.debug("Input stream status: %s", status)
        on_fragment = self._on_fragment
        if not self._running or on_fragment is None:
            return
        if np is None:
            return
        payload = np.asarray(indata, dtype=np.int16).tobytes()
        on_fragment(
            AudioFrame(
                pcm16_bytes=payload,
                sample_rate=self.sample_rate,
                channels=self.channels,
                timestamp_ms=int(time.time() * 1000),
            )
        )
