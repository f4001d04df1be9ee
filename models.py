"""Core data models for the app."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ProcessingStatus(str, Enum):
    IDLE = "IDLE"
    PROCESSING = "PROCESSING"
    SUCCESS = "SUCCESS"
    ERROR = "ERROR"


class RecordingState(str, Enum):
    IDLE = "IDLE"
    RECORDING = "RECORDING"
    STOPPING = "STOPPING"
    TRANSCRIBING = "TRANSCRIBING"


class ModelId(str, Enum):
    QWEN_PLUS = "qwen-plus"
    QWEN_MAX = "qwen-max"

    @property
    def label(self) -> str:
        return MODEL_LABELS[self]


MODEL_LABELS = {
    ModelId.QWEN_PLUS: "Qwen Plus (Fast)",
    ModelId.QWEN_MAX: "Qwen Max (High Quality)",
}

DEFAULT_MODEL = ModelId.QWEN_PLUS


@dataclass
class AudioFrame:
    pcm16_bytes: bytes
    sample_rate: int = 16000
    channels: int = 1
    timestamp_ms: int = 0


@dataclass(frozen=True)
class AudioPayload:
    data: bytes
    mime_type: str


class TranscriptBuffer:
    """The user's raw input text, edited directly or extended by dictation."""

    def __init__(self, text: str = "") -> None:
        self._text = text

    @property
    def text(self) -> str:
        return self._text

    def set(self, text: str) -> None:
        self._text = text

    def append_transcript(self, transcript: str) -> None:
        """Append ``transcript``, separated by one space unless not needed."""
        spacer = " " if self._text and not self._text[-1].isspace() else ""
        self._text = self._text + spacer + transcript

    def clear(self) -> None:
        self._text = ""

    def __str__(self) -> str:
        return self._text


def word_count(text: str) -> int:
    stripped = text.strip()
    return len(stripped.split()) if stripped else 0
