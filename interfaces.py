"""Protocol interfaces used by the controllers."""

from __future__ import annotations

from typing import Callable, Protocol

from models import AudioFrame, ModelId


class CredentialStore(Protocol):
    def get_api_key(self) -> str: ...

    def set_api_key(self, key: str) -> None: ...


class Recorder(Protocol):
    mime_type: str
    sample_rate: int
    channels: int

    def open(self, on_fragment: Callable[[AudioFrame], None]) -> None: ...

    def finalize(self) -> None: ...

    def release(self) -> None: ...


class Refiner(Protocol):
    def polish(self, text: str, model: ModelId | str) -> str: ...


class Transcriber(Protocol):
    def transcribe(self, audio: bytes, mime_type: str) -> str: ...


class Clipboard(Protocol):
    def copy_text(self, text: str) -> bool: ...
