"""Application state machine for the polish workflow."""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Optional

from errors import REMOTE_ERROR, PolisherError
from interfaces import Clipboard, CredentialStore, Refiner
from models import DEFAULT_MODEL, ModelId, ProcessingStatus, TranscriptBuffer, word_count
from recording_controller import RecordingController

logger = logging.getLogger(__name__)

StatusCallback = Callable[[ProcessingStatus, ProcessingStatus], None]
ErrorCallback = Callable[[str, str], None]
TimerFactory = Callable[[float, Callable[[], None]], Any]

COPIED_RESET_DELAY_S = 2.0


def _start_timer(delay_s: float, fn: Callable[[], None]) -> threading.Timer:
    timer = threading.Timer(delay_s, fn)
    timer.daemon = True
    timer.start()
    return timer


class EditorController:
    def __init__(
        self,
        refiner: Refiner,
        credentials: CredentialStore,
        clipboard: Clipboard,
        buffer: Optional[TranscriptBuffer] = None,
        recording: Optional[RecordingController] = None,
        model: ModelId = DEFAULT_MODEL,
        copied_reset_delay_s: float = COPIED_RESET_DELAY_S,
        timer_factory: TimerFactory = _start_timer,
        on_status_change: Optional[StatusCallback] = None,
        on_error: Optional[ErrorCallback] = None,
        on_settings_requested: Optional[Callable[[], None]] = None,
        on_copied_change: Optional[Callable[[bool], None]] = None,
    ) -> None:
        self._refiner = refiner
        self._credentials = credentials
        self._clipboard = clipboard
        self.buffer = buffer if buffer is not None else TranscriptBuffer()
        self._recording = recording
        self._model = model
        self._copied_reset_delay_s = copied_reset_delay_s
        self._timer_factory = timer_factory
        self._on_status_change = on_status_change
        self._on_error = on_error
        self._on_settings_requested = on_settings_requested
        self._on_copied_change = on_copied_change

        self._lock = threading.RLock()
        self._status = ProcessingStatus.IDLE
        self._polished = ""
        self._error_message = ""
        self._copied = False
        self._copied_timer: Any = None

    @property
    def status(self) -> ProcessingStatus:
        return self._status

    @property
    def polished(self) -> str:
        return self._polished

    @property
    def error_message(self) -> str:
        return self._error_message

    @property
    def copied(self) -> bool:
        return self._copied

    @property
    def model(self) -> ModelId:
        return self._model

    @property
    def input_text(self) -> str:
        return self.buffer.text

    @property
    def input_word_count(self) -> int:
        return word_count(self.buffer.text)

    @property
    def output_word_count(self) -> int:
        return word_count(self._polished)

    def attach_recording(self, recording: RecordingController) -> None:
        self._recording = recording

    def set_input(self, text: str) -> None:
        with self._lock:
            self.buffer.set(text)

    def set_model(self, model: ModelId | str) -> None:
        with self._lock:
            self._model = ModelId(model)

    def can_submit(self) -> bool:
        return (
            bool(self.buffer.text.strip())
            and self._status != ProcessingStatus.PROCESSING
            and self._recording_idle()
        )

    def submit(self) -> bool:
        """Refine the current input. Returns False when nothing was sent.

        Blocks for the duration of the remote call; callers on a UI thread
        should run it on a worker.
        """
        with self._lock:
            if not self.can_submit():
                return False
            if not self._credentials.get_api_key():
                logger.info("Submit refused: no API key configured")
                self._request_settings()
                return False
            text = self.buffer.text
            model = self._model
            self._error_message = ""
            self._set_copied(False)
            self._transition(ProcessingStatus.PROCESSING)

        try:
            polished = self._refiner.polish(text, model)
        except PolisherError as exc:
            self._fail(exc.code, exc.message, exc.needs_credential)
            return True
        except Exception as exc:  # pragma: no cover - defensive
            logger.exception("Unexpected refinement failure")
            self._fail(REMOTE_ERROR, str(exc) or "An unexpected error occurred.", False)
            return True

        with self._lock:
            self._polished = polished
            self._transition(ProcessingStatus.SUCCESS)
        logger.info("Refined %d words into %d words", word_count(text), word_count(polished))
        return True

    def clear(self) -> None:
        with self._lock:
            self.buffer.clear()
            self._polished = ""
            self._error_message = ""
            self._cancel_copied_timer()
            self._set_copied(False)
            self._transition(ProcessingStatus.IDLE)

    def copy(self) -> bool:
        with self._lock:
            text = self._polished
        if not text:
            return False
        if not self._clipboard.copy_text(text):
            return False
        with self._lock:
            self._cancel_copied_timer()
            self._set_copied(True)
            self._copied_timer = self._timer_factory(self._copied_reset_delay_s, self._reset_copied)
        return True

    def report_error(self, code: str, message: str) -> None:
        """Surface a failure raised outside the refinement call, e.g. dictation."""
        with self._lock:
            self._error_message = message
        if self._on_error:
            self._on_error(code, message)

    def clear_error(self) -> None:
        """Drop a stale error message, e.g. when a new dictation starts."""
        with self._lock:
            self._error_message = ""

    def _fail(self, code: str, message: str, needs_credential: bool) -> None:
        logger.warning("Refinement failed [%s]: %s", code, message)
        with self._lock:
            self._error_message = message
            self._transition(ProcessingStatus.ERROR)
        if self._on_error:
            self._on_error(code, message)
        if needs_credential:
            self._request_settings()

    def _reset_copied(self) -> None:
        with self._lock:
            self._copied_timer = None
            self._set_copied(False)

    def _cancel_copied_timer(self) -> None:
        if self._copied_timer is not None:
            self._copied_timer.cancel()
            self._copied_timer = None

    def _set_copied(self, value: bool) -> None:
        if self._copied == value:
            return
        self._copied = value
        if self._on_copied_change:
            self._on_copied_change(value)

    def _recording_idle(self) -> bool:
        return self._recording is None or self._recording.is_idle

    def _request_settings(self) -> None:
        if self._on_settings_requested:
            self._on_settings_requested()

    def _transition(self, to_state: ProcessingStatus) -> None:
        from_state = self._status
        if from_state == to_state:
            return
        self._status = to_state
        logger.debug("Status %s -> %s", from_state.value, to_state.value)
        if self._on_status_change:
            self._on_status_change(from_state, to_state)
