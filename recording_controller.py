"""State-machine based recording session orchestration.

Idle -> Recording -> Stopping -> Transcribing -> Idle. The hardware stream
is released as soon as capture is finalized, before the transcription call,
and on every error path.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

from audio_codec import frames_to_payload
from errors import DEVICE_UNAVAILABLE, REMOTE_ERROR, PolisherError
from interfaces import CredentialStore, Recorder, Transcriber
from models import AudioFrame, RecordingState, TranscriptBuffer

logger = logging.getLogger(__name__)

StateCallback = Callable[[RecordingState, RecordingState], None]
ErrorCallback = Callable[[str, str], None]
TranscriptCallback = Callable[[str], None]


class RecordingController:
    def __init__(
        self,
        recorder: Recorder,
        transcriber: Transcriber,
        credentials: CredentialStore,
        buffer: TranscriptBuffer,
        on_state_change: Optional[StateCallback] = None,
        on_transcript: Optional[TranscriptCallback] = None,
        on_error: Optional[ErrorCallback] = None,
        on_settings_requested: Optional[Callable[[], None]] = None,
        on_session_started: Optional[Callable[[], None]] = None,
    ) -> None:
        self._recorder = recorder
        self._transcriber = transcriber
        self._credentials = credentials
        self._buffer = buffer
        self._on_state_change = on_state_change
        self._on_transcript = on_transcript
        self._on_error = on_error
        self._on_settings_requested = on_settings_requested
        self._on_session_started = on_session_started

        self._lock = threading.RLock()
        self._state = RecordingState.IDLE
        self._fragments: list[AudioFrame] = []
        self._stream_open = False

    @property
    def state(self) -> RecordingState:
        return self._state

    @property
    def is_idle(self) -> bool:
        return self._state == RecordingState.IDLE

    @property
    def is_transcribing(self) -> bool:
        return self._state == RecordingState.TRANSCRIBING

    def start(self) -> bool:
        """Open the microphone and begin collecting fragments.

        Only valid from Idle; any other state makes this a no-op.
        """
        with self._lock:
            if self._state != RecordingState.IDLE:
                return False
            if not self._credentials.get_api_key():
                logger.info("Recording refused: no API key configured")
                self._request_settings()
                return False
            self._fragments = []
            try:
                self._recorder.open(self._handle_fragment)
            except PolisherError as exc:
                logger.warning("Could not open microphone: %s", exc.message)
                self._emit_error(exc.code, exc.message)
                return False
            self._stream_open = True
            if self._on_session_started:
                self._on_session_started()
            self._transition(RecordingState.RECORDING)
            return True

    def stop(self) -> None:
        """Finalize capture, release the device and transcribe the audio.

        Blocks for the duration of the transcription call.
        """
        with self._lock:
            if self._state != RecordingState.RECORDING:
                return
            self._transition(RecordingState.STOPPING)
            try:
                self._recorder.finalize()
            except Exception as exc:
                logger.warning("Finalizing capture failed: %s", exc)
                self._fragments = []
                self._emit_error(DEVICE_UNAVAILABLE, f"Error processing audio: {exc}")
                self._transition(RecordingState.IDLE)
                return
            finally:
                self._release_stream()

            fragments, self._fragments = self._fragments, []
            payload = frames_to_payload(
                fragments,
                sample_rate=self._recorder.sample_rate,
                channels=self._recorder.channels,
                mime_type=self._recorder.mime_type,
            )
            self._transition(RecordingState.TRANSCRIBING)

        logger.info("Captured %d fragments (%d bytes)", len(fragments), len(payload.data))
        try:
            transcript = self._transcriber.transcribe(payload.data, payload.mime_type)
        except PolisherError as exc:
            logger.warning("Transcription failed [%s]: %s", exc.code, exc.message)
            self._emit_error(exc.code, exc.message)
            if exc.needs_credential:
                self._request_settings()
        except Exception as exc:  # pragma: no cover - defensive
            logger.exception("Unexpected transcription failure")
            self._emit_error(REMOTE_ERROR, str(exc) or "Failed to transcribe audio.")
        else:
            with self._lock:
                self._buffer.append_transcript(transcript)
            if self._on_transcript:
                self._on_transcript(self._buffer.text)
        finally:
            with self._lock:
                self._transition(RecordingState.IDLE)

    def toggle(self) -> None:
        if self._state == RecordingState.RECORDING:
            self.stop()
        elif self._state == RecordingState.IDLE:
            self.start()

    def cancel(self, reason: str) -> None:
        """Abandon the session, releasing the device without transcribing."""
        with self._lock:
            if self._state == RecordingState.IDLE:
                return
            logger.info("Recording cancelled: %s", reason)
            if self._state == RecordingState.RECORDING:
                try:
                    self._recorder.finalize()
                except Exception as exc:  # pragma: no cover - defensive
                    logger.debug("Finalize during cancel failed: %s", exc)
            self._release_stream()
            self._fragments = []
            if self._state != RecordingState.TRANSCRIBING:
                self._transition(RecordingState.IDLE)

    def _handle_fragment(self, frame: AudioFrame) -> None:
        # Runs on the audio thread while stop() may hold the lock waiting for
        # the stream to drain, so it must not take the lock.
        if self._state in (RecordingState.RECORDING, RecordingState.STOPPING):
            self._fragments.append(frame)

    def _release_stream(self) -> None:
        if not self._stream_open:
            return
        self._stream_open = False
        try:
            self._recorder.release()
        except Exception as exc:  # pragma: no cover - defensive
            logger.warning("Releasing input stream failed: %s", exc)

    def _emit_error(self, code: str, message: str) -> None:
        if self._on_error:
            self._on_error(code, message)

    def _request_settings(self) -> None:
        if self._on_settings_requested:
            self._on_settings_requested()

    def _transition(self, to_state: RecordingState) -> None:
        from_state = self._state
        if from_state == to_state:
            return
        self._state = to_state
        logger.debug("Recording %s -> %s", from_state.value, to_state.value)
        if self._on_state_change:
            self._on_state_change(from_state, to_state)
