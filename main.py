"""Application entrypoint."""

from __future__ import annotations

import logging
import os
import sys
import threading

from clipboard import PyperclipClipboard
from config import JsonConfigStore
from editor_controller import EditorController
from logging_setup import setup_logging
from models import ModelId, ProcessingStatus, RecordingState, TranscriptBuffer
from recorder import SoundDeviceRecorder
from recording_controller import RecordingController
from refiner import DashscopeRefinementClient
from transcriber import DashscopeTranscriptionClient

try:
    from PySide6.QtCore import QObject, Signal
    from PySide6.QtWidgets import (
        QApplication,
        QComboBox,
        QHBoxLayout,
        QInputDialog,
        QLabel,
        QLineEdit,
        QMainWindow,
        QPlainTextEdit,
        QPushButton,
        QVBoxLayout,
        QWidget,
    )
except Exception as exc:  # pragma: no cover
    raise SystemExit(f"PySide6 is required to run the desktop app: {exc}")

logger = logging.getLogger(__name__)

STATUS_TEXT = {
    ProcessingStatus.IDLE: "Ready",
    ProcessingStatus.PROCESSING: "Polishing...",
}

RECORDING_TEXT = {
    RecordingState.RECORDING: "Listening...",
    RecordingState.STOPPING: "Finishing recording...",
    RecordingState.TRANSCRIBING: "Transcribing...",
}


class UIBridge(QObject):
    status_signal = Signal(str, str)  # from_status, to_status
    recording_signal = Signal(str, str)  # from_state, to_state
    error_signal = Signal(str, str)  # code, message
    transcript_signal = Signal(str)
    copied_signal = Signal(bool)
    settings_signal = Signal()


class App:
    def __init__(self) -> None:
        self.app = QApplication(sys.argv)
        self.config_store = JsonConfigStore()
        self.ui = UIBridge()
        self.ui.status_signal.connect(self._on_status_change_ui)
        self.ui.recording_signal.connect(self._on_recording_change_ui)
        self.ui.error_signal.connect(self._on_error_ui)
        self.ui.transcript_signal.connect(self._on_transcript_ui)
        self.ui.copied_signal.connect(self._on_copied_ui)
        self.ui.settings_signal.connect(self._open_settings)

        self.buffer = TranscriptBuffer()
        self.editor = EditorController(
            refiner=DashscopeRefinementClient(self.config_store),
            credentials=self.config_store,
            clipboard=PyperclipClipboard(),
            buffer=self.buffer,
            on_status_change=self._on_status_change,
            on_error=self._on_error,
            on_settings_requested=self.ui.settings_signal.emit,
            on_copied_change=self.ui.copied_signal.emit,
        )
        self.recording = RecordingController(
            recorder=SoundDeviceRecorder(),
            transcriber=DashscopeTranscriptionClient(self.config_store),
            credentials=self.config_store,
            buffer=self.buffer,
            on_state_change=self._on_recording_change,
            on_transcript=self.ui.transcript_signal.emit,
            on_error=self._on_recording_error,
            on_settings_requested=self.ui.settings_signal.emit,
            on_session_started=self.editor.clear_error,
        )
        self.editor.attach_recording(self.recording)
        self.app.aboutToQuit.connect(self._shutdown)

        self.window = QMainWindow()
        self.window.setWindowTitle("Speech Polisher")
        self._build_window()
        self._refresh_controls()

    def _build_window(self) -> None:
        root = QWidget()
        layout = QVBoxLayout(root)

        top = QHBoxLayout()
        self.model_box = QComboBox()
        for model in ModelId:
            self.model_box.addItem(model.label, model.value)
        self.model_box.currentIndexChanged.connect(self._on_model_changed)
        top.addWidget(self.model_box)
        top.addStretch(1)
        settings_button = QPushButton("Settings")
        settings_button.clicked.connect(self._open_settings)
        top.addWidget(settings_button)
        layout.addLayout(top)

        self.input_edit = QPlainTextEdit()
        self.input_edit.setPlaceholderText("Paste or dictate your spoken text here...")
        self.input_edit.textChanged.connect(self._on_input_changed)
        layout.addWidget(self.input_edit)
        self.input_words = QLabel("0 words")
        layout.addWidget(self.input_words)

        actions = QHBoxLayout()
        self.record_button = QPushButton("Record")
        self.record_button.clicked.connect(self._toggle_recording)
        self.submit_button = QPushButton("Polish")
        self.submit_button.clicked.connect(self._submit)
        self.clear_button = QPushButton("Clear")
        self.clear_button.clicked.connect(self._clear)
        for button in (self.record_button, self.submit_button, self.clear_button):
            actions.addWidget(button)
        layout.addLayout(actions)

        self.status_label = QLabel(STATUS_TEXT[ProcessingStatus.IDLE])
        layout.addWidget(self.status_label)

        self.output_edit = QPlainTextEdit()
        self.output_edit.setReadOnly(True)
        layout.addWidget(self.output_edit)

        bottom = QHBoxLayout()
        self.output_words = QLabel("0 words")
        bottom.addWidget(self.output_words)
        bottom.addStretch(1)
        self.copy_button = QPushButton("Copy")
        self.copy_button.clicked.connect(self._copy)
        bottom.addWidget(self.copy_button)
        layout.addLayout(bottom)

        self.window.setCentralWidget(root)
        self.window.resize(720, 640)

    # ------------------------------------------------------------------
    # Callbacks (may arrive on worker threads → emit signals for UI thread)
    # ------------------------------------------------------------------

    def _on_status_change(self, from_status: ProcessingStatus, to_status: ProcessingStatus) -> None:
        self.ui.status_signal.emit(from_status.value, to_status.value)

    def _on_recording_change(self, from_state: RecordingState, to_state: RecordingState) -> None:
        self.ui.recording_signal.emit(from_state.value, to_state.value)

    def _on_error(self, code: str, message: str) -> None:
        self.ui.error_signal.emit(code, message)

    def _on_recording_error(self, code: str, message: str) -> None:
        self.editor.report_error(code, message)

    # ------------------------------------------------------------------
    # UI thread handlers (safe for Qt)
    # ------------------------------------------------------------------

    def _on_status_change_ui(self, from_status: str, to_status: str) -> None:
        status = ProcessingStatus(to_status)
        if status == ProcessingStatus.SUCCESS:
            self.output_edit.setPlainText(self.editor.polished)
            self.status_label.setText(f"Refined with {self.editor.model.label}")
        elif status == ProcessingStatus.IDLE:
            self.output_edit.setPlainText(self.editor.polished)
            self.status_label.setText(STATUS_TEXT[status])
        elif status == ProcessingStatus.PROCESSING:
            self.status_label.setText(STATUS_TEXT[status])
        self.output_words.setText(f"{self.editor.output_word_count} words")
        self._refresh_controls()

    def _on_recording_change_ui(self, from_state: str, to_state: str) -> None:
        state = RecordingState(to_state)
        self.record_button.setText("Stop" if state == RecordingState.RECORDING else "Record")
        if state in RECORDING_TEXT:
            self.status_label.setText(RECORDING_TEXT[state])
        elif not self.editor.error_message:
            self.status_label.setText(STATUS_TEXT[ProcessingStatus.IDLE])
        self._refresh_controls()

    def _on_error_ui(self, code: str, message: str) -> None:
        self.status_label.setText(f"Error: {message}")

    def _on_transcript_ui(self, text: str) -> None:
        self.input_edit.setPlainText(text)
        cursor = self.input_edit.textCursor()
        cursor.movePosition(cursor.MoveOperation.End)
        self.input_edit.setTextCursor(cursor)

    def _on_copied_ui(self, copied: bool) -> None:
        self.copy_button.setText("Copied" if copied else "Copy")

    def _on_input_changed(self) -> None:
        self.editor.set_input(self.input_edit.toPlainText())
        self.input_words.setText(f"{self.editor.input_word_count} words")
        self._refresh_controls()

    def _on_model_changed(self, index: int) -> None:
        self.editor.set_model(self.model_box.itemData(index))

    def _refresh_controls(self) -> None:
        busy = self.editor.status == ProcessingStatus.PROCESSING
        recording_state = self.recording.state
        self.submit_button.setEnabled(self.editor.can_submit())
        self.record_button.setEnabled(
            not busy and recording_state in (RecordingState.IDLE, RecordingState.RECORDING)
        )
        self.input_edit.setReadOnly(busy or recording_state != RecordingState.IDLE)
        self.model_box.setEnabled(not busy)
        self.copy_button.setEnabled(bool(self.editor.polished))

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def _submit(self) -> None:
        # submit blocks on the remote call, keep it off the Qt main thread
        threading.Thread(target=self.editor.submit, daemon=True).start()

    def _copy(self) -> None:
        self.editor.copy()

    def _clear(self) -> None:
        self.editor.clear()
        self.input_edit.setPlainText("")
        self.output_edit.setPlainText("")
        self.output_words.setText("0 words")
        self.status_label.setText(STATUS_TEXT[ProcessingStatus.IDLE])

    def _toggle_recording(self) -> None:
        if self.recording.state == RecordingState.RECORDING:
            threading.Thread(target=self.recording.stop, daemon=True).start()
        elif self.recording.state == RecordingState.IDLE:
            self.recording.start()

    def _open_settings(self) -> None:
        value, ok = QInputDialog.getText(
            self.window,
            "API Configuration",
            "DashScope API Key (stored locally)",
            QLineEdit.EchoMode.Password,
            self.config_store.get_api_key(),
        )
        if not ok:
            return
        self.config_store.set_api_key(value)
        self._refresh_controls()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def run(self) -> int:
        self.window.show()
        if not self.config_store.has_api_key():
            self._open_settings()
        return self.app.exec()

    def _shutdown(self) -> None:
        self.recording.cancel("app quit")


def main() -> int:
    setup_logging(
        level=os.getenv("SPEECH_POLISHER_LOG_LEVEL", "INFO"),
        log_file=os.getenv("SPEECH_POLISHER_LOG_FILE"),
    )
    app = App()
    logger.info("Starting Speech Polisher")
    return app.run()


if __name__ == "__main__":
    raise SystemExit(main())
