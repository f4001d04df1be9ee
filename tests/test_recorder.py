"""Tests for SoundDeviceRecorder."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from errors import DeviceUnavailable
from models import AudioFrame
from recorder import SoundDeviceRecorder


# ---------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------

class _FakeNp:
    """Minimal numpy stand-in so recorder._on_audio doesn't bail."""

    class int16:
        pass

    @staticmethod
    def asarray(data, dtype=None):
        return data


class _FakeAudioInput:
    """Fake audio input similar to what sounddevice callback provides."""

    def __init__(self, n_samples: int = 1600) -> None:
        self._data = b"\x00\x00" * n_samples

    def tobytes(self) -> bytes:
        return self._data


# ---------------------------------------------------------------
# Open / finalize / release
# ---------------------------------------------------------------

@patch("recorder.sd")
def test_open_creates_stream_and_runs(mock_sd: MagicMock) -> None:
    mock_stream = MagicMock()
    mock_sd.InputStream.return_value = mock_stream

    recorder = SoundDeviceRecorder()
    recorder.open(lambda frame: None)

    mock_sd.InputStream.assert_called_once()
    assert mock_sd.InputStream.call_args.kwargs["samplerate"] == 16000
    assert mock_sd.InputStream.call_args.kwargs["dtype"] == "int16"
    mock_stream.start.assert_called_once()
    assert recorder.is_open is True

    recorder.finalize()
    mock_stream.stop.assert_called_once()
    mock_stream.close.assert_not_called()

    recorder.release()
    mock_stream.close.assert_called_once()
    assert recorder.is_open is False


@patch("recorder.sd")
def test_open_is_idempotent(mock_sd: MagicMock) -> None:
    mock_sd.InputStream.return_value = MagicMock()

    recorder = SoundDeviceRecorder()
    recorder.open(lambda frame: None)
    recorder.open(lambda frame: None)  # second call should be no-op

    assert mock_sd.InputStream.call_count == 1
    recorder.release()


@patch("recorder.sd")
def test_release_is_idempotent(mock_sd: MagicMock) -> None:
    mock_stream = MagicMock()
    mock_sd.InputStream.return_value = mock_stream

    recorder = SoundDeviceRecorder()
    recorder.open(lambda frame: None)
    recorder.release()
    recorder.release()

    mock_stream.close.assert_called_once()


@patch("recorder.sd")
def test_open_failure_raises_device_unavailable(mock_sd: MagicMock) -> None:
    mock_sd.InputStream.side_effect = OSError("Error querying device -1")

    recorder = SoundDeviceRecorder()
    with pytest.raises(DeviceUnavailable, match="Error querying device"):
        recorder.open(lambda frame: None)
    assert recorder.is_open is False


@patch("recorder.sd")
def test_start_failure_closes_stream(mock_sd: MagicMock) -> None:
    mock_stream = MagicMock()
    mock_stream.start.side_effect = OSError("permission denied")
    mock_sd.InputStream.return_value = mock_stream

    recorder = SoundDeviceRecorder()
    with pytest.raises(DeviceUnavailable):
        recorder.open(lambda frame: None)
    mock_stream.close.assert_called_once()
    assert recorder.is_open is False


def test_open_raises_without_sounddevice(monkeypatch) -> None:  # noqa: ANN001
    import recorder as rec_mod
    monkeypatch.setattr(rec_mod, "sd", None)

    recorder = SoundDeviceRecorder()
    with pytest.raises(DeviceUnavailable, match="sounddevice is not installed"):
        recorder.open(lambda frame: None)


# ---------------------------------------------------------------
# Audio callback delivers fragments
# ---------------------------------------------------------------

@patch("recorder.np", _FakeNp())
@patch("recorder.sd")
def test_callback_delivers_audio_frames(mock_sd: MagicMock) -> None:
    mock_sd.InputStream.return_value = MagicMock()
    frames: list[AudioFrame] = []

    recorder = SoundDeviceRecorder(sample_rate=16000, channels=1, chunk_ms=100)
    recorder.open(frames.append)

    recorder._on_audio(_FakeAudioInput(1600), frames=1600, time_info=None, status=None)

    assert len(frames) == 1
    frame = frames[0]
    assert frame.sample_rate == 16000
    assert frame.channels == 1
    assert len(frame.pcm16_bytes) == 1600 * 2  # 16-bit = 2 bytes per sample

    recorder.release()


@patch("recorder.np", _FakeNp())
@patch("recorder.sd")
def test_callback_after_stream_stopped_is_noop(mock_sd: MagicMock) -> None:
    mock_sd.InputStream.return_value = MagicMock()
    frames: list[AudioFrame] = []

    recorder = SoundDeviceRecorder()
    recorder.open(frames.append)
    recorder.finalize()

    recorder._on_audio(_FakeAudioInput(1600), frames=1600, time_info=None, status=None)
    assert frames == []
    recorder.release()


@patch("recorder.np", _FakeNp())
@patch("recorder.sd")
def test_callbacks_during_drain_are_kept(mock_sd: MagicMock) -> None:
    mock_stream = MagicMock()
    mock_sd.InputStream.return_value = mock_stream
    frames: list[AudioFrame] = []

    recorder = SoundDeviceRecorder()

    # sounddevice runs pending callbacks before stop() returns
    mock_stream.stop.side_effect = lambda: recorder._on_audio(
        _FakeAudioInput(1600), frames=1600, time_info=None, status=None
    )

    recorder.open(frames.append)
    recorder.finalize()
    recorder.release()

    assert len(frames) == 1
    assert len(frames[0].pcm16_bytes) == 1600 * 2


@patch("recorder.sd")
def test_finalize_error_still_marks_stopped(mock_sd: MagicMock) -> None:
    mock_stream = MagicMock()
    mock_stream.stop.side_effect = OSError("stream broke")
    mock_sd.InputStream.return_value = mock_stream

    recorder = SoundDeviceRecorder()
    recorder.open(lambda frame: None)
    with pytest.raises(OSError):
        recorder.finalize()

    recorder.finalize()  # already stopped: no second stop call
    assert mock_stream.stop.call_count == 1
    recorder.release()
    mock_stream.close.assert_called_once()
