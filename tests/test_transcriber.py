"""Tests for DashscopeTranscriptionClient."""

from __future__ import annotations

import base64
from unittest.mock import MagicMock, patch

import pytest

from errors import AUTH_FAILED, NETWORK_ERROR, EmptyResponse, MissingCredential, RemoteError
from transcriber import TRANSCRIBE_INSTRUCTION, TRANSCRIPTION_MODEL, DashscopeTranscriptionClient


class FakeCredentials:
    def __init__(self, key: str = "test-key") -> None:
        self.key = key

    def get_api_key(self) -> str:
        return self.key

    def set_api_key(self, key: str) -> None:
        self.key = key


def _multimodal_response(*texts: str) -> dict:
    return {
        "status_code": 200,
        "output": {
            "choices": [
                {"message": {"role": "assistant", "content": [{"text": t} for t in texts]}}
            ]
        },
    }


@patch("transcriber.dashscope")
def test_transcribe_sends_inline_audio_with_instruction(mock_ds: MagicMock) -> None:
    mock_ds.MultiModalConversation.call.return_value = _multimodal_response(" um hello there \n")
    client = DashscopeTranscriptionClient(FakeCredentials())

    result = client.transcribe(b"RIFFdata", "audio/wav")

    assert result == "um hello there"
    kwargs = mock_ds.MultiModalConversation.call.call_args.kwargs
    assert kwargs["api_key"] == "test-key"
    assert kwargs["model"] == TRANSCRIPTION_MODEL
    content = kwargs["messages"][0]["content"]
    audio_uri = content[0]["audio"]
    assert audio_uri.startswith("data:audio/wav;base64,")
    assert base64.b64decode(audio_uri.split(",", 1)[1]) == b"RIFFdata"
    assert content[1] == {"text": TRANSCRIBE_INSTRUCTION}


@patch("transcriber.dashscope")
def test_model_is_independent_of_refinement_choice(mock_ds: MagicMock) -> None:
    mock_ds.MultiModalConversation.call.return_value = _multimodal_response("hi")
    client = DashscopeTranscriptionClient(FakeCredentials())

    client.transcribe(b"", "audio/webm")

    kwargs = mock_ds.MultiModalConversation.call.call_args.kwargs
    assert kwargs["model"] == "qwen-audio-turbo"
    assert kwargs["messages"][0]["content"][0]["audio"].startswith("data:audio/webm;base64,")


@patch("transcriber.dashscope")
def test_multi_part_content_is_joined(mock_ds: MagicMock) -> None:
    mock_ds.MultiModalConversation.call.return_value = _multimodal_response("hello ", "world")
    client = DashscopeTranscriptionClient(FakeCredentials())

    assert client.transcribe(b"x", "audio/wav") == "hello world"


@patch("transcriber.dashscope")
def test_missing_credential_makes_no_call(mock_ds: MagicMock) -> None:
    client = DashscopeTranscriptionClient(FakeCredentials(""))

    with pytest.raises(MissingCredential):
        client.transcribe(b"x", "audio/wav")
    mock_ds.MultiModalConversation.call.assert_not_called()


@patch("transcriber.dashscope")
def test_empty_transcript_raises_empty_response(mock_ds: MagicMock) -> None:
    mock_ds.MultiModalConversation.call.return_value = _multimodal_response("")
    client = DashscopeTranscriptionClient(FakeCredentials())

    with pytest.raises(EmptyResponse) as excinfo:
        client.transcribe(b"x", "audio/wav")
    assert excinfo.value.message == "No transcript received from the model."


@patch("transcriber.dashscope")
def test_forbidden_response_maps_to_auth_failed(mock_ds: MagicMock) -> None:
    mock_ds.MultiModalConversation.call.return_value = {
        "status_code": 403,
        "code": "",
        "message": "forbidden",
    }
    client = DashscopeTranscriptionClient(FakeCredentials())

    with pytest.raises(RemoteError) as excinfo:
        client.transcribe(b"x", "audio/wav")
    assert excinfo.value.code == AUTH_FAILED


@patch("transcriber.dashscope")
def test_timeout_maps_to_network_error(mock_ds: MagicMock) -> None:
    mock_ds.MultiModalConversation.call.side_effect = TimeoutError("read timed out")
    client = DashscopeTranscriptionClient(FakeCredentials())

    with pytest.raises(RemoteError) as excinfo:
        client.transcribe(b"x", "audio/wav")
    assert excinfo.value.code == NETWORK_ERROR
