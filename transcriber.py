"""Audio transcription client using a DashScope audio-understanding model.

The captured recording is sent inline as a base64 ``data:`` URI together with
a fixed instruction asking for a verbatim transcript. The model is fixed and
independent of the refinement model chosen by the user.
"""

from __future__ import annotations

import logging

from audio_codec import to_data_uri
from errors import EmptyResponse, MissingCredential, PolisherError
from interfaces import CredentialStore
from remote import check_response, error_from_exception, extract_text

try:
    import dashscope
except Exception:  # pragma: no cover
    dashscope = None  # type: ignore

logger = logging.getLogger(__name__)

TRANSCRIPTION_MODEL = "qwen-audio-turbo"
TRANSCRIBE_INSTRUCTION = (
    "Transcribe the spoken audio into text. Write down exactly what is said, "
    "including prominent filler words, but do not add any commentary or timestamps."
)


class DashscopeTranscriptionClient:
    def __init__(
        self,
        credentials: CredentialStore,
        model: str = TRANSCRIPTION_MODEL,
        request_timeout_s: float | None = None,
    ) -> None:
        self._credentials = credentials
        self._model = model
        self._request_timeout_s = request_timeout_s

    def transcribe(self, audio: bytes, mime_type: str) -> str:
        api_key = self._credentials.get_api_key()
        if not api_key:
            raise MissingCredential()
        if dashscope is None:
            raise PolisherError("dashscope is not installed")

        logger.info("Transcribing %d bytes of %s with %s", len(audio), mime_type, self._model)
        kwargs = {}
        if self._request_timeout_s is not None:
            kwargs["timeout"] = self._request_timeout_s
        try:
            response = dashscope.MultiModalConversation.call(
                api_key=api_key,
                model=self._model,
                messages=[
                    {
                        "role": "user",
                        "content": [
                            {"audio": to_data_uri(audio, mime_type)},
                            {"text": TRANSCRIBE_INSTRUCTION},
                        ],
                    }
                ],
                **kwargs,
            )
        except Exception as exc:
            logger.warning("Transcription request failed: %s", exc)
            raise error_from_exception(exc) from exc

        check_response(response)
        transcript = extract_text(response).strip()
        if not transcript:
            raise EmptyResponse("No transcript received from the model.")
        return transcript
