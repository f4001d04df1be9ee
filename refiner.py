"""Text refinement client using DashScope chat models."""

from __future__ import annotations

import logging

from errors import EmptyResponse, MissingCredential, PolisherError
from interfaces import CredentialStore
from models import DEFAULT_MODEL, ModelId
from remote import check_response, error_from_exception, extract_text

try:
    import dashscope
except Exception:  # pragma: no cover
    dashscope = None  # type: ignore

logger = logging.getLogger(__name__)

SYSTEM_INSTRUCTION = """\
# Role
You are an experienced professional text editor specializing in converting \
colloquial, spoken transcripts into fluent, professional written articles.

# Task
Polish and rewrite the [Oral Text] provided by the user into standard [Written Language].

# Rules
1. **De-noise**: Remove all meaningless interjections (e.g., "um, uh, like, you know"), \
filler words, and repetitions.
2. **Correction**: Fix grammatical errors, adjust word order, and ensure sentence \
structure conforms to written standards.
3. **Faithfulness**: **Strictly maintain the core meaning and logic of the original \
text**. Do not arbitrarily delete key information or add content not present in the original.
4. **Style**: The writing style should be concise, objective, and smooth.

# Output
Output ONLY the polished text. Do not include any explanations, preambles, or \
markdown formatting blocks (like ```).
"""

REFINE_TEMPERATURE = 0.3


class DashscopeRefinementClient:
    def __init__(
        self,
        credentials: CredentialStore,
        temperature: float = REFINE_TEMPERATURE,
        request_timeout_s: float | None = None,
    ) -> None:
        self._credentials = credentials
        self._temperature = temperature
        self._request_timeout_s = request_timeout_s

    def polish(self, text: str, model: ModelId | str = DEFAULT_MODEL) -> str:
        """Send ``text`` through the editing prompt and return the cleaned result.

        Raises:
            ValueError: ``text`` is empty after trimming.
            MissingCredential: no API key is stored.
            EmptyResponse: the call succeeded but produced no text.
            RemoteError: transport, authentication or quota failure.
        """
        if not text.strip():
            raise ValueError("Input text cannot be empty.")
        api_key = self._credentials.get_api_key()
        if not api_key:
            raise MissingCredential()
        if dashscope is None:
            raise PolisherError("dashscope is not installed")

        model_name = ModelId(model).value
        logger.info("Refining %d chars with %s", len(text), model_name)
        kwargs = {}
        if self._request_timeout_s is not None:
            kwargs["timeout"] = self._request_timeout_s
        try:
            response = dashscope.Generation.call(
                api_key=api_key,
                model=model_name,
                messages=[
                    {"role": "system", "content": SYSTEM_INSTRUCTION},
                    {"role": "user", "content": text},
                ],
                result_format="message",
                temperature=self._temperature,
                **kwargs,
            )
        except Exception as exc:
            logger.warning("Refinement request failed: %s", exc)
            raise error_from_exception(exc) from exc

        check_response(response)
        polished = extract_text(response).strip()
        if not polished:
            raise EmptyResponse("No response received from the model.")
        return polished
