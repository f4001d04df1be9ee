"""Shared error codes, user-facing messages and exception types."""

from __future__ import annotations

MISSING_CREDENTIAL = "MISSING_CREDENTIAL"
DEVICE_UNAVAILABLE = "DEVICE_UNAVAILABLE"
EMPTY_RESPONSE = "EMPTY_RESPONSE"
REMOTE_ERROR = "REMOTE_ERROR"
NETWORK_ERROR = "NETWORK_ERROR"
AUTH_FAILED = "AUTH_FAILED"

ERROR_MESSAGES = {
    MISSING_CREDENTIAL: "API key is missing. Please set it in Settings.",
    DEVICE_UNAVAILABLE: "Microphone access denied or not available.",
    EMPTY_RESPONSE: "No response received from the model.",
    REMOTE_ERROR: "Failed to process text.",
    NETWORK_ERROR: "Network failed, please retry.",
    AUTH_FAILED: "API key is invalid.",
}

# Codes that should send the user back to credential entry.
CREDENTIAL_CODES = frozenset({MISSING_CREDENTIAL, AUTH_FAILED})


class PolisherError(Exception):
    code = REMOTE_ERROR

    def __init__(self, message: str = "", code: str | None = None) -> None:
        if code is not None:
            self.code = code
        self.message = message or ERROR_MESSAGES.get(self.code, self.code)
        super().__init__(self.message)

    @property
    def needs_credential(self) -> bool:
        return self.code in CREDENTIAL_CODES


class MissingCredential(PolisherError):
    code = MISSING_CREDENTIAL


class DeviceUnavailable(PolisherError):
    code = DEVICE_UNAVAILABLE


class EmptyResponse(PolisherError):
    code = EMPTY_RESPONSE


class RemoteError(PolisherError):
    """Provider failure; ``code`` is REMOTE_ERROR, NETWORK_ERROR or AUTH_FAILED."""

    code = REMOTE_ERROR
