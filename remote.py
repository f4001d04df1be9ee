"""Helpers shared by the DashScope-backed clients.

DashScope SDK calls do not raise on HTTP failures; they return a response
whose ``status_code``/``code``/``message`` describe the problem. Transport
failures (DNS, refused connections, timeouts) surface as exceptions from the
underlying HTTP stack. Both paths are folded into :class:`RemoteError` with a
structured code so callers never have to inspect message text.
"""

from __future__ import annotations

from http import HTTPStatus
from typing import Any

from errors import AUTH_FAILED, NETWORK_ERROR, REMOTE_ERROR, RemoteError

AUTH_STATUS_CODES = frozenset({HTTPStatus.UNAUTHORIZED, HTTPStatus.FORBIDDEN})
AUTH_ERROR_CODES = frozenset({"InvalidApiKey", "Unauthorized", "AccessDenied"})


def _field(obj: Any, name: str, default: Any = None) -> Any:
    if isinstance(obj, dict):
        return obj.get(name, default)
    return getattr(obj, name, default)


def check_response(response: Any) -> None:
    """Raise :class:`RemoteError` unless ``response`` reports success."""
    if response is None:
        raise RemoteError("No response received from the model.")
    status = _field(response, "status_code", HTTPStatus.OK)
    if status == HTTPStatus.OK:
        return
    provider_code = str(_field(response, "code", "") or "")
    message = str(_field(response, "message", "") or "") or f"Request failed with status {status}"
    if status in AUTH_STATUS_CODES or provider_code in AUTH_ERROR_CODES:
        raise RemoteError(message, code=AUTH_FAILED)
    raise RemoteError(message, code=REMOTE_ERROR)


def error_from_exception(exc: Exception) -> RemoteError:
    """Map an SDK/transport exception to a RemoteError."""
    message = str(exc) or exc.__class__.__name__
    if isinstance(exc, OSError):
        return RemoteError(message, code=NETWORK_ERROR)
    return RemoteError(message, code=REMOTE_ERROR)


def extract_text(response: Any) -> str:
    """Pull the first choice's text out of a message-format response."""
    output = _field(response, "output") or {}
    choices = _field(output, "choices") or []
    if not choices:
        return ""
    message = _field(choices[0], "message") or {}
    content = _field(message, "content")
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = [str(_field(part, "text", "") or "") for part in content if part is not None]
        return "".join(parts)
    return ""
