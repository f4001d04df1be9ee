"""System clipboard service."""

from __future__ import annotations

import logging

try:
    import pyperclip
except Exception:  # pragma: no cover
    pyperclip = None  # type: ignore

logger = logging.getLogger(__name__)


class PyperclipClipboard:
    def copy_text(self, text: str) -> bool:
        if not text:
            return False
        if pyperclip is None:
            logger.warning("pyperclip is not installed; cannot copy")
            return False
        try:
            pyperclip.copy(text)
        except pyperclip.PyperclipException as exc:
            logger.warning("Clipboard write failed: %s", exc)
            return False
        return True
