"""Simple JSON-based credential store."""

from __future__ import annotations

import json
import logging
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "speech_polisher" / "config.json"
API_KEY_FIELD = "api_key"


class JsonConfigStore:
    def __init__(self, path: Path | None = None) -> None:
        self._path = path or DEFAULT_CONFIG_PATH
        self._path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def path(self) -> Path:
        return self._path

    def get_api_key(self) -> str:
        data = self._read_all()
        return str(data.get(API_KEY_FIELD, ""))

    def set_api_key(self, key: str) -> None:
        data = self._read_all()
        data[API_KEY_FIELD] = key
        self._write_all(data)
        logger.info("API key %s", "saved" if key else "cleared")

    def has_api_key(self) -> bool:
        return bool(self.get_api_key())

    def _read_all(self) -> dict:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as exc:
            logger.warning("Ignoring unreadable config %s: %s", self._path, exc)
            return {}
        return data if isinstance(data, dict) else {}

    def _write_all(self, data: dict) -> None:
        self._path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
