"""File-backed key/value store for the client's credentials."""

import json
import logging
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

TOKEN_KEY = "token"
USER_KEY = "user"


class CredentialStore:
    """
    A small "local storage": string values under fixed keys in one JSON file.

    Contents are untrusted. A missing, unreadable or malformed file reads as
    empty, and only string values are returned. Any write replaces a malformed
    file with well-formed JSON.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def _load(self) -> dict:
        try:
            raw = self.path.read_bytes()
        except FileNotFoundError:
            return {}
        except OSError:
            logger.warning("Could not read client storage at %s", self.path)
            return {}
        try:
            data = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError):
            logger.warning("Client storage at %s is corrupt, ignoring it", self.path)
            return {}
        return data if isinstance(data, dict) else {}

    def _save(self, data: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data), encoding="utf-8")

    def get_item(self, key: str) -> Optional[str]:
        value = self._load().get(key)
        return value if isinstance(value, str) else None

    def set_item(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._save(data)

    def remove_item(self, key: str) -> None:
        data = self._load()
        data.pop(key, None)
        # Rewrite even when the key was absent so a corrupt file does not survive.
        if self.path.exists():
            self._save(data)

    def get_token(self) -> Optional[str]:
        return self.get_item(TOKEN_KEY)

    def save_credentials(self, token: str, user_json: str) -> None:
        data = self._load()
        data[TOKEN_KEY] = token
        data[USER_KEY] = user_json
        self._save(data)

    def clear_credentials(self) -> None:
        data = self._load()
        data.pop(TOKEN_KEY, None)
        data.pop(USER_KEY, None)
        if self.path.exists():
            self._save(data)
