import json
import os
from pathlib import Path
from typing import Any, Optional


class SecretsManager:
    """Look up credentials in a JSON file, falling back to the environment.

    The file pointed to by ``SECRETS_PATH`` is read once and cached. A key
    missing from the file is looked up in ``os.environ`` before *default* is
    returned. Tests may replace the cache via :meth:`set_override` or
    :meth:`update`.
    """

    def __init__(self, path: str | Path | None = None) -> None:
        self._path = Path(
            path or os.getenv("SECRETS_PATH", "~/.config/investec/secrets.json")
        ).expanduser()
        self._cache: dict[str, Any] | None = None

    def _load(self) -> dict[str, Any]:
        if self._cache is None:
            try:
                with self._path.open("r", encoding="utf-8") as fh:
                    self._cache = json.load(fh)
            except FileNotFoundError:
                self._cache = {}
        return self._cache

    def get(self, key: str, default: Optional[Any] = None) -> Any:
        """Return secret value for *key* (file, then env) or *default*."""

        value = self._load().get(key)
        if value is None:
            value = os.getenv(key)
        return default if value is None else value

    def set_override(self, data: dict[str, Any]) -> None:
        """Replace the entire secret cache (test helper)."""

        self._cache = dict(data)

    def update(self, data: dict[str, Any]) -> None:
        """Merge *data* into the existing cache (test helper)."""

        current = self._load()
        current.update(data)
        self._cache = current


# Global default manager
secrets = SecretsManager()


def get_secret(key: str, default: Optional[Any] = None) -> Any:
    """Convenience wrapper around :class:`SecretsManager`."""

    return secrets.get(key, default)
