from __future__ import annotations

import os
import re
import tempfile
from pathlib import Path
from typing import Optional

from agritagger.storage.protocols import KeyValueStorage

_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


class LocalStorageError(Exception):
    """Raised when local key/value storage operations fail."""


class LocalKeyValueStorage(KeyValueStorage):
    """Key/value storage keeping one UTF-8 file per key under a root directory."""

    def __init__(self, root: Path) -> None:
        self._root = root
        self._root.mkdir(parents=True, exist_ok=True)

    def read(self, key: str) -> Optional[str]:
        target = self._resolve(key)
        if not target.exists():
            return None
        try:
            return target.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise LocalStorageError(f"Unable to read {target}") from exc

    def write(self, key: str, value: str) -> None:
        """Replace the value of ``key`` in one atomic rename."""
        target = self._resolve(key)
        target.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{target.name}.", dir=target.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(value)
            os.replace(tmp_name, target)
        except OSError as exc:
            try:
                os.unlink(tmp_name)
            except OSError:
                pass  # already moved or never written
            raise LocalStorageError(f"Unable to write {target}") from exc

    def exists(self, key: str) -> bool:
        return self._resolve(key).exists()

    def path_for(self, key: str) -> Path:
        return self._resolve(key)

    def _resolve(self, key: str) -> Path:
        safe = _UNSAFE_KEY_CHARS.sub("_", key).strip("._")
        if not safe:
            raise LocalStorageError(f"Invalid storage key: {key!r}")
        return (self._root / f"{safe}.json").resolve()
