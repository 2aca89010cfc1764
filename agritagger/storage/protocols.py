from __future__ import annotations

from typing import Optional, Protocol


class KeyValueStorage(Protocol):
    """Interface for local key/value storage implementations."""

    def read(self, key: str) -> Optional[str]:
        ...

    def write(self, key: str, value: str) -> None:
        ...

    def exists(self, key: str) -> bool:
        ...
