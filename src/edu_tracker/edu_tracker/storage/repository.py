from __future__ import annotations

from typing import Any, Protocol


class KeyValueStore(Protocol):
    """Interface for the local durable store.

    Note (DIP): the state manager, sync service and admin gate depend on this
    interface, not on a concrete file layout. Values are JSON-compatible.
    """

    def read(self, key: str, default: Any = None) -> Any:
        raise NotImplementedError

    def write(self, key: str, value: Any) -> bool:
        raise NotImplementedError

    def delete(self, key: str) -> None:
        raise NotImplementedError
