from __future__ import annotations

from typing import Any, Optional, Protocol

from .schema import RemoteConfig


class BlobStore(Protocol):
    """Interface for the hosted single-document store.

    No partial updates: a fetch returns the whole record, a replace overwrites it.
    """

    async def fetch_latest(self, config: RemoteConfig) -> Optional[Any]:
        """Return the stored record, or None if the bin holds nothing.

        Raises CloudConnectionFailed on auth/not-found/network failures.
        """
        raise NotImplementedError

    async def replace(self, config: RemoteConfig, payload: dict) -> Any:
        """Overwrite the bin. Raises CloudSyncFailed on failure."""
        raise NotImplementedError

    async def close(self) -> None:
        raise NotImplementedError
