"""
Cloud Sync Service
==================
Keeps local state and the single remote bin converging without a push channel.

- connect: adopt the remote snapshot, or seed it from local state
- push: debounced full-snapshot upload after local mutations
- poll: periodic fetch; a newer remote snapshot overwrites local state wholesale

Everything here runs on the one event loop that also runs state mutations, so
the `_syncing` flag is enough to keep push and poll from overlapping.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional

from ..attendance.service import AttendanceStateManager
from ..common.datetime_utils import now_ms
from ..core.constants import (
    DEFAULT_POLL_INTERVAL_SECONDS,
    DEFAULT_PUSH_DEBOUNCE_SECONDS,
    REMOTE_CONFIG_KEY,
)
from ..core.enums import ChangeOrigin, CloudStatus
from ..core.exceptions import CloudConnectionFailed, CloudError
from ..storage.repository import KeyValueStore
from .repository import BlobStore
from .schema import RemoteConfig, RemoteSnapshot, parse_remote_record

logger = logging.getLogger(__name__)


class CloudSyncService:
    """
    Reconciliation loop between the state manager and a remote bin.

    Usage (on the event loop):
        sync = CloudSyncService(state, JsonBinClient(), store)
        await sync.start()          # silent reconnect from stored credentials
        await sync.connect(config)  # explicit connect, raises CloudConnectionFailed
        await sync.disconnect()
    """

    def __init__(
        self,
        state: AttendanceStateManager,
        client: BlobStore,
        store: KeyValueStore,
        *,
        clock: Optional[Callable[[], int]] = None,
        push_debounce: float = DEFAULT_PUSH_DEBOUNCE_SECONDS,
        poll_interval: float = DEFAULT_POLL_INTERVAL_SECONDS,
    ):
        self._state = state
        self._client = client
        self._store = store
        self._clock = clock or now_ms
        self._push_debounce = float(push_debounce)
        self._poll_interval = float(poll_interval)

        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._config: Optional[RemoteConfig] = None
        # Bumped on every connect/disconnect/stop; stale results are dropped.
        self._generation = 0

        self._status = CloudStatus.DISCONNECTED
        self._error: Optional[str] = None
        self._last_synced_at: Optional[int] = None
        self.last_remote_update = 0

        self._syncing = False
        self._dirty = False
        self._change_seq = 0

        self._push_timer: Optional[asyncio.TimerHandle] = None
        self._push_task: Optional[asyncio.Task] = None
        self._poll_task: Optional[asyncio.Task] = None

        self.poll_failures = 0
        self.last_poll_error: Optional[str] = None

        self._unsubscribe = state.subscribe(self._on_state_changed)

    # ---- public state ----------------------------------------------------

    @property
    def config(self) -> Optional[RemoteConfig]:
        return self._config

    @property
    def is_configured(self) -> bool:
        return self._config is not None

    @property
    def cloud_status(self) -> CloudStatus:
        return self._status

    @property
    def dirty(self) -> bool:
        return self._dirty

    @property
    def push_pending(self) -> bool:
        return self._push_timer is not None

    def status(self) -> dict:
        return {
            "status": self._status.value,
            "error": self._error,
            "lastSyncedAt": self._last_synced_at,
            "binId": self._config.bin_id if self._config else None,
            "dirty": self._dirty,
            "pollFailures": self.poll_failures,
        }

    # ---- lifecycle -------------------------------------------------------

    async def start(self) -> None:
        """Reconnect from stored credentials. Failures fall back to local-only."""
        self._loop = asyncio.get_running_loop()
        config = RemoteConfig.from_dict(self._store.read(REMOTE_CONFIG_KEY))
        if config:
            logger.info(f"Reconnecting to stored bin {config.bin_id}")
            await self.connect(config, startup=True)

    async def stop(self) -> None:
        """Cancel timers but keep the stored credentials (process teardown)."""
        self._generation += 1
        await self._cancel_background()
        self._unsubscribe()

    async def connect(self, config: RemoteConfig, *, startup: bool = False) -> None:
        """
        Link to a bin.

        Adopts a valid remote snapshot wholesale; otherwise seeds the bin from
        local state when there is at least one group. Explicit connects raise
        CloudConnectionFailed; a first connect then leaves no credentials behind
        while a failed refresh keeps the previous link polling. Startup connects
        log the failure and keep polling so the link can recover.
        """
        self._loop = asyncio.get_running_loop()
        self._generation += 1
        token = self._generation
        previous = self._config
        await self._cancel_background()

        self._status = CloudStatus.SYNCING
        self._error = None
        self._syncing = True
        try:
            record = await self._client.fetch_latest(config)
        except CloudConnectionFailed as e:
            if token != self._generation:
                return
            self._status = CloudStatus.ERROR
            self._error = str(e) or "Connection failed"
            if startup:
                logger.warning(f"Startup connect to bin {config.bin_id} failed, running local-only: {e}")
                self._config = config
                self._start_polling(token)
                return
            logger.error(f"Connect to bin {config.bin_id} failed: {e}")
            # A failed refresh keeps the working link; a first connect leaves none.
            self._config = previous
            if previous is not None:
                self._start_polling(token)
            raise
        finally:
            self._syncing = False

        if token != self._generation:
            return

        self._config = config
        snapshot = parse_remote_record(record)
        if snapshot is not None:
            logger.info(f"Loaded data from bin {config.bin_id}")
            self._apply(snapshot)
        else:
            logger.info(f"Bin {config.bin_id} is empty or invalid, keeping local state")
            self._status = CloudStatus.IDLE
            if self._state.groups:
                await self._push(token)

        self._store.write(REMOTE_CONFIG_KEY, config.to_dict())
        self._start_polling(token)

    async def refresh(self) -> None:
        """Re-run connect with the current credentials."""
        if self._config:
            await self.connect(self._config)

    async def disconnect(self) -> None:
        """Forget the credentials and stop all background work.

        Local collections are left as they are.
        """
        self._generation += 1
        await self._cancel_background()
        self._config = None
        self._status = CloudStatus.DISCONNECTED
        self._error = None
        self._last_synced_at = None
        self._dirty = False
        self._store.delete(REMOTE_CONFIG_KEY)
        logger.info("Disconnected from cloud bin")

    # ---- push ------------------------------------------------------------

    def _on_state_changed(self, changed: frozenset, origin: ChangeOrigin) -> None:
        # Remote overwrites are persisted locally but never pushed back.
        if origin is not ChangeOrigin.LOCAL or self._config is None:
            return
        self._dirty = True
        self._change_seq += 1
        self.schedule_push()

    def schedule_push(self) -> None:
        """(Re)arm the debounce timer; bursts of changes coalesce into one push."""
        if self._config is None or self._loop is None:
            return
        if self._push_timer:
            self._push_timer.cancel()
        self._push_timer = self._loop.call_later(self._push_debounce, self._fire_push, self._generation)

    def _fire_push(self, token: int) -> None:
        self._push_timer = None
        if token != self._generation or self._config is None:
            return
        if self._syncing:
            self.schedule_push()
            return
        self._push_task = self._loop.create_task(self._push(token))

    async def _push(self, token: int) -> bool:
        config = self._config
        if config is None or token != self._generation:
            return False

        updated_at = self._clock()
        seq = self._change_seq
        payload = self._state.snapshot(updated_at=updated_at)

        self._syncing = True
        self._status = CloudStatus.SYNCING
        try:
            await self._client.replace(config, payload)
        except CloudError as e:
            if token == self._generation:
                logger.error(f"Cloud save failed: {e}")
                self._status = CloudStatus.ERROR
                self._error = "Sync failed, please check the network"
            return False
        finally:
            self._syncing = False

        if token != self._generation:
            return False

        self.last_remote_update = updated_at
        self._last_synced_at = updated_at
        self._status = CloudStatus.IDLE
        self._error = None
        if seq == self._change_seq:
            self._dirty = False
        logger.info(f"Pushed snapshot to bin {config.bin_id} (updatedAt={updated_at})")
        return True

    # ---- poll ------------------------------------------------------------

    def _start_polling(self, token: int) -> None:
        self._poll_task = self._loop.create_task(self._poll_loop(token))

    async def _poll_loop(self, token: int) -> None:
        while token == self._generation and self._config is not None:
            await asyncio.sleep(self._poll_interval)
            try:
                await self.poll_once()
            except Exception as e:
                self.poll_failures += 1
                self.last_poll_error = str(e) or type(e).__name__
                logger.exception("Poll tick failed")

    async def poll_once(self) -> bool:
        """One poll tick. Returns True when a remote snapshot was applied.

        Failures are counted and logged, never raised.
        """
        config = self._config
        token = self._generation
        if config is None or self._syncing:
            return False

        self._syncing = True
        try:
            record = await self._client.fetch_latest(config)
        except CloudError as e:
            self.poll_failures += 1
            self.last_poll_error = str(e)
            logger.warning(f"Poll failed, retrying in {self._poll_interval:g}s: {e}")
            return False
        finally:
            self._syncing = False

        if token != self._generation or self._config is not config:
            return False

        snapshot = parse_remote_record(record)
        if snapshot is None:
            return False

        remote_ts = snapshot.updated_at or 0
        bootstrap = not self._state.groups and bool(snapshot.groups)
        if remote_ts > self.last_remote_update or bootstrap:
            logger.info(f"Polling: new cloud data detected (updatedAt={remote_ts})")
            self._apply(snapshot)
            return True
        return False

    # ---- internals -------------------------------------------------------

    def _apply(self, snapshot: RemoteSnapshot) -> None:
        self.last_remote_update = snapshot.updated_at or self._clock()
        self._state.replace_all(
            sessions=snapshot.sessions,
            groups=snapshot.groups,
            students=snapshot.students,
            origin=ChangeOrigin.REMOTE,
        )
        self._dirty = False
        self._last_synced_at = self._clock()
        self._status = CloudStatus.IDLE
        self._error = None

    async def _cancel_background(self) -> None:
        if self._push_timer:
            self._push_timer.cancel()
            self._push_timer = None

        current = asyncio.current_task()
        tasks = [t for t in (self._poll_task, self._push_task) if t and not t.done() and t is not current]
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._poll_task = None
        self._push_task = None
        self._syncing = False
