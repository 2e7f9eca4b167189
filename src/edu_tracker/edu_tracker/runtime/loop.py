from __future__ import annotations

import asyncio
import logging
import threading
from typing import Any, Awaitable, Callable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class LoopRunner:
    """Owns the single asyncio event loop, running on a daemon thread.

    Request threads never touch state directly: they hand callables and
    coroutines to this loop, so mutations, pushes and polls are serialized.
    """

    def __init__(self, *, name: str = "edu-tracker-loop", call_timeout: Optional[float] = 30.0):
        self._name = name
        self._call_timeout = call_timeout
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._thread: Optional[threading.Thread] = None
        self._ready = threading.Event()

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._loop = asyncio.new_event_loop()
        self._ready.clear()
        self._thread = threading.Thread(target=self._worker, name=self._name, daemon=True)
        self._thread.start()
        self._ready.wait()

    def _worker(self) -> None:
        loop = self._loop
        asyncio.set_event_loop(loop)
        self._ready.set()
        try:
            loop.run_forever()
        finally:
            pending = asyncio.all_tasks(loop)
            for task in pending:
                task.cancel()
            if pending:
                loop.run_until_complete(asyncio.gather(*pending, return_exceptions=True))
            loop.run_until_complete(loop.shutdown_asyncgens())
            loop.close()
            logger.debug("Event loop closed")

    def run(self, coro: Awaitable[T], *, timeout: Optional[float] = None) -> T:
        """Run a coroutine on the loop and block the calling thread for its result."""
        if not self.running:
            raise RuntimeError("LoopRunner is not started")
        future = asyncio.run_coroutine_threadsafe(coro, self._loop)
        return future.result(timeout if timeout is not None else self._call_timeout)

    def call(self, fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """Run a plain function on the loop thread."""

        async def _invoke() -> T:
            return fn(*args, **kwargs)

        return self.run(_invoke())

    def stop(self) -> None:
        if not self.running:
            return
        self._loop.call_soon_threadsafe(self._loop.stop)
        self._thread.join()
        self._thread = None
