"""
Connection pool
===============

A bounded set of reusable handles to the backing store.

- ``initialize()`` opens the initial handles once, however many threads race it.
- ``acquire()`` waits a bounded time for an idle handle. When none shows up,
  or the one it gets is dead, it opens a fresh handle instead of failing.
- ``release()`` keeps a live handle only while the idle set is below
  ``max_size``; anything else is closed.
- ``shutdown()`` closes every idle handle. The next ``acquire()`` starts over.
  Handles released while the pool is shut down are closed, not kept.

Handles that are never released are not reclaimed: the pool simply opens new
ones as needed.
"""

import queue
import threading
from contextlib import contextmanager
from typing import Any, Callable, Dict, Generic, Iterator, Optional, TypeVar

import structlog

from ..exceptions import ResourceUnavailable

logger = structlog.get_logger(__name__)

H = TypeVar("H")


class ConnectionPool(Generic[H]):

    def __init__(
        self,
        factory: Callable[[], H],
        is_alive: Callable[[H], bool],
        close: Callable[[H], None],
        initial_size: int = 5,
        max_size: int = 20,
        acquire_timeout: float = 10.0,
    ):
        if max_size < 1:
            raise ValueError("max_size must be at least 1")

        self._factory = factory
        self._is_alive = is_alive
        self._close = close
        self.initial_size = max(0, min(initial_size, max_size))
        self.max_size = max_size
        self.acquire_timeout = acquire_timeout

        # Puts only happen under _lock so the size check in release() holds.
        self._idle: "queue.Queue[H]" = queue.Queue()
        self._lock = threading.Lock()
        self._initialized = False

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def size(self) -> int:
        """Number of idle handles currently held by the pool."""
        return self._idle.qsize()

    def initialize(self) -> None:
        with self._lock:
            if self._initialized:
                return

            # Top up to the floor; idle handles never exceed max_size
            missing = max(0, self.initial_size - self._idle.qsize())
            created = []
            try:
                for _ in range(missing):
                    created.append(self._create())
            except ResourceUnavailable:
                for handle in created:
                    self._destroy(handle)
                logger.error("Connection pool initialization failed", opened=len(created))
                raise

            for handle in created:
                self._idle.put_nowait(handle)

            self._initialized = True
            logger.info(
                "Connection pool initialized",
                initial_size=self.initial_size,
                max_size=self.max_size
            )

    def acquire(self, timeout: Optional[float] = None) -> H:
        """
        Borrow a handle. The caller must hand it back with release().

        Raises:
            ResourceUnavailable: a new handle was needed and could not be opened
        """
        if not self._initialized:
            self.initialize()

        wait = self.acquire_timeout if timeout is None else timeout
        try:
            handle = self._idle.get(timeout=wait) if wait > 0 else self._idle.get_nowait()
        except queue.Empty:
            logger.warning("No idle connection available, opening a new one", waited_seconds=wait)
            return self._create()

        if not self._healthy(handle):
            logger.debug("Replacing dead pooled connection")
            self._destroy(handle)
            return self._create()

        return handle

    def release(self, handle: Optional[H]) -> None:
        if handle is None:
            return

        if not self._healthy(handle):
            self._destroy(handle)
            return

        with self._lock:
            if self._initialized and self._idle.qsize() < self.max_size:
                self._idle.put_nowait(handle)
                return

        self._destroy(handle)

    def shutdown(self) -> None:
        with self._lock:
            closed = 0
            while True:
                try:
                    handle = self._idle.get_nowait()
                except queue.Empty:
                    break
                self._destroy(handle)
                closed += 1

            self._initialized = False
            logger.info("All pooled connections closed", closed=closed)

    @contextmanager
    def connection(self) -> Iterator[H]:
        handle = self.acquire()
        try:
            yield handle
        finally:
            self.release(handle)

    def test_connection(self) -> bool:
        try:
            with self.connection() as handle:
                return self._healthy(handle)
        except ResourceUnavailable as e:
            logger.error("Connection test failed", error=str(e))
            return False

    def status(self) -> Dict[str, Any]:
        return {
            "initialized": self._initialized,
            "pool_size": self.size,
            "max_pool_size": self.max_size,
            "initial_pool_size": self.initial_size,
        }

    def _create(self) -> H:
        try:
            return self._factory()
        except ResourceUnavailable:
            raise
        except Exception as e:
            raise ResourceUnavailable(
                f"Could not open a connection to the backing store: {e}",
                error_code="RESOURCE_UNAVAILABLE"
            ) from e

    def _healthy(self, handle: H) -> bool:
        try:
            return bool(self._is_alive(handle))
        except Exception as e:
            logger.debug("Liveness check raised", error=str(e))
            return False

    def _destroy(self, handle: H) -> None:
        try:
            self._close(handle)
        except Exception as e:
            logger.warning("Error closing connection", error=str(e))
