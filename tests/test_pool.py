import threading
import time

import pytest

from flashnews.core.pool import ConnectionPool
from flashnews.exceptions import ResourceUnavailable


class FakeHandle:
    def __init__(self, number):
        self.number = number
        self.closed = False
        self.close_calls = 0

    def close(self):
        self.closed = True
        self.close_calls += 1


class FakeFactory:
    def __init__(self, fail=False, delay=0.0):
        self.created = []
        self.fail = fail
        self.delay = delay
        self._lock = threading.Lock()

    def __call__(self):
        if self.delay:
            time.sleep(self.delay)
        if self.fail:
            raise ConnectionError("database unreachable")
        with self._lock:
            handle = FakeHandle(len(self.created))
            self.created.append(handle)
        return handle


def make_pool(factory, initial_size=2, max_size=4, acquire_timeout=0.2):
    return ConnectionPool(
        factory=factory,
        is_alive=lambda h: not h.closed,
        close=lambda h: h.close(),
        initial_size=initial_size,
        max_size=max_size,
        acquire_timeout=acquire_timeout,
    )


class TestConnectionPoolLifecycle:
    def test_initialize_opens_initial_handles(self):
        factory = FakeFactory()
        pool = make_pool(factory, initial_size=3)

        pool.initialize()

        assert pool.initialized
        assert pool.size == 3
        assert len(factory.created) == 3

    def test_initial_size_is_capped_by_max_size(self):
        factory = FakeFactory()
        pool = make_pool(factory, initial_size=10, max_size=4)

        pool.initialize()

        assert pool.size == 4

    def test_concurrent_initialize_runs_once(self):
        factory = FakeFactory(delay=0.01)
        pool = make_pool(factory, initial_size=3, max_size=5)
        barrier = threading.Barrier(10)

        def worker():
            barrier.wait()
            pool.initialize()

        threads = [threading.Thread(target=worker) for _ in range(10)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(factory.created) == 3
        assert pool.size == 3

    def test_acquire_initializes_lazily(self):
        factory = FakeFactory()
        pool = make_pool(factory, initial_size=2)

        handle = pool.acquire()

        assert pool.initialized
        assert handle in factory.created
        assert pool.size == 1

    def test_initialize_failure_raises_resource_unavailable(self):
        pool = make_pool(FakeFactory(fail=True))

        with pytest.raises(ResourceUnavailable):
            pool.initialize()

        assert not pool.initialized

    def test_shutdown_closes_idle_handles_and_allows_reinitialization(self):
        factory = FakeFactory()
        pool = make_pool(factory, initial_size=2)
        pool.initialize()
        first_generation = list(factory.created)

        pool.shutdown()

        assert not pool.initialized
        assert pool.size == 0
        assert all(h.closed for h in first_generation)

        handle = pool.acquire()
        assert pool.initialized
        assert handle not in first_generation
        assert not handle.closed

    def test_handles_released_after_shutdown_are_closed(self):
        factory = FakeFactory()
        pool = make_pool(factory, initial_size=2, max_size=4, acquire_timeout=0.01)
        borrowed = [pool.acquire() for _ in range(4)]

        pool.shutdown()
        for handle in borrowed:
            pool.release(handle)

        assert pool.size == 0
        assert all(h.closed for h in borrowed)

        pool.initialize()
        assert pool.size == 2
        assert pool.size <= pool.max_size

    def test_reinitialize_tops_up_to_initial_size(self):
        factory = FakeFactory()
        pool = make_pool(factory, initial_size=3, max_size=4)
        pool.initialize()
        pool.shutdown()
        pool._idle.put_nowait(factory())

        pool.initialize()

        assert pool.size == 3
        assert len(factory.created) == 3 + 1 + 2

    def test_status_reports_pool_state(self):
        pool = make_pool(FakeFactory(), initial_size=2, max_size=4)
        pool.initialize()

        assert pool.status() == {
            "initialized": True,
            "pool_size": 2,
            "max_pool_size": 4,
            "initial_pool_size": 2,
        }


class TestConnectionPoolAcquireRelease:
    def test_acquire_replaces_dead_handle(self):
        factory = FakeFactory()
        pool = make_pool(factory, initial_size=1)
        pool.initialize()
        dead = factory.created[0]
        dead.closed = True

        handle = pool.acquire()

        assert handle is not dead
        assert not handle.closed
        assert dead.close_calls == 1

    def test_acquire_opens_new_handle_after_timeout(self):
        factory = FakeFactory()
        pool = make_pool(factory, initial_size=1, max_size=1, acquire_timeout=0.05)
        first = pool.acquire()

        started = time.monotonic()
        second = pool.acquire()
        elapsed = time.monotonic() - started

        assert second is not first
        assert elapsed >= 0.04
        assert len(factory.created) == 2

    def test_acquire_raises_when_new_handle_cannot_be_opened(self):
        factory = FakeFactory()
        pool = make_pool(factory, initial_size=0, acquire_timeout=0.01)
        pool.initialize()
        factory.fail = True

        with pytest.raises(ResourceUnavailable):
            pool.acquire()

    def test_release_keeps_at_most_max_size(self):
        factory = FakeFactory()
        pool = make_pool(factory, initial_size=0, max_size=2, acquire_timeout=0.01)
        handles = [pool.acquire() for _ in range(4)]

        for handle in handles:
            pool.release(handle)

        assert pool.size == 2
        assert [h.closed for h in handles] == [False, False, True, True]

    def test_release_ignores_none_and_closed_handles(self):
        factory = FakeFactory()
        pool = make_pool(factory, initial_size=1)
        pool.initialize()
        handle = pool.acquire()
        handle.close()

        pool.release(None)
        pool.release(handle)

        assert pool.size == 0

    def test_connection_context_returns_handle_on_error(self):
        factory = FakeFactory()
        pool = make_pool(factory, initial_size=1)
        pool.initialize()

        with pytest.raises(RuntimeError):
            with pool.connection():
                raise RuntimeError("boom")

        assert pool.size == 1

    def test_concurrent_use_never_shares_a_handle(self):
        factory = FakeFactory()
        pool = make_pool(factory, initial_size=2, max_size=4, acquire_timeout=0.01)
        in_use = set()
        guard = threading.Lock()
        violations = []

        def worker():
            for _ in range(50):
                handle = pool.acquire()
                with guard:
                    if id(handle) in in_use:
                        violations.append(handle.number)
                    in_use.add(id(handle))
                time.sleep(0.0005)
                with guard:
                    in_use.discard(id(handle))
                pool.release(handle)

        threads = [threading.Thread(target=worker) for _ in range(12)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert violations == []
        assert pool.size <= 4
        assert all(not h.closed for h in _drain(pool))


def _drain(pool):
    handles = []
    while pool.size:
        handles.append(pool.acquire(timeout=0))
    return handles
