"""Tests for the in-process row lock registry."""

import threading
import time

import pytest
from protean.exceptions import ConfigurationError
from stockflow.exceptions import ConcurrencyTimeout
from stockflow.inventory.locks import (
    DEFAULT_LOCK_TIMEOUT,
    LockRegistry,
    ensure_single_process,
    get_lock_registry,
    order_key,
    reset_lock_registry,
    stock_key,
)


class TestHold:
    def test_holds_inside_block_only(self):
        registry = LockRegistry(timeout=1)
        with registry.hold(order_key("o1"), stock_key("p1")):
            assert registry.holds(order_key("o1"), stock_key("p1"))
        assert not registry.holds(order_key("o1"))

    def test_nested_hold_of_same_key_is_allowed(self):
        registry = LockRegistry(timeout=0.1)
        with registry.hold(order_key("o1")):
            with registry.hold(order_key("o1"), stock_key("p1")):
                assert registry.holds(order_key("o1"), stock_key("p1"))
            assert registry.holds(order_key("o1"))
            assert not registry.holds(stock_key("p1"))

    def test_keys_are_released_when_block_raises(self):
        registry = LockRegistry(timeout=0.1)
        with pytest.raises(RuntimeError):
            with registry.hold(stock_key("p1")):
                raise RuntimeError("boom")
        with registry.hold(stock_key("p1")):
            assert registry.holds(stock_key("p1"))

    def test_held_keys_are_per_thread(self):
        registry = LockRegistry(timeout=0.1)
        seen = {}

        def other_thread():
            seen["holds"] = registry.holds(stock_key("p1"))

        with registry.hold(stock_key("p1")):
            thread = threading.Thread(target=other_thread)
            thread.start()
            thread.join()

        assert seen["holds"] is False

    def test_order_key_sorts_before_stock_keys(self):
        keys = [stock_key("a"), order_key("z"), stock_key("0")]
        assert sorted(keys)[0] == order_key("z")

    def test_locks_are_dropped_once_released(self):
        registry = LockRegistry(timeout=1)
        with registry.hold(order_key("o1"), stock_key("p1")):
            assert len(registry) == 2
            with registry.hold(order_key("o1")):
                assert len(registry) == 2
        assert len(registry) == 0

    def test_locks_are_dropped_when_block_raises(self):
        registry = LockRegistry(timeout=1)
        with pytest.raises(RuntimeError):
            with registry.hold(order_key("o1"), stock_key("p1")):
                raise RuntimeError("boom")
        assert len(registry) == 0


class TestTimeout:
    def test_waiter_times_out(self):
        registry = LockRegistry(timeout=0.05)
        acquired = threading.Event()
        release = threading.Event()

        def holder():
            with registry.hold(stock_key("p1")):
                acquired.set()
                release.wait(timeout=5)

        thread = threading.Thread(target=holder)
        thread.start()
        acquired.wait(timeout=5)
        try:
            started = time.monotonic()
            with pytest.raises(ConcurrencyTimeout) as exc:
                with registry.hold(stock_key("p0"), stock_key("p1")):
                    pass
            assert time.monotonic() - started < 2
        finally:
            release.set()
            thread.join()

        assert exc.value.key == stock_key("p1")
        assert exc.value.timeout == 0.05
        # The key acquired before the timeout was released again
        assert not registry.holds(stock_key("p0"))
        with registry.hold(stock_key("p0")):
            pass
        assert len(registry) == 0

    def test_waiter_proceeds_once_released(self):
        registry = LockRegistry(timeout=2)
        order = []
        acquired = threading.Event()

        def holder():
            with registry.hold(stock_key("p1")):
                acquired.set()
                time.sleep(0.05)
                order.append("holder")

        thread = threading.Thread(target=holder)
        thread.start()
        acquired.wait(timeout=5)
        with registry.hold(stock_key("p1")):
            order.append("waiter")
        thread.join()

        assert order == ["holder", "waiter"]
        assert len(registry) == 0


class TestSingleton:
    def test_default_timeout(self, monkeypatch):
        monkeypatch.delenv("STOCKFLOW_LOCK_TIMEOUT", raising=False)
        reset_lock_registry()
        assert get_lock_registry().timeout == DEFAULT_LOCK_TIMEOUT

    def test_timeout_from_environment(self, monkeypatch):
        monkeypatch.setenv("STOCKFLOW_LOCK_TIMEOUT", "0.25")
        reset_lock_registry()
        assert get_lock_registry().timeout == 0.25

    def test_singleton(self):
        assert get_lock_registry() is get_lock_registry()


class TestSingleProcess:
    def test_single_worker_is_accepted(self, monkeypatch):
        monkeypatch.delenv("WEB_CONCURRENCY", raising=False)
        ensure_single_process()
        monkeypatch.setenv("WEB_CONCURRENCY", "1")
        ensure_single_process()

    def test_several_workers_are_refused(self, monkeypatch):
        monkeypatch.setenv("WEB_CONCURRENCY", "4")
        with pytest.raises(ConfigurationError):
            ensure_single_process()
