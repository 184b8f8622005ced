"""Row locks for orders and stock records.

Keys are ``("order", order_id)`` and ``("stock", product_id)``. A caller takes
its order lock first and then the stock locks of the order's products in
ascending product identity; ``hold`` sorts the keys it is given, and since
"order" sorts before "stock" a combined request follows the same order.
Because every thread climbs the same ladder, no two threads can wait on each
other in a cycle.

Locks are held for the whole unit of work: acquired before a command is
processed and released after it has committed or rolled back. Waits are
bounded by ``STOCKFLOW_LOCK_TIMEOUT`` seconds; on expiry ``ConcurrencyTimeout``
is raised and nothing has been mutated.

Stock initialization, product removal and line additions also take the
product's stock lock, so none of them can interleave with a transition that
reads the same stock record or with each other.
"""

import os
import threading
import time
from contextlib import contextmanager

from protean.exceptions import ConfigurationError

from stockflow.domain import logger
from stockflow.exceptions import ConcurrencyTimeout

DEFAULT_LOCK_TIMEOUT = 5.0

ORDER = "order"
STOCK = "stock"


def order_key(order_id) -> tuple[str, str]:
    return (ORDER, str(order_id))


def stock_key(product_id) -> tuple[str, str]:
    return (STOCK, str(product_id))


class _Slot:
    """A lock plus the number of threads holding or waiting for it."""

    __slots__ = ("lock", "users")

    def __init__(self):
        self.lock = threading.Lock()
        self.users = 0


class LockRegistry:
    """In-process exclusive locks keyed by ``(kind, identity)``.

    Locks are not reentrant, but a thread asking again for a key it already
    holds is let through, so nested ``hold`` blocks are safe. A key's lock
    exists only while some thread holds or waits for it.
    """

    def __init__(self, timeout: float = DEFAULT_LOCK_TIMEOUT):
        self.timeout = timeout
        self._guard = threading.Lock()
        self._slots: dict[tuple[str, str], _Slot] = {}
        self._local = threading.local()

    def __len__(self) -> int:
        with self._guard:
            return len(self._slots)

    def _checkout(self, key) -> threading.Lock:
        with self._guard:
            slot = self._slots.get(key)
            if slot is None:
                slot = self._slots[key] = _Slot()
            slot.users += 1
            return slot.lock

    def _checkin(self, key) -> None:
        with self._guard:
            slot = self._slots[key]
            slot.users -= 1
            if slot.users == 0:
                del self._slots[key]

    def _held(self) -> set:
        if not hasattr(self._local, "keys"):
            self._local.keys = set()
        return self._local.keys

    def holds(self, *keys) -> bool:
        """True if the calling thread holds every one of ``keys``."""
        held = self._held()
        return all(key in held for key in keys)

    @contextmanager
    def hold(self, *keys, timeout: float | None = None):
        """Acquire ``keys`` in sorted order for the duration of the block."""
        timeout = self.timeout if timeout is None else timeout
        deadline = time.monotonic() + timeout
        held = self._held()
        acquired = []

        try:
            for key in sorted(set(keys)):
                if key in held:
                    continue
                lock = self._checkout(key)
                remaining = max(deadline - time.monotonic(), 0)
                if not lock.acquire(timeout=remaining):
                    self._checkin(key)
                    logger.warning("lock_timeout", kind=key[0], identity=key[1], timeout=timeout)
                    raise ConcurrencyTimeout(key, timeout)
                held.add(key)
                acquired.append((key, lock))
            logger.debug("locks_acquired", keys=[f"{kind}:{identity}" for kind, identity in keys])
            yield
        finally:
            for key, lock in reversed(acquired):
                held.discard(key)
                lock.release()
                self._checkin(key)


def ensure_single_process() -> None:
    """Refuse to serve from several worker processes.

    The registry only serializes threads of one process, so the stock ledger
    is safe only when a single worker owns it. uvicorn reads its worker
    count from ``WEB_CONCURRENCY``.
    """
    workers = int(os.environ.get("WEB_CONCURRENCY", "1") or "1")
    if workers > 1:
        raise ConfigurationError(f"stockflow row locks are in-process; run a single worker (WEB_CONCURRENCY={workers})")


_registry_instance = None


def get_lock_registry() -> LockRegistry:
    """Return the process-wide lock registry (singleton).

    The wait bound comes from the STOCKFLOW_LOCK_TIMEOUT environment variable.
    """
    global _registry_instance
    if _registry_instance is None:
        timeout = float(os.environ.get("STOCKFLOW_LOCK_TIMEOUT", DEFAULT_LOCK_TIMEOUT))
        _registry_instance = LockRegistry(timeout=timeout)
    return _registry_instance


def reset_lock_registry():
    """Reset the registry singleton (useful for testing)."""
    global _registry_instance
    _registry_instance = None
