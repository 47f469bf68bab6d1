"""Order-scoped exclusive locks for lifecycle commands.

Two commands against the same order must not interleave between reading
its state and committing the transition. Commands are therefore processed
while holding the order's lock; commands for different orders proceed in
parallel.
"""

import threading
from collections.abc import Iterator
from contextlib import contextmanager

from protean.utils.globals import current_domain

from fleetops.order.loading import find_order

_registry_lock = threading.Lock()
# order id -> [lock, number of holders and waiters]
_order_locks: dict[str, list] = {}


def _checkout(order_id: str) -> threading.Lock:
    with _registry_lock:
        entry = _order_locks.get(order_id)
        if entry is None:
            entry = _order_locks[order_id] = [threading.Lock(), 0]
        entry[1] += 1
        return entry[0]


def _checkin(order_id: str) -> None:
    with _registry_lock:
        entry = _order_locks[order_id]
        entry[1] -= 1
        if entry[1] == 0:
            del _order_locks[order_id]


@contextmanager
def order_lock(order_id: str, timeout: float = 30.0) -> Iterator[None]:
    """Hold the exclusive lock of one order for the duration of the block.

    The lock is dropped from the registry once nobody holds or waits for it.
    """
    order_id = str(order_id)
    lock = _checkout(order_id)
    try:
        if not lock.acquire(timeout=timeout):
            raise TimeoutError(f"Timed out waiting for lock on order {order_id}")
        try:
            yield
        finally:
            lock.release()
    finally:
        _checkin(order_id)


def process_locked(command):
    """Process an order command synchronously while holding that order's lock."""
    # Public and internal ids of one order share a lock
    order_id = str(find_order(command.order_id).id)
    with order_lock(order_id):
        return current_domain.process(command, asynchronous=False)
