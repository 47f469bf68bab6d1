"""Adapter registry — pluggable collaborators of the order state machine.

Provides singleton access to the flow provider, file store, notifier,
integrated vendor API and distance service. In-process implementations
are used by default; others are selected through environment variables
(FLOW_ADAPTER, FILE_STORE_ADAPTER, NOTIFIER_ADAPTER, VENDOR_ADAPTER,
DISTANCE_ADAPTER).
"""

import os

_instances: dict[str, object] = {}


def _build(kind: str):
    if kind == "flow":
        adapter = os.environ.get("FLOW_ADAPTER", "default")
        if adapter == "default":
            from fleetops.adapters.default_flow import DefaultFlow

            return DefaultFlow()
    elif kind == "file_store":
        adapter = os.environ.get("FILE_STORE_ADAPTER", "memory")
        if adapter == "memory":
            from fleetops.adapters.memory_file_store import MemoryFileStore

            return MemoryFileStore()
    elif kind == "notifier":
        adapter = os.environ.get("NOTIFIER_ADAPTER", "fake")
        if adapter == "fake":
            from fleetops.adapters.fake_notifier import FakeNotifier

            return FakeNotifier()
    elif kind == "vendor":
        adapter = os.environ.get("VENDOR_ADAPTER", "fake")
        if adapter == "fake":
            from fleetops.adapters.fake_vendor import FakeVendor

            return FakeVendor()
    elif kind == "distance":
        adapter = os.environ.get("DISTANCE_ADAPTER", "haversine")
        if adapter == "haversine":
            from fleetops.adapters.haversine_distance import HaversineDistance

            return HaversineDistance()
    else:
        raise ValueError(f"Unknown adapter kind: {kind}")

    raise ValueError(f"Unknown {kind} adapter: {adapter}")


def _get(kind: str):
    if kind not in _instances:
        _instances[kind] = _build(kind)
    return _instances[kind]


def get_flow():
    """Return the configured activity flow provider (singleton)."""
    return _get("flow")


def get_file_store():
    """Return the configured file store (singleton)."""
    return _get("file_store")


def get_notifier():
    """Return the configured notifier (singleton)."""
    return _get("notifier")


def get_vendor():
    """Return the configured integrated vendor adapter (singleton)."""
    return _get("vendor")


def get_distance_service():
    """Return the configured distance service (singleton)."""
    return _get("distance")


def reset_adapters():
    """Reset all adapter singletons (useful for testing)."""
    _instances.clear()
