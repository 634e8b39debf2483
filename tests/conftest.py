"""Shared fixtures: in-memory storage and a pinned clock."""

import json

import pytest

from wellbeing.store.clock import FixedClock
from wellbeing.store.facade import WellbeingStore
from wellbeing.store.persistence import MemoryBackend, PersistentStore


class FailingBackend:
    """Backend whose every operation raises."""

    def read(self, key):
        raise OSError("storage disabled")

    def write(self, key, value):
        raise OSError("storage disabled")

    def delete(self, key):
        raise OSError("storage disabled")


def stored(backend: MemoryBackend, key: str):
    """Decode what the store wrote under a key."""
    raw = backend.data.get(key)
    return json.loads(raw) if raw is not None else None


@pytest.fixture
def backend():
    return MemoryBackend()


@pytest.fixture
def storage(backend):
    return PersistentStore(backend)


@pytest.fixture
def clock():
    return FixedClock.on("2024-01-01")


@pytest.fixture
def store(storage, clock):
    return WellbeingStore.open(storage, clock)
