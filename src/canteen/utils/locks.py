"""Process-local mutual exclusion keyed by an arbitrary value.

Cart writes are serialized per owner and order placement per venue. The
lock is held across command dispatch so the read, the decision and the
commit happen as one step. A key's lock lives only while some thread holds
or waits for it.
"""

import threading
from contextlib import contextmanager


class _Entry:
    __slots__ = ("lock", "holders")

    def __init__(self):
        self.lock = threading.RLock()
        self.holders = 0


class KeyedLocks:
    def __init__(self):
        self._guard = threading.Lock()
        self._entries = {}

    def __len__(self):
        with self._guard:
            return len(self._entries)

    def _acquire_entry(self, key):
        with self._guard:
            entry = self._entries.get(key)
            if entry is None:
                entry = self._entries[key] = _Entry()
            entry.holders += 1
            return entry

    def _release_entry(self, key, entry):
        with self._guard:
            entry.holders -= 1
            if not entry.holders:
                del self._entries[key]

    @contextmanager
    def hold(self, key):
        entry = self._acquire_entry(key)
        try:
            with entry.lock:
                yield
        finally:
            self._release_entry(key, entry)


owner_locks = KeyedLocks()
venue_locks = KeyedLocks()
