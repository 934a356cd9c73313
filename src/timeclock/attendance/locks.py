from __future__ import annotations

import threading
from contextlib import contextmanager
from datetime import date
from typing import Dict, Iterator, List, Tuple

Key = Tuple[int, date]


class DayLocks:
    """One mutex per (employee_id, work_date).

    Serializes every mutating transition of an employee-day inside this
    process; the storage unique index covers multiple processes. An entry
    lives only while some caller holds or waits on it.
    """

    def __init__(self):
        self._guard = threading.Lock()
        # key -> [lock, number of callers holding or waiting]
        self._locks: Dict[Key, List] = {}

    def _acquire_entry(self, key: Key) -> threading.Lock:
        with self._guard:
            entry = self._locks.get(key)
            if entry is None:
                entry = [threading.Lock(), 0]
                self._locks[key] = entry
            entry[1] += 1
            return entry[0]

    def _release_entry(self, key: Key) -> None:
        with self._guard:
            entry = self._locks[key]
            entry[1] -= 1
            if entry[1] == 0:
                del self._locks[key]

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)

    @contextmanager
    def hold(self, employee_id: int, work_date: date) -> Iterator[None]:
        key = (int(employee_id), work_date)
        lock = self._acquire_entry(key)
        try:
            with lock:
                yield
        finally:
            self._release_entry(key)
