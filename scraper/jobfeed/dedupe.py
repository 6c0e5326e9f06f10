"""Run-scoped duplicate suppression for collected job records.

Identity keys come from `extractor.identity_key` (card id, else normalized
link, else title+company). The index only ever grows during a run: once a key
is admitted, every later sighting of the same job is reported as a duplicate
and the first extracted record stays authoritative.

`admit` is the only entry point. Checking and inserting happen under one lock
so the index can be shared by cooperating threads without a separate
membership query racing the insert.
"""
from __future__ import annotations
from enum import Enum
from typing import Hashable, Set
import threading


class Admission(str, Enum):
    ACCEPTED = "accepted"
    DUPLICATE = "duplicate"


class DeduplicationIndex:
    def __init__(self):
        self._keys: Set[Hashable] = set()
        self._lock = threading.Lock()

    def admit(self, key: Hashable) -> Admission:
        with self._lock:
            if key in self._keys:
                return Admission.DUPLICATE
            self._keys.add(key)
            return Admission.ACCEPTED

    def __len__(self) -> int:
        with self._lock:
            return len(self._keys)


__all__ = ["Admission", "DeduplicationIndex"]
