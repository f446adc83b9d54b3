"""
NexaProc Core Records — Record Store
======================================
Generic list/get/create/update persistence collaborator, plus the
critical section that makes "recompute remaining → validate → write"
atomic for one sales order.

Records are plain dicts with a string "id". Line-item columns hold
codec-encoded text; services decode on read and encode on write.
"""

from __future__ import annotations

import copy
import logging
import threading
from contextlib import contextmanager
from typing import Dict, Iterator, List, Protocol

logger = logging.getLogger("nexaproc.records")

COLLECTIONS = (
    "quotations",
    "sales_orders",
    "delivery_orders",
    "invoices",
    "rfqs",
    "goods",
    "activity_logs",
)


class RecordNotFound(LookupError):
    def __init__(self, collection: str, record_id):
        self.collection = collection
        self.record_id = record_id
        super().__init__(f"{collection} record '{record_id}' not found.")


class UnknownCollection(ValueError):
    pass


def sales_order_lock_key(sales_order_id) -> str:
    return f"sales_order:{sales_order_id}"


def numbering_lock_key(collection: str) -> str:
    return f"numbering:{collection}"


# ══════════════════════════════════════════════════════════════
# PROTOCOL
# ══════════════════════════════════════════════════════════════

class RecordStore(Protocol):
    def list(self, collection: str, **filters) -> List[dict]:
        ...

    def get(self, collection: str, record_id) -> dict:
        ...

    def create(self, collection: str, data: dict) -> dict:
        ...

    def update(self, collection: str, record_id, changes: dict) -> dict:
        ...

    def critical_section(self, key: str):
        ...


# ══════════════════════════════════════════════════════════════
# IN-MEMORY STORE
# ══════════════════════════════════════════════════════════════

class InMemoryRecordStore:
    """
    Thread-safe in-memory store for tests and embedded use.

    critical_section(key) serializes callers sharing the key. Writes made
    inside the outermost section are journaled and rolled back if the
    section exits with an exception, so an aborted commit leaves nothing.
    """

    def __init__(self):
        self._data: Dict[str, Dict[str, dict]] = {name: {} for name in COLLECTIONS}
        self._counters: Dict[str, int] = {name: 0 for name in COLLECTIONS}
        self._data_lock = threading.RLock()
        self._key_locks: Dict[str, threading.RLock] = {}
        self._key_locks_guard = threading.Lock()
        self._local = threading.local()

    # ── helpers ───────────────────────────────────────────────

    def _table(self, collection: str) -> Dict[str, dict]:
        table = self._data.get(collection)
        if table is None:
            raise UnknownCollection(f"Unknown collection '{collection}'.")
        return table

    def _journal(self):
        return getattr(self._local, "journal", None)

    def _remember(self, collection: str, record_id: str) -> None:
        journal = self._journal()
        if journal is None or (collection, record_id) in journal:
            return
        previous = self._data[collection].get(record_id)
        journal[(collection, record_id)] = copy.deepcopy(previous)

    @staticmethod
    def _matches(record: dict, filters: dict) -> bool:
        for field_name, expected in filters.items():
            actual = record.get(field_name)
            if actual is None or expected is None:
                if actual is not expected:
                    return False
            elif str(actual) != str(expected):
                return False
        return True

    # ── RecordStore API ───────────────────────────────────────

    def list(self, collection: str, **filters) -> List[dict]:
        with self._data_lock:
            table = self._table(collection)
            return [
                copy.deepcopy(record)
                for record in table.values()
                if self._matches(record, filters)
            ]

    def get(self, collection: str, record_id) -> dict:
        with self._data_lock:
            record = self._table(collection).get(str(record_id))
            if record is None:
                raise RecordNotFound(collection, record_id)
            return copy.deepcopy(record)

    def create(self, collection: str, data: dict) -> dict:
        with self._data_lock:
            table = self._table(collection)
            self._counters[collection] += 1
            record_id = str(self._counters[collection])
            self._remember(collection, record_id)
            record = copy.deepcopy(data)
            record["id"] = record_id
            table[record_id] = record
            return copy.deepcopy(record)

    def update(self, collection: str, record_id, changes: dict) -> dict:
        with self._data_lock:
            table = self._table(collection)
            key = str(record_id)
            if key not in table:
                raise RecordNotFound(collection, record_id)
            self._remember(collection, key)
            record = table[key]
            record.update(copy.deepcopy(changes))
            record["id"] = key
            return copy.deepcopy(record)

    def _lock_for(self, key: str) -> threading.RLock:
        with self._key_locks_guard:
            lock = self._key_locks.get(key)
            if lock is None:
                lock = threading.RLock()
                self._key_locks[key] = lock
            return lock

    @contextmanager
    def critical_section(self, key: str) -> Iterator[None]:
        lock = self._lock_for(key)
        with lock:
            outermost = self._journal() is None
            if outermost:
                self._local.journal = {}
            try:
                yield
            except BaseException:
                if outermost:
                    self._rollback()
                raise
            finally:
                if outermost:
                    self._local.journal = None

    def _rollback(self) -> None:
        journal = self._journal() or {}
        with self._data_lock:
            for (collection, record_id), previous in journal.items():
                if previous is None:
                    self._data[collection].pop(record_id, None)
                else:
                    self._data[collection][record_id] = previous
        logger.warning("Critical section aborted; rolled back %d record(s)", len(journal))
