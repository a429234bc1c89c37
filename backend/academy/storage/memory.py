"""In-memory storage backend."""

import itertools
import threading
from collections import defaultdict
from typing import Any, Optional

from academy.storage.base import RecordT, Storage


class MemoryStorage(Storage):
    """Keeps every record in per-entity dicts.

    Each entity type owns its own id counter, so ids are never reused even
    after a delete. Records are copied on the way in and out; callers cannot
    change stored state except through the storage operations.
    """

    def __init__(self) -> None:
        self._tables: dict[type, dict[int, Any]] = defaultdict(dict)
        self._counters: dict[type, itertools.count] = defaultdict(lambda: itertools.count(1))
        # FastAPI runs sync handlers on a threadpool.
        self._lock = threading.RLock()

    def _insert(self, entity: type[RecordT], values: dict[str, Any]) -> RecordT:
        with self._lock:
            record_id = next(self._counters[entity])
            record = entity.model_validate({**values, "id": record_id})
            self._tables[entity][record_id] = record
            return record.model_copy(deep=True)

    def _get(self, entity: type[RecordT], record_id: int) -> Optional[RecordT]:
        with self._lock:
            record = self._tables[entity].get(record_id)
            return record.model_copy(deep=True) if record is not None else None

    def _update(self, entity: type[RecordT], record_id: int, values: dict[str, Any]) -> Optional[RecordT]:
        with self._lock:
            current = self._tables[entity].get(record_id)
            if current is None:
                return None
            record = entity.model_validate({**current.model_dump(), **values})
            self._tables[entity][record_id] = record
            return record.model_copy(deep=True)

    def _delete(self, entity: type[RecordT], record_id: int) -> bool:
        with self._lock:
            return self._tables[entity].pop(record_id, None) is not None

    def _list(self, entity: type[RecordT], **equals: Any) -> list[RecordT]:
        with self._lock:
            return [
                record.model_copy(deep=True)
                for record in self._tables[entity].values()
                if all(getattr(record, field) == value for field, value in equals.items())
            ]
