"""Record persistence for extractions and mappings.

Records are plain JSON dicts (``model_dump(mode="json")``) keyed by their
``id`` inside a named collection. The pipeline never touches the store; the
document processor persists results after a run.
"""

import logging
import threading
from abc import ABC, abstractmethod
from copy import deepcopy
from pathlib import Path
from typing import Any, Optional

from legalocr.utils.io_utils import read_json, write_json

logger = logging.getLogger(__name__)

EXTRACTIONS = "extractions"
MAPPINGS = "mappings"
COLLECTIONS = (EXTRACTIONS, MAPPINGS)


class RecordStore(ABC):
    """Minimal document store interface."""

    @abstractmethod
    def insert(self, collection: str, record: dict[str, Any]) -> str:
        """Store a new record and return its id."""

    @abstractmethod
    def get(self, collection: str, record_id: str) -> Optional[dict[str, Any]]:
        """Return the record or None."""

    @abstractmethod
    def update(
        self, collection: str, record_id: str, changes: dict[str, Any]
    ) -> Optional[dict[str, Any]]:
        """Merge ``changes`` into an existing record; None if it does not exist."""

    @abstractmethod
    def delete(self, collection: str, record_id: str) -> bool:
        """Remove a record; False if it did not exist."""

    @abstractmethod
    def list_by_user(self, collection: str, user_id: str) -> list[dict[str, Any]]:
        """Records whose ``user_id`` matches, oldest first."""


def _check_collection(collection: str) -> None:
    if collection not in COLLECTIONS:
        raise ValueError(f"Unknown collection: {collection}")


def _record_id(record: dict[str, Any]) -> str:
    record_id = record.get("id")
    if not record_id:
        raise ValueError("Record has no id")
    return str(record_id)


class InMemoryRecordStore(RecordStore):
    """Thread-safe dict-backed store; contents are lost on restart."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._data: dict[str, dict[str, dict[str, Any]]] = {
            name: {} for name in COLLECTIONS
        }

    def insert(self, collection: str, record: dict[str, Any]) -> str:
        _check_collection(collection)
        record_id = _record_id(record)
        with self._lock:
            self._data[collection][record_id] = deepcopy(record)
        return record_id

    def get(self, collection: str, record_id: str) -> Optional[dict[str, Any]]:
        _check_collection(collection)
        with self._lock:
            record = self._data[collection].get(record_id)
            return deepcopy(record) if record is not None else None

    def update(
        self, collection: str, record_id: str, changes: dict[str, Any]
    ) -> Optional[dict[str, Any]]:
        _check_collection(collection)
        with self._lock:
            record = self._data[collection].get(record_id)
            if record is None:
                return None
            record.update(deepcopy(changes))
            record["id"] = record_id
            return deepcopy(record)

    def delete(self, collection: str, record_id: str) -> bool:
        _check_collection(collection)
        with self._lock:
            return self._data[collection].pop(record_id, None) is not None

    def list_by_user(self, collection: str, user_id: str) -> list[dict[str, Any]]:
        _check_collection(collection)
        with self._lock:
            return [
                deepcopy(record)
                for record in self._data[collection].values()
                if record.get("user_id") == user_id
            ]


class JsonFileRecordStore(RecordStore):
    """One UTF-8 JSON file per record: ``<root>/<collection>/<id>.json``."""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)
        self._lock = threading.Lock()
        for name in COLLECTIONS:
            (self.root / name).mkdir(parents=True, exist_ok=True)
        logger.info(f"JsonFileRecordStore initialized. root={self.root}")

    def _path(self, collection: str, record_id: str) -> Path:
        _check_collection(collection)
        # ids are uuids; refuse anything that could escape the directory
        if not record_id or "/" in record_id or "\\" in record_id or record_id.startswith("."):
            raise ValueError(f"Invalid record id: {record_id!r}")
        return self.root / collection / f"{record_id}.json"

    def insert(self, collection: str, record: dict[str, Any]) -> str:
        record_id = _record_id(record)
        with self._lock:
            write_json(self._path(collection, record_id), record)
        return record_id

    def get(self, collection: str, record_id: str) -> Optional[dict[str, Any]]:
        path = self._path(collection, record_id)
        with self._lock:
            if not path.exists():
                return None
            return read_json(path)

    def update(
        self, collection: str, record_id: str, changes: dict[str, Any]
    ) -> Optional[dict[str, Any]]:
        path = self._path(collection, record_id)
        with self._lock:
            if not path.exists():
                return None
            record = read_json(path)
            record.update(changes)
            record["id"] = record_id
            write_json(path, record)
        return record

    def delete(self, collection: str, record_id: str) -> bool:
        path = self._path(collection, record_id)
        with self._lock:
            if not path.exists():
                return False
            path.unlink()
        return True

    def list_by_user(self, collection: str, user_id: str) -> list[dict[str, Any]]:
        _check_collection(collection)
        records = []
        with self._lock:
            paths = sorted(
                (self.root / collection).glob("*.json"), key=lambda p: p.stat().st_mtime
            )
            for path in paths:
                record = read_json(path)
                if record.get("user_id") == user_id:
                    records.append(record)
        return records


def build_record_store(directory: Optional[str]) -> RecordStore:
    """File-backed store when a directory is configured, in-memory otherwise."""
    if directory:
        return JsonFileRecordStore(directory)
    return InMemoryRecordStore()
