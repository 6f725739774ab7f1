"""
Key-value persistence adapters.

Every adapter stores opaque strings under string keys; the repository owns
the JSON document format. Writes are last-write-wins with no locking.
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Protocol

from sqlalchemy.orm import sessionmaker

from healthpath.db.models import KeyValue
from healthpath.db.session import init_db, make_engine, make_session_factory
from healthpath.logging_config import get_logger


logger = get_logger(__name__)


class StoragePort(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...


class MemoryStorage:
    def __init__(self, initial: Optional[Mapping[str, str]] = None) -> None:
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value


class JsonFileStorage:
    """All keys in one JSON object on disk, rewritten on every set."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def _read_all(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("Storage file unreadable, treating as empty", path=str(self.path), error=str(e))
            return {}
        if not isinstance(data, dict):
            return {}
        return {str(k): v for k, v in data.items()}

    def get(self, key: str) -> Optional[str]:
        value = self._read_all().get(key)
        if value is not None and not isinstance(value, str):
            # Foreign entries are left untouched on disk.
            logger.warning("Ignoring non-string storage entry", path=str(self.path), key=key)
            return None
        return value

    def set(self, key: str, value: str) -> None:
        data = self._read_all()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
        tmp.replace(self.path)


class SqlStorage:
    def __init__(self, session_factory: sessionmaker) -> None:
        self.session_factory = session_factory

    @classmethod
    def from_url(cls, db_url: str) -> "SqlStorage":
        engine = make_engine(db_url)
        init_db(engine)
        return cls(make_session_factory(engine))

    def get(self, key: str) -> Optional[str]:
        db = self.session_factory()
        try:
            row = db.get(KeyValue, key)
            return row.value if row is not None else None
        finally:
            db.close()

    def set(self, key: str, value: str) -> None:
        db = self.session_factory()
        try:
            row = db.get(KeyValue, key)
            if row is None:
                db.add(KeyValue(key=key, value=value))
            else:
                row.value = value
            db.commit()
        finally:
            db.close()


def create_storage(cfg: Mapping[str, Any]) -> StoragePort:
    """Build the adapter named by storage.backend in the config."""
    storage_cfg = cfg.get("storage", {})
    backend = storage_cfg.get("backend", "memory")
    if backend == "memory":
        return MemoryStorage()
    if backend == "json":
        return JsonFileStorage(storage_cfg["path"])
    if backend == "sql":
        return SqlStorage.from_url(storage_cfg["db_url"])
    raise ValueError(f"Unknown storage backend: {backend}")
