"""Key-value stores holding the serialized order collection."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Dict, Optional, Protocol

from sqlalchemy.exc import SQLAlchemyError

from ..common.db.session import get_session
from ..common.models.kv_entry import KeyValueEntry
from ..common.services.logging import log_event


class OrderStore(Protocol):
    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, blob: str) -> bool:
        ...

    def remove(self, key: str) -> bool:
        ...


class MemoryOrderStore:
    """Dict-backed store; lives as long as the process."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, blob: str) -> bool:
        self._data[key] = blob
        return True

    def remove(self, key: str) -> bool:
        self._data.pop(key, None)
        return True


class JsonFileOrderStore:
    """One ``<key>.json`` file per key under ``data_dir``."""

    _unsafe = re.compile(r"[^A-Za-z0-9_.-]")

    def __init__(self, data_dir: Path) -> None:
        self._data_dir = Path(data_dir)
        self._data_dir.mkdir(parents=True, exist_ok=True)

    def path_for(self, key: str) -> Path:
        return self._data_dir / (self._unsafe.sub("_", key) + ".json")

    def get(self, key: str) -> Optional[str]:
        path = self.path_for(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            log_event("error", "store.read_failed", store="json", key=key, error=str(exc))
            return None

    def set(self, key: str, blob: str) -> bool:
        path = self.path_for(key)
        tmp = path.with_suffix(".json.tmp")
        try:
            tmp.write_text(blob, encoding="utf-8")
            tmp.replace(path)
        except OSError as exc:
            log_event("error", "store.write_failed", store="json", key=key, error=str(exc))
            return False
        return True

    def remove(self, key: str) -> bool:
        try:
            self.path_for(key).unlink()
        except FileNotFoundError:
            return True
        except OSError as exc:
            log_event("error", "store.write_failed", store="json", key=key, error=str(exc))
            return False
        return True


class SqlOrderStore:
    """Stores blobs in the ``kv_entry`` table."""

    def __init__(self, session_factory=get_session):
        self._session_factory = session_factory

    def get(self, key: str) -> Optional[str]:
        try:
            with self._session_factory() as session:
                row = session.query(KeyValueEntry).filter(KeyValueEntry.key == key).first()
                return row.value if row else None
        except SQLAlchemyError as exc:
            log_event("error", "store.read_failed", store="sql", key=key, error=str(exc))
            return None

    def set(self, key: str, blob: str) -> bool:
        try:
            with self._session_factory() as session:
                row = session.query(KeyValueEntry).filter(KeyValueEntry.key == key).first()
                if row:
                    row.value = blob
                else:
                    session.add(KeyValueEntry(key=key, value=blob))
                session.flush()
        except SQLAlchemyError as exc:
            log_event("error", "store.write_failed", store="sql", key=key, error=str(exc))
            return False
        return True

    def remove(self, key: str) -> bool:
        try:
            with self._session_factory() as session:
                session.query(KeyValueEntry).filter(KeyValueEntry.key == key).delete()
        except SQLAlchemyError as exc:
            log_event("error", "store.write_failed", store="sql", key=key, error=str(exc))
            return False
        return True
