import threading
from typing import Optional
from sqlalchemy import select
from sqlalchemy.orm import sessionmaker
from medflow.database import session_scope
from medflow.models.storage_entry import StorageEntry


class KeyValueStorage:
    """String key/value namespace persisted in the ``storage_entries`` table.

    Each call runs in its own short transaction and writes replace the whole
    value. Callers that read, modify and write a value hold ``lock`` for the
    whole sequence so concurrent requests do not drop each other's writes.
    """

    def __init__(self, session_factory: sessionmaker, namespace: str = "medflow"):
        self._session_factory = session_factory
        self.namespace = namespace
        self.lock = threading.RLock()

    def key(self, name: str) -> str:
        return f"{self.namespace}_{name}"

    def get_item(self, key: str) -> Optional[str]:
        with session_scope(self._session_factory) as db:
            entry = db.get(StorageEntry, key)
            return entry.value if entry else None

    def set_item(self, key: str, value: str) -> None:
        with session_scope(self._session_factory) as db:
            entry = db.get(StorageEntry, key)
            if entry is None:
                db.add(StorageEntry(key=key, value=value))
            else:
                entry.value = value

    def remove_item(self, key: str) -> None:
        with session_scope(self._session_factory) as db:
            entry = db.get(StorageEntry, key)
            if entry is not None:
                db.delete(entry)

    def keys(self) -> list[str]:
        with session_scope(self._session_factory) as db:
            result = db.execute(select(StorageEntry.key).order_by(StorageEntry.key))
            return list(result.scalars().all())
