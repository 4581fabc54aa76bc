"""
In-memory record store shared by concurrent requests.
"""

import threading
from collections.abc import Callable, Hashable, Iterable
from typing import Any, Generic, TypeVar

from pydantic import BaseModel

from ..logging import get_logger

logger = get_logger(__name__)

R = TypeVar("R", bound=BaseModel)

IdFactory = Callable[[list[Any]], Any]


class RecordStoreError(Exception):
    """Base class for record store errors."""


class DuplicateRecordError(RecordStoreError):
    """A record with the same identifier is already stored."""


def next_int_id(existing: list[Any]) -> int:
    """Next integer identifier: one past the largest stored id, starting at 1."""
    return max((i for i in existing if isinstance(i, int)), default=0) + 1


def next_str_id(existing: list[Any]) -> str:
    """Next string identifier for stores whose ids are numeric strings."""
    numeric = [int(i) for i in existing if isinstance(i, str) and i.isdigit()]
    return str(max(numeric, default=0) + 1)


class RecordStore(Generic[R]):
    """
    Ordered collection of records with unique identifiers.

    Records keep insertion order and are never removed except by
    ``replace_all``. All access goes through a single re-entrant lock so the
    store can be read and appended to from concurrent request threads.
    """

    def __init__(self, model: type[R], name: str, id_factory: IdFactory = next_int_id):
        self.model = model
        self.name = name
        self._id_factory = id_factory
        self._records: list[R] = []
        self._lock = threading.RLock()

    def get_by_id(self, record_id: Hashable) -> R | None:
        """
        Return the first record whose id equals ``record_id``.

        Absence is not an error; ``None`` is returned.
        """
        with self._lock:
            for record in self._records:
                if record.id == record_id:  # type: ignore[attr-defined]
                    return record
        return None

    def find_one(self, **criteria: Any) -> R | None:
        """Return the first record whose attributes match all ``criteria``."""
        with self._lock:
            for record in self._records:
                if all(getattr(record, key, None) == value for key, value in criteria.items()):
                    return record
        return None

    def list_all(self) -> list[R]:
        """Return a snapshot of every record in insertion order."""
        with self._lock:
            return list(self._records)

    def add(self, record: R) -> R:
        """
        Append a record.

        Raises:
            DuplicateRecordError: If a record with the same id is already stored
        """
        with self._lock:
            record_id = record.id  # type: ignore[attr-defined]
            if any(existing.id == record_id for existing in self._records):  # type: ignore[attr-defined]
                raise DuplicateRecordError(
                    f"Record with id {record_id!r} already exists in store '{self.name}'"
                )
            self._records.append(record)
        logger.debug("Record added", store=self.name, record_id=record_id)
        return record

    def create(self, **fields: Any) -> R:
        """Build a record from ``fields`` with a store-assigned id and append it."""
        with self._lock:
            ids = [record.id for record in self._records]  # type: ignore[attr-defined]
            record = self.model(**{**fields, "id": self._id_factory(ids)})
            return self.add(record)

    def replace_all(self, records: Iterable[R]) -> None:
        """
        Replace the store's contents, keeping the given order.

        Raises:
            DuplicateRecordError: If ``records`` contains repeated ids; the
                previous contents are kept in that case
        """
        incoming = list(records)
        seen: set[Any] = set()
        for record in incoming:
            record_id = record.id  # type: ignore[attr-defined]
            if record_id in seen:
                raise DuplicateRecordError(
                    f"Record with id {record_id!r} appears more than once for store '{self.name}'"
                )
            seen.add(record_id)

        with self._lock:
            self._records = incoming
        logger.info("Store loaded", store=self.name, count=len(incoming))

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def __contains__(self, record_id: object) -> bool:
        return self.get_by_id(record_id) is not None  # type: ignore[arg-type]
