"""
Named document collections stored in the ``documents`` table
"""

from typing import Any

from sqlalchemy import delete, select

from ..dbmodels import Documents
from ..logging import get_logger
from .connection import get_session

logger = get_logger(__name__)


class DocumentCollection:
    """
    A named collection of JSON documents.

    Each call runs in its own session, so a collection handle is cheap to
    create and safe to share.
    """

    def __init__(self, name: str):
        self.name = name

    def insert(self, *documents: dict[str, Any]) -> int:
        """Insert documents in order and return how many were written."""
        with get_session() as session:
            session.add_all(Documents(collection=self.name, body=doc) for doc in documents)
        logger.debug("Documents inserted", collection=self.name, count=len(documents))
        return len(documents)

    def remove_all(self) -> int:
        """Delete every document of this collection and return how many were removed."""
        with get_session() as session:
            result = session.execute(delete(Documents).where(Documents.collection == self.name))
            removed = result.rowcount or 0
        logger.debug("Documents removed", collection=self.name, count=removed)
        return removed

    def find_all(self) -> list[dict[str, Any]]:
        """Return every document of this collection in insertion order."""
        with get_session() as session:
            stmt = (
                select(Documents.body)
                .where(Documents.collection == self.name)
                .order_by(Documents.id)
            )
            return [dict(body) for body in session.scalars(stmt)]

    def find_one(self, **criteria: Any) -> dict[str, Any] | None:
        """Return the first document whose top-level keys match ``criteria``."""
        for document in self.find_all():
            if all(document.get(key) == value for key, value in criteria.items()):
                return document
        return None

    def count(self) -> int:
        return len(self.find_all())

    def __repr__(self) -> str:
        return f"DocumentCollection(name={self.name!r})"
