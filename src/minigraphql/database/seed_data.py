"""
Reusable seed data functions for database initialization.

This module provides the mock tutorials and posts, the wipe-and-reseed routine
run at startup, and the bulk load that hydrates the in-memory stores from a
collection.
"""

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel

from ..config import settings
from ..logging import get_logger
from ..records import Author, Comment, Post, RecordStore, Tutorial
from .collection import DocumentCollection
from .connection import init_database

logger = get_logger(__name__)

R = TypeVar("R", bound=BaseModel)


def mock_tutorials() -> list[Tutorial]:
    """The two tutorials every tutorial service starts with."""
    author = Author(name="Elliot Forbes", tutorials=[1, 2])
    return [
        Tutorial(
            id=1,
            title="Go GraphQL Tutorial",
            author=author,
            comments=[Comment(body="First Comment")],
        ),
        Tutorial(
            id=2,
            title="Go GraphQL Tutorial - Part 2",
            author=author.model_copy(deep=True),
            comments=[Comment(body="Second Comment")],
        ),
    ]


def mock_posts() -> list[Post]:
    """The three posts every post service starts with."""
    return [
        Post(id="1", title="First post", slug="first-post"),
        Post(id="2", title="Second post", slug="second-post"),
        Post(id="3", title="Third post", slug="third-post"),
    ]


def cleanup(collection: DocumentCollection) -> int:
    """Remove all mock data from a collection."""
    logger.info("Cleaning up collection", collection=collection.name)
    return collection.remove_all()


def seed_collection(collection: DocumentCollection, records: list[R]) -> int:
    """
    Wipe a collection and insert ``records`` as documents.

    Args:
        collection: Target collection
        records: Records to store, in order

    Returns:
        Number of documents inserted
    """
    cleanup(collection)
    inserted = collection.insert(*(record.model_dump(mode="json") for record in records))
    logger.info("Mock data added successfully", collection=collection.name, count=inserted)
    return inserted


def load_records(collection: DocumentCollection, model: type[R]) -> list[R]:
    """Bulk-load every document of a collection as ``model`` instances."""
    return [model.model_validate(document) for document in collection.find_all()]


def hydrate_store(store: RecordStore[Any], collection: DocumentCollection) -> int:
    """
    Replace a store's contents with the documents of a collection.

    Returns:
        Number of records loaded
    """
    records = load_records(collection, store.model)
    store.replace_all(records)
    return len(records)


def seed_initial_data() -> dict[str, int]:
    """
    Seed all mock data required by the services.

    Returns:
        Number of documents inserted per collection
    """
    logger.info("Seeding mock data")

    counts = {
        settings.tutorial_collection: seed_collection(
            DocumentCollection(settings.tutorial_collection), mock_tutorials()
        ),
        settings.post_collection: seed_collection(
            DocumentCollection(settings.post_collection), mock_posts()
        ),
    }

    logger.info("Database seeding completed", counts=counts)
    return counts


def collection_for(service_name: str) -> DocumentCollection:
    """The collection backing a service's store."""
    names = {
        "tutorial": settings.tutorial_collection,
        "post": settings.post_collection,
    }
    return DocumentCollection(names[service_name])


def load_stores(stores: dict[str, RecordStore[Any]], seed: bool = True) -> dict[str, int]:
    """
    Optionally reseed the collections, then hydrate each store from its collection.

    Args:
        stores: Stores keyed by service name (``"tutorial"``, ``"post"``)
        seed: Wipe and reseed the mock data first

    Returns:
        Number of records loaded per service
    """
    init_database()

    if seed:
        seed_initial_data()

    loaded = {}
    for name, store in stores.items():
        loaded[name] = hydrate_store(store, collection_for(name))
        logger.info("Service store hydrated", service=name, records=loaded[name])
    return loaded
