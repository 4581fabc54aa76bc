"""
Tutorial resolvers for the GraphQL API
"""

from __future__ import annotations

from typing import Any

from ...logging import get_logger
from ...records import RecordStore, Tutorial

logger = get_logger(__name__)


def _store(context: dict[str, Any]) -> RecordStore[Tutorial]:
    return context["store"]


# Query resolvers
def resolve_tutorial_by_id(
    parent: Any, args: dict[str, Any], context: dict[str, Any]
) -> Tutorial | None:
    """
    Resolve a tutorial by its ID.

    A missing ``id`` argument or an unknown id resolves to ``None`` without an error.
    """
    _ = parent
    tutorial_id = args.get("id")
    if tutorial_id is None:
        return None

    tutorial = _store(context).get_by_id(tutorial_id)
    if tutorial is None:
        logger.info("Tutorial not found", tutorial_id=tutorial_id)
    return tutorial


def resolve_tutorial_list(
    parent: Any, args: dict[str, Any], context: dict[str, Any]
) -> list[Tutorial]:
    """Get every tutorial in insertion order."""
    _ = parent, args
    return _store(context).list_all()


# Mutation resolvers
def create_tutorial(parent: Any, args: dict[str, Any], context: dict[str, Any]) -> Tutorial:
    """Create a tutorial with a store-assigned id and no author or comments."""
    _ = parent
    tutorial = _store(context).create(title=args["title"])
    logger.info("Tutorial created", tutorial_id=tutorial.id, title=tutorial.title)
    return tutorial
