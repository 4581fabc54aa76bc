from __future__ import annotations

from typing import Any

from ...logging import get_logger
from ...records import Post, RecordStore

logger = get_logger(__name__)


def resolve_post_by_slug(
    parent: Any, args: dict[str, Any], context: dict[str, Any]
) -> Post | None:
    """Get the first post with the given slug, or ``None``."""
    _ = parent
    store: RecordStore[Post] = context["store"]
    post = store.find_one(slug=args["slug"])
    if post is None:
        logger.info("Post not found", slug=args["slug"])
    return post
