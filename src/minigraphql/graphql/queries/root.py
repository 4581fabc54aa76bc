"""
Root GraphQL query definitions
"""

from ..core import QUERY, Argument, Field, SchemaRegistry
from ..resolvers.post import resolve_post_by_slug
from ..resolvers.tutorial import resolve_tutorial_by_id, resolve_tutorial_list


def register_tutorial_query(registry: SchemaRegistry) -> None:
    """Root query of the tutorial service."""
    registry.define_root(
        QUERY,
        {
            "tutorial": Field(
                "Tutorial",
                resolver=resolve_tutorial_by_id,
                args={"id": Argument("Int")},
                description="Get Tutorial By ID",
            ),
            "list": Field(
                "[Tutorial]",
                resolver=resolve_tutorial_list,
                description="Get Tutorial List",
            ),
        },
        name="RootQuery",
    )


def register_post_query(registry: SchemaRegistry) -> None:
    """Root query of the post service."""
    registry.define_root(
        QUERY,
        {
            "post": Field(
                "Post",
                resolver=resolve_post_by_slug,
                args={"slug": Argument("String!")},
                description="Get Post By slug",
            ),
        },
    )
