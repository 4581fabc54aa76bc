"""
Post GraphQL type definitions
"""

from ..core import Field, SchemaRegistry


def register_post_types(registry: SchemaRegistry) -> None:
    registry.define_type(
        "Post",
        {
            "id": Field("ID!"),
            "slug": Field("String!"),
            "title": Field("String!"),
        },
    )
